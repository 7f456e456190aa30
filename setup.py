#!/usr/bin/env python
import codecs
import os.path
import re

from setuptools import setup, find_packages

here = os.path.abspath(os.path.dirname(__file__))


def read(*parts):
    return codecs.open(os.path.join(here, *parts), 'r').read()


def find_version(*file_paths):
    version_file = read(*file_paths)
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                              version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


install_requires = [line.strip() for line in open(os.path.join(here, 'requirements.txt')).readlines()
                    if line.strip() and not line.startswith('#')]

setup(
    name='rasterpdf',
    version=find_version("rasterpdf", "__init__.py"),
    description='Render an element of a live HTML page to a paginated PDF, capturing very tall content in chunks.',
    long_description=open(os.path.join(here, 'README.md')).read(),
    long_description_content_type='text/markdown',
    keywords='html to pdf screenshot playwright chromium cv certificate pagination',
    entry_points={"console_scripts": ["rasterpdf=rasterpdf:main"]},
    zip_safe=False,
    packages=find_packages(include=['rasterpdf', 'rasterpdf.*']),
    package_data={
        'rasterpdf.capture.res': ['*.js'],
        'rasterpdf.templates': ['*.html'],
    },
    include_package_data=True,
    install_requires=install_requires,
    extras_require={
        'test': ['pytest', 'pytest-mock'],
    },
    license="Apache License 2.0",
    python_requires=">= 3.10",
    classifiers=['Intended Audience :: Developers',
                 'Intended Audience :: Education',
                 'Topic :: Multimedia :: Graphics :: Capture :: Screen Capture',
                 'Topic :: Printing',
                 'Topic :: Text Processing :: Markup :: HTML',
                 'Topic :: Utilities'
                 ],
)
