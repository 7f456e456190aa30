#!/usr/bin/env python3

# Render an element of an HTML document (CV preview, publication certificate..) to a paginated PDF

__version__ = '0.3.1'

import getopt
import os
import sys

from loguru import logger

USAGE = ('rasterpdf -i [html file or URL] -o [output.pdf] -e [element id, default cv-preview-content] '
         '-p (browser print mode) -s [device pixel scale] -w [viewport width] -m [print margin] '
         '-n [required page count] -t [title] '
         '-l [debug level - TRACE, DEBUG(default), INFO, SUCCESS, WARNING, ERROR, CRITICAL]')


def get_version():
    return __version__


def configure_logger(logger_level):
    # Without this, a logger will be duplicated
    logger.remove()
    log_level_for_stdout = {'TRACE', 'DEBUG', 'INFO', 'SUCCESS'}
    logger.configure(handlers=[
        {"sink": sys.stdout, "level": logger_level,
         "filter": lambda record: record['level'].name in log_level_for_stdout},
        {"sink": sys.stderr, "level": logger_level,
         "filter": lambda record: record['level'].name not in log_level_for_stdout},
    ])


def main(argv=None):
    from rasterpdf.capture import DEFAULT_ELEMENT_ID
    from rasterpdf.exceptions import PdfGenerationError, BrowserConnectError
    from rasterpdf.pipeline import GenerationOptions, run

    argv = sys.argv[1:] if argv is None else argv

    try:
        opts, args = getopt.getopt(argv, "pi:o:e:s:w:m:n:t:l:", ["help", "version"])
    except getopt.GetoptError:
        print(USAGE)
        sys.exit(2)

    source = None
    output = None
    element_id = DEFAULT_ELEMENT_ID
    browser_print = False
    viewport_width = None
    options = GenerationOptions()

    # Set a default logger level
    logger_level = 'DEBUG'
    # Set a logger level via shell env variable
    if os.getenv("LOGGER_LEVEL"):
        level = os.getenv("LOGGER_LEVEL")
        logger_level = int(level) if level.isdigit() else level.upper()

    try:
        for opt, arg in opts:
            if opt == '--help':
                print(USAGE)
                sys.exit(0)

            if opt == '--version':
                print(get_version())
                sys.exit(0)

            if opt == '-i':
                source = arg

            if opt == '-o':
                output = arg

            if opt == '-e':
                element_id = arg

            if opt == '-p':
                browser_print = True

            if opt == '-s':
                options.device_pixel_scale = int(arg)

            if opt == '-w':
                viewport_width = int(arg)

            if opt == '-m':
                options.print_margin = arg

            if opt == '-n':
                options.expected_pages = int(arg)

            if opt == '-t':
                options.title = arg

            if opt == '-l':
                logger_level = int(arg) if arg.isdigit() else arg.upper()
    except ValueError:
        print(USAGE)
        sys.exit(2)

    try:
        configure_logger(logger_level)
    # Catch negative number or wrong log level name
    except ValueError:
        print("Available log level names: TRACE, DEBUG(default), INFO, SUCCESS,"
              " WARNING, ERROR, CRITICAL")
        sys.exit(2)

    if not source or not output:
        print(USAGE)
        sys.exit(2)

    try:
        run(source=source,
            filename=output,
            element_id=element_id,
            browser_print=browser_print,
            options=options,
            viewport_width=viewport_width)
    except (PdfGenerationError, BrowserConnectError, FileNotFoundError) as e:
        logger.critical(f"Failed to generate PDF: {e}")
        sys.exit(1)
