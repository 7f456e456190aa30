# distutils.util.strtobool went away with distutils in python 3.12
import os

_TRUE = {'y', 'yes', 't', 'true', 'on', '1'}
_FALSE = {'n', 'no', 'f', 'false', 'off', '0'}


def strtobool(value):
    v = str(value).strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError('"{}" is not a valid bool value'.format(value))


def env_bool(name, default=False):
    """Read a boolean switch from the environment, `default` when unset or empty."""
    value = os.getenv(name, '')
    if not value.strip():
        return default
    # .strip('"') saves people who wrap the value in quotes in docker-compose
    return strtobool(value.strip('"'))
