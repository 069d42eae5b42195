# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.
"""
Logger classes and logging utilities of the f2cpp translator.
"""

import logging
import sys

import coloredlogs


__all__ = ['logger', 'log_levels', 'set_log_level', 'FileLogger', 'add_file_handler',
           'debug', 'detail', 'perf', 'info', 'warning', 'error', 'log']


# Initialize base logger
logger = logging.getLogger('F2CPP')
stream_handler = logging.StreamHandler()
logger.addHandler(stream_handler)


# Define available log levels
DEBUG = logging.DEBUG
INFO = logging.INFO
WARNING = logging.WARNING
ERROR = logging.ERROR
PERF = 15
DETAIL = 12

logging.addLevelName(PERF, 'PERF')
logging.addLevelName(DETAIL, 'DETAIL')

# Internally accepted log levels
log_levels = {
    'DEBUG': DEBUG,
    'DETAIL': DETAIL,
    'PERF': PERF,
    'INFO': INFO,
    'WARNING': WARNING,
    'ERROR': ERROR,
    # Lower case keywords for env variables
    'debug': DEBUG,
    'detail': DETAIL,
    'perf': PERF,
    'info': INFO,
    'warning': WARNING,
    'error': ERROR,
    # Enum keys for idempotence
    DEBUG: DEBUG,
    DETAIL: DETAIL,
    PERF: PERF,
    INFO: INFO,
    WARNING: WARNING,
    ERROR: ERROR,
}

# Internally used log colours (in simple mode)
NOCOLOR = '%s'
RED = '\033[1;37;31m%s\033[0m'
BLUE = '\033[1;37;34m%s\033[0m'
GREEN = '\033[1;37;32m%s\033[0m'
colors = {
    DEBUG: NOCOLOR,
    DETAIL: GREEN,
    PERF: GREEN,
    INFO: GREEN,
    WARNING: BLUE,
    ERROR: RED,
}


def FileLogger(name, filename, level=None, file_level=None, fmt=None, mode='a'):
    """
    Logger that emits to a single logfile, as well as stdout/stderr.
    """
    level = level or INFO
    file_level = file_level or level

    _logger = logging.getLogger(name)
    _logger.setLevel(level if level <= file_level else file_level)
    add_file_handler(filename, level=file_level, fmt=fmt, mode=mode, _logger=_logger)
    coloredlogs.install(level=level, logger=_logger)
    return _logger


def add_file_handler(filename, level=None, fmt=None, mode='a', _logger=None):
    """
    Attach a file handler to the f2cpp logger, so that translation
    diagnostics of a batch run are kept alongside the generated sources.
    """
    _logger = _logger or logger
    fmt = fmt or '%(asctime)s %(name)s[%(process)d] %(levelname)s %(message)s'
    fh = logging.FileHandler(str(filename), mode=mode)
    fh.setFormatter(logging.Formatter(fmt))
    fh.setLevel(level or _logger.getEffectiveLevel())
    _logger.addHandler(fh)
    return fh


def set_log_level(level):
    """
    Set the log level for the f2cpp logger.
    """
    if level not in log_levels.values():
        raise ValueError(f'Illegal logging level {level}')

    logger.setLevel(level)


def log(msg, level, *args, **kwargs):
    """
    Wrapper of the main Python's logging function. Print 'msg % args' with
    the severity 'level'.

    :param msg: the message to be printed.
    """
    color = colors[level] if sys.stdout.isatty() and sys.stderr.isatty() else '%s'
    logger.log(level, color % msg, *args, **kwargs)


def debug(msg, *args, **kwargs):
    """
    Logger method for most verbose level of output

    Parameters
    ----------
    msg : str
        Message to log at :any:`DEBUG` level.
    """
    log(msg, DEBUG, *args, **kwargs)

def detail(msg, *args, **kwargs):
    """
    Logger method for detailed, per-stage information.

    Parameters
    ----------
    msg : str
        Message to log at :any:`DETAIL` level.
    """
    log(msg, DETAIL, *args, **kwargs)

def perf(msg, *args, **kwargs):
    """
    Logger method for timing information of individual translation stages.

    Parameters
    ----------
    msg : str
        Message to log at :any:`PERF` level.
    """
    log(msg, PERF, *args, **kwargs)

def info(msg, *args, **kwargs):
    """
    Logger method for high-level progress information.

    Parameters
    ----------
    msg : str
        Message to log at :any:`INFO` level.
    """
    log(msg, INFO, *args, **kwargs)

def warning(msg, *args, **kwargs):
    """
    Logger method for potentially dangerous, but not fatal information,
    such as translation diagnostics.

    Parameters
    ----------
    msg : str
        Message to log at :any:`WARNING` level.
    """
    log(msg, WARNING, *args, **kwargs)

def error(msg, *args, **kwargs):
    """
    Logger method to provide additional information in case of failures.

    Parameters
    ----------
    msg : str
        Message to log at :any:`ERROR` level.
    """
    log(msg, ERROR, *args, **kwargs)
