# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Global configuration of the translator, with values taken from the
environment at import time.
"""

import os
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Optional


__all__ = ['Configuration', 'ConfigOption', 'config', 'config_override', 'as_bool']


def as_bool(value):
    """
    Convert config values given as ints or environment strings to :any:`bool`.
    """
    if isinstance(value, str):
        return value.strip().lower() not in ('', '0', 'false', 'no', 'off')
    return bool(value)


@dataclass(frozen=True)
class ConfigOption:
    """
    Registration record of a single configuration option.

    Attributes
    ----------
    key : str
        Name of the option, e.g. ``tab-width``
    default :
        Raw value used when the environment does not provide one
    env_variable : str, optional
        Environment variable holding a raw value for the option
    preprocess : callable, optional
        Turns raw (string) values into the stored value
    callback : callable, optional
        Invoked with the stored value after every update
    """

    key: str
    default: Any = None
    env_variable: Optional[str] = None
    preprocess: Optional[Callable] = None
    callback: Optional[Callable] = None

    def raw_value(self):
        if self.env_variable is None:
            return self.default
        return os.environ.get(self.env_variable, self.default)

    def convert(self, value):
        return self.preprocess(value) if self.preprocess else value


class Configuration(OrderedDict):
    """
    Dictionary of registered :any:`ConfigOption` values.

    Assigning to a key that was never registered raises :any:`KeyError`;
    every assignment is passed through the option's ``preprocess`` function
    and announced to its ``callback``.

    .. code-block::

        config = Configuration('f2cpp')
        config.register('tab-width', 8, env_variable='F2CPP_TAB_WIDTH', preprocess=int)
        config.initialize()
        width = config['tab-width']
    """

    def __init__(self, name=None):
        super().__init__()
        self.name = name
        self.options = {}

    def register(self, key, default, env_variable=None, preprocess=None, callback=None):
        """
        Register a configuration option; its value is set by :meth:`initialize`.
        """
        self.options[key] = ConfigOption(
            key, default=default, env_variable=env_variable, preprocess=preprocess, callback=callback
        )
        super().__setitem__(key, default)

    def initialize(self):
        """
        Set every registered option from its environment variable or default.
        """
        for option in self.options.values():
            self[option.key] = option.raw_value()

    def print_state(self):
        from f2cpp.logging import info  # pylint: disable=import-outside-toplevel
        info(f'[f2cpp] {self.name}:')
        width = max((len(key) for key in self), default=0)
        for key, value in self.items():
            env_variable = self.options[key].env_variable
            info(f'  {key:<{width}} = {value}' + (f'  ({env_variable})' if env_variable else ''))

    def __setitem__(self, key, value):
        option = self.options.get(key)
        if option is None:
            raise KeyError(f'Unknown configuration option {key}')

        value = option.convert(value)
        super().__setitem__(key, value)
        if option.callback:
            option.callback(value)


config = Configuration('f2cpp configuration')


@contextmanager
def config_override(settings):
    """
    Temporarily set the options in :data:`settings` and restore their
    previous values on exit, including the callbacks' side effects.
    """
    original = {key: config[key] for key in settings}
    for key, value in settings.items():
        config[key] = value

    try:
        yield
    finally:
        for key, value in original.items():
            config[key] = value
