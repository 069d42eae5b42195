# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

from importlib.metadata import version, PackageNotFoundError

# Import the global configuration map
from f2cpp.config import *  # noqa

from f2cpp.tools import *  # noqa
from f2cpp.logging import *  # noqa
from f2cpp.types import *  # noqa
from f2cpp.ir import *  # noqa
from f2cpp.diagnostics import *  # noqa
from f2cpp.unit import *  # noqa
from f2cpp.frontend import *  # noqa
from f2cpp.transformations import *  # noqa
from f2cpp.backend import *  # noqa
from f2cpp.sourcefile import *  # noqa


try:
    __version__ = version("f2cpp")
except PackageNotFoundError:
    # package is not installed
    pass


# Add flag to trigger an initial print out of the global config
config.register('print-config', False, env_variable='F2CPP_PRINT_CONFIG', preprocess=as_bool)

# Define f2cpp's global config options
config.register('log-level', 'INFO', env_variable='F2CPP_LOGGING',
                callback=set_log_level, preprocess=lambda i: log_levels[i])

config.register('debug', None, env_variable='F2CPP_DEBUG',
                callback=set_excepthook, preprocess=lambda i: auto_post_mortem_debugger if as_bool(i) else None)

# Number of spaces a tab character expands to in fixed-form source
config.register('tab-width', 8, env_variable='F2CPP_TAB_WIDTH', preprocess=int)

# Iteration bound of the subscript simplifier
config.register('simplify-passes', 10, env_variable='F2CPP_SIMPLIFY_PASSES', preprocess=int)

# Emit synthesised declarations before the translated routine
config.register('prototypes-first', False, env_variable='F2CPP_PROTOTYPES_FIRST', preprocess=as_bool)

# Trigger configuration initialisation, including
# a scan of the current environment variables
config.initialize()

if config['print-config']:
    config.print_state()
