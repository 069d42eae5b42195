# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

from dataclasses import dataclass, asdict
from functools import wraps

import click
from click_option_group import optgroup

from f2cpp.config import config
from f2cpp.tools.util import auto_post_mortem_debugger, set_excepthook


__all__ = ['cli', 'output_options', 'OutputOptions']


@click.group()
@click.option(
    '--debug/--no-debug', default=False, show_default=True,
    help=('Enable / disable debug mode. This automatically attaches '
          'a debugger when exceptions occur')
)
def cli(debug):
    if debug:
        set_excepthook(hook=auto_post_mortem_debugger)


@dataclass
class OutputOptions:
    """
    Storage object for options that control the generated C++ source.
    """

    prototypes_first: bool = False
    simplify_passes: int = 10

    @property
    def asdict(self):
        return asdict(self)


def output_options(func):
    """
    Option group configuring the translation output.
    """

    @optgroup.group('Output options',
                    help='Options controlling the generated C++ source.')
    @optgroup.option('--prototypes-first/--prototypes-last', default=None,
                     help='Emit synthesised declarations before or after the routine '
                          '(default: prototypes-first config option)')
    @optgroup.option('--simplify-passes', type=click.IntRange(min=0), default=None,
                     help='Iteration bound of the subscript simplifier '
                          '(default: simplify-passes config option)')
    @click.pass_context
    @wraps(func)
    def process_output_options(ctx, *args, **kwargs):
        outputopts = ctx.ensure_object(OutputOptions)
        prototypes_first = kwargs.pop('prototypes_first')
        simplify_passes = kwargs.pop('simplify_passes')
        outputopts.prototypes_first = bool(
            config['prototypes-first'] if prototypes_first is None else prototypes_first
        )
        outputopts.simplify_passes = config['simplify-passes'] if simplify_passes is None else simplify_passes
        return ctx.invoke(func, *args, outputopts, **kwargs)

    return process_output_options
