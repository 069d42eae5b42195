# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
f2cpp head script translating a fixed-form Fortran 77 routine into C-style C++.
"""

from pathlib import Path

import click

from f2cpp import config as f2cpp_config, Sourcefile, info, warning
from f2cpp.cli.common import cli, output_options
from f2cpp.logging import logger, add_file_handler, log_levels


__all__ = ['cli', 'convert', 'symbols']


LOG_LEVEL_CHOICES = ['debug', 'detail', 'perf', 'info', 'warning', 'error']


@cli.command()
@output_options
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help='Path of the generated C++ file (default: write to stdout)')
@click.option('--log-level', '-l', default='info', envvar='F2CPP_LOGGING',
              type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
              help='Log level to output during translation')
@click.option('--log-file', type=click.Path(dir_okay=False), default=None,
              help='Additionally write the log, including all diagnostics, to this file')
def convert(output_opts, source, output, log_level, log_file):
    """
    Translate the Fortran routine in SOURCE into C++.

    Malformed or ambiguous input never aborts the translation; problems
    are reported as ``// [f2cpp]`` comments in the generated source.
    """
    f2cpp_config['log-level'] = log_level

    handler = add_file_handler(log_file, level=log_levels['DEBUG']) if log_file else None
    try:
        info(f'[f2cpp] Translating {source}')
        sourcefile = Sourcefile.from_file(source)
        cpp = sourcefile.to_cpp(
            prototypes_first=output_opts.prototypes_first, passes=output_opts.simplify_passes
        )

        if sourcefile.diagnostics:
            warning(f'[f2cpp] {len(sourcefile.diagnostics)} diagnostics reported for {source}')

        if output is None:
            click.echo(cpp, nl=False)
        else:
            Sourcefile.to_file(source=cpp, path=Path(output))
    finally:
        if handler is not None:
            logger.removeHandler(handler)
            handler.close()


@cli.command()
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
def symbols(source):
    """
    Print the symbol table inferred for the Fortran routine in SOURCE.
    """
    sourcefile = Sourcefile.from_file(source).translate()

    click.echo(f'{"name":<16} {"kind":<10} {"type":<22} {"dimensions":<20} {"argument":<8} value')
    for symbol in sourcefile.symbols.values():
        dims = ', '.join(symbol.dimensions)
        value = symbol.constant_value if symbol.constant_value is not None else ''
        argument = 'yes' if symbol.is_argument else ''
        click.echo(f'{symbol.name:<16} {symbol.kind.value:<10} {symbol.ctype:<22} {dims:<20} '
                   f'{argument:<8} {value}'.rstrip())
