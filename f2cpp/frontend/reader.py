# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Reading of fixed-form source files into logical lines.
"""

import codecs
from pathlib import Path

from f2cpp.config import config
from f2cpp.ir import Line, LineKind
from f2cpp.logging import warning, debug


__all__ = ['read_file', 'is_comment_line', 'is_comment_or_empty_line',
           'expand_tabs', 'join_continuation_lines']


def read_file(file_path):
    """
    Reads a file and returns the content as string.

    This convenience function is provided to catch read errors due to bad
    character encodings in the file. It skips over these characters and
    prints a warning for the first occurence of such a character.
    """
    filepath = Path(file_path)
    try:
        with filepath.open('r', encoding='utf-8') as f:
            source = f.read()
    except UnicodeDecodeError as excinfo:
        warning('Skipping bad character in input file "%s": %s',
                str(filepath), str(excinfo))
        kwargs = {'mode': 'r', 'encoding': 'utf-8', 'errors': 'ignore'}
        with codecs.open(filepath, **kwargs) as f:
            source = f.read()
    return source


def is_comment_line(text):
    """
    Fixed-form comment lines carry ``c``, ``*`` or ``!`` in column 1;
    a ``!`` as first non-blank character is accepted as well.
    """
    return bool(text) and (text[0] in 'cC*!' or text.lstrip().startswith('!'))


def is_comment_or_empty_line(text):
    return is_comment_line(text) or not text.strip()


def expand_tabs(source, tab_width=None):
    """
    Replace every tab character by :data:`tab_width` spaces
    (default taken from the ``tab-width`` config option).
    """
    tab_width = config['tab-width'] if tab_width is None else tab_width
    return source.replace('\t', ' ' * tab_width)


def _continuation_text(text):
    """
    Return the continued statement text if :data:`text` is a continuation
    line, or `None` otherwise.
    """
    stripped = text.lstrip()
    if stripped.startswith('$'):
        return stripped[1:].strip()
    if len(text) > 5 and not text[:5].strip() and text[5] not in ' 0':
        return text[6:].strip()
    return None


def join_continuation_lines(source):
    """
    Split :data:`source` into :any:`Line` objects, appending every
    continuation line to the preceding non-comment line.

    Each resulting line keeps the line number of its first physical line.
    """
    lines = []
    prev = None
    for lineno, text in enumerate(source.splitlines(), start=1):
        text = text.rstrip()
        if is_comment_or_empty_line(text):
            kind = LineKind.COMMENT if text.strip() else LineKind.BLANK
            lines.append(Line(text, kind=kind, lineno=lineno))
            continue

        continued = _continuation_text(text)
        if continued is not None and prev is not None:
            debug(f'[f2cpp] Joining continuation line {lineno} to line {prev.lineno}')
            prev.text = f'{prev.text} {continued}'
            continue

        prev = Line(text, lineno=lineno)
        lines.append(prev)
    return lines
