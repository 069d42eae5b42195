# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Classification of sanitised statement lines into :any:`LineKind` shapes.

Every line is matched exactly once against the ordered list of patterns
in :data:`PATTERN_REGISTRY`; all later stages dispatch on the resulting
kind instead of re-matching ad-hoc expressions.
"""

import re

from codetiming import Timer

from f2cpp.ir import LineKind
from f2cpp.logging import debug, perf
from f2cpp.tools import split_by_top_level_commas
from f2cpp.types import BaseType


__all__ = ['Pattern', 'DoPattern', 'PATTERN_REGISTRY', 'TYPE_KEYWORDS', 'split_label', 'classify_line',
           'classify_lines', 'HEADER_PATTERN', 'DO_PATTERN', 'DECLARATION_PATTERN']


TYPE_KEYWORDS = '|'.join(BaseType.keywords())


class Pattern:
    """
    A pattern matching the statement text of one :any:`LineKind`.

    Parameters
    ----------
    kind : :any:`LineKind`
        The kind assigned to matching lines
    pattern : str
        The regex pattern used for matching
    flags : re.RegexFlag
        Regular expression flag(s) to use when compiling the pattern
    """

    def __init__(self, kind, pattern, flags=None):
        self.kind = kind
        self.pattern = re.compile(pattern, flags or 0)

    def match(self, text):
        return self.pattern.match(text.strip())

    def __repr__(self):
        return f'Pattern<{self.kind.name}>'


HEADER_PATTERN = Pattern(
    LineKind.HEADER,
    rf'^(?:(?P<type>{TYPE_KEYWORDS})\s+)?(?P<keyword>subroutine|function)\s+'
    r'(?P<name>[a-z_]\w*)\s*(?:\((?P<args>.*)\))?\s*$'
)


class DoPattern(Pattern):
    """
    Counted ``do`` loop header. Without a depth-zero comma in the bounds the
    statement is an assignment to a name starting with ``do``.
    """

    def match(self, text):
        match = super().match(text)
        if match and len(split_by_top_level_commas(match['bounds'])) < 2:
            return None
        return match


DO_PATTERN = DoPattern(
    LineKind.DO,
    r'^do\s*(?P<label>\d+)?\s*,?\s*(?P<var>[a-z_]\w*)\s*=\s*(?P<bounds>.+)$'
)

DECLARATION_PATTERN = Pattern(
    LineKind.DECLARATION,
    rf'^(?P<type>{TYPE_KEYWORDS})\b(?P<length>\s*\*\s*(?:\d+|\(\s*\*\s*\)|\(\s*\w+\s*\)))?'
    r'\s*(?P<names>[a-z_].*)$'
)

PATTERN_REGISTRY = (
    HEADER_PATTERN,
    Pattern(LineKind.END, r'^end(?:\s+(?:subroutine|function)(?:\s+\w+)?)?$'),
    Pattern(LineKind.END_IF, r'^end\s*if$'),
    Pattern(LineKind.END_DO, r'^end\s*do$'),
    Pattern(LineKind.ELSE_IF, r'^else\s*if\s*\(.*\)\s*then$'),
    Pattern(LineKind.ELSE, r'^else$'),
    Pattern(LineKind.IF_THEN, r'^if\s*\(.*\)\s*then$'),
    Pattern(LineKind.DO_WHILE, r'^do\s*(?:\d+\s*,?\s*)?while\s*\(.*\)$'),
    DO_PATTERN,
    Pattern(LineKind.CONTINUE, r'^continue$'),
    Pattern(LineKind.GOTO, r'^go\s*to\s*\d+$'),
    Pattern(LineKind.CALL, r'^call\s+[a-z_]\w*\s*(?:\(.*\))?$'),
    Pattern(LineKind.RETURN, r'^return$'),
    Pattern(LineKind.PARAMETER, r'^parameter\s*\(.*\)$'),
    Pattern(LineKind.EXTERNAL, r'^external\s+[a-z_]'),
    Pattern(LineKind.INTRINSIC, r'^intrinsic\s+[a-z_]'),
    Pattern(LineKind.IMPLICIT, r'^implicit\s+[a-z]'),
    DECLARATION_PATTERN,
    Pattern(LineKind.IF, r'^if\s*\('),
    Pattern(LineKind.ASSIGNMENT, r'^[a-z_]\w*\s*(?:\(.*\))?\s*=(?!=)'),
)
"""
Ordered patterns for the classifier; the first match determines the kind.
"""


def split_label(text):
    """
    Split a fixed-form line into its numeric statement label and the
    remaining text, with the label field blanked.

    Returns
    -------
    tuple of (str or None, str)
    """
    field = text[:5]
    if field.strip().isdigit() and (len(text) <= 5 or text[5] == ' '):
        return field.strip(), ' ' * len(field) + text[5:]
    return None, text


def classify_line(line):
    """
    Determine the :any:`LineKind` of a statement :any:`Line` and split off its label.
    """
    if line.kind.is_comment:
        return line

    line.label, line.text = split_label(line.text)
    if not line.text.strip():
        # A label on its own behaves like a labelled continue
        line.text = line.text + '  continue'

    for pattern in PATTERN_REGISTRY:
        if pattern.match(line.text):
            line.kind = pattern.kind
            break
    else:
        line.kind = LineKind.OTHER
    return line


def _expand_external(line):
    names = split_by_top_level_commas(re.sub(r'^\s*external\s+', '', line.text))
    return [line.clone(text=f'{line.indent}extern {name}', label=None)
            for name in names if name]


@Timer(logger=perf, text=lambda s: f'[f2cpp::Frontend] Executed classify_lines in {s:.2f}s')
def classify_lines(lines):
    """
    Classify all lines, expand ``external`` statements into one line per
    name and drop ``intrinsic`` and ``implicit`` statements.
    """
    result = []
    for line in lines:
        classify_line(line)
        if line.kind is LineKind.EXTERNAL:
            result += _expand_external(line)
        elif line.kind in (LineKind.INTRINSIC, LineKind.IMPLICIT):
            debug(f'[f2cpp::Frontend] Dropping line {line.lineno}: {line.content}')
        else:
            result += [line]
    return result
