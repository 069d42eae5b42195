# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Emission of the translated line buffer as C++ source text.
"""

import re
from collections import OrderedDict

from codetiming import Timer

from f2cpp.config import config, as_bool
from f2cpp.ir import LineKind
from f2cpp.logging import perf
from f2cpp.tools import (
    replace_outside_quotes, get_matching_paren_pos, split_by_top_level_commas, filter_ordered
)
from f2cpp.transformations.utilities import is_reserved

__all__ = [
    'cppgen', 'CppCodegen', 'replace_simple_intrinsics', 'fix_numeric_constants', 'prettify',
    'add_semicolon', 'reflow_comments', 'detect_index_variables', 'ADVISORY'
]


INTRINSIC_MAP = OrderedDict((
    ('dcmplx', 'std::complex<double>'),
    ('dconjg', 'std::conj'),
    ('dble', 'std::real'),
    ('dimag', 'std::imag'),
    ('dabs', 'std::abs'),
    ('abs', 'std::abs'),
    ('dsqrt', 'std::sqrt'),
))
"""
Intrinsic functions that map onto a C++ standard library function by name.
"""

ADVISORY = '// Declarations need repairing; reference/pointers need to be replaced.'

_re_intrinsic = re.compile(r'(?<![\w:])(' + '|'.join(INTRINSIC_MAP) + r')(?=\s*\()')
_re_mod = re.compile(r'(?<![\w:])mod\s*\(')
_re_numeric = re.compile(r'\b([0-9]+(\.([0-9]+)?)?)d([-+]?[0-9]+)\b')
_re_for_variable = re.compile(r'for\((\w+) = ')
_re_bracket = re.compile(r'\[([^\[\]]+)\]')
_re_name = re.compile(r'(?<![\w.:])([a-z_]\w*)\b(?!::)', re.IGNORECASE)


def _mod_operand(arg):
    # Names, literals, calls and subscripts bind tighter than %
    rest = re.sub(r'^[\w.:]+', '', arg)
    if not rest or (rest[0] in '([' and get_matching_paren_pos(rest) == len(rest) - 1):
        return arg
    return f'({arg})'


def _replace_mod(text):
    result = ''
    pos = 0
    for match in _re_mod.finditer(text):
        if match.start() < pos:
            continue
        close = get_matching_paren_pos(text, match.end() - 1)
        if close == -1:
            break
        args = split_by_top_level_commas(text[match.end():close])
        if len(args) != 2:
            continue
        lhs, rhs = (_mod_operand(_replace_mod(arg)) for arg in args)
        result += text[pos:match.start()] + f'({lhs} % {rhs})'
        pos = close + 1
    return result + text[pos:]


def replace_simple_intrinsics(text):
    """
    Replace calls to the intrinsics in :data:`INTRINSIC_MAP` by their C++
    counterparts and ``mod(a, b)`` by ``(a % b)``.
    """
    def _replace(segment):
        return _replace_mod(_re_intrinsic.sub(lambda m: INTRINSIC_MAP[m[1]], segment))
    return replace_outside_quotes(text, _replace)


def fix_numeric_constants(text):
    """
    Rewrite double precision literals such as ``1.0d0`` into ``1.0e0``.
    """
    return replace_outside_quotes(text, lambda s: _re_numeric.sub(r'\1e\4', s))


def prettify(text):
    text = re.sub(r'\bif\s+\(', 'if(', text)
    return re.sub(r'\)\s+\{\s*$', '){', text)


def add_semicolon(text):
    """
    Terminate a statement line with a semicolon, unless it is blank, a
    comment or the opening or closing line of a block.
    """
    stripped = text.rstrip()
    if not stripped or stripped.lstrip().startswith('//') or stripped[-1] in '{}':
        return text
    if stripped.endswith(':'):
        return stripped + ' ;'
    return stripped + ';'


def _is_fortran_comment(line):
    return line.kind is LineKind.COMMENT and not line.content.startswith('//')


def _is_code(line):
    return not line.kind.is_comment


def _comment_prefix(before, after):
    widths = [len(line.indent.expandtabs(4)) for line in (before, after) if line is not None]
    if not widths:
        return '//'
    if len(widths) == 2:
        width = max(widths)
    else:
        # A comment at the start or the end of a block sits one level further out
        width = widths[0] - 3
    if max(widths) < 3:
        return '// '
    return ' ' * width + '// '


def reflow_comments(lines):
    """
    Turn Fortran comment lines into ``//`` comments indented like the
    surrounding code.

    Comments enclosed by code take the deeper indentation of the previous
    and the next code line.
    """
    code_positions = [i for i, line in enumerate(lines) if _is_code(line)]
    result = []
    for i, line in enumerate(lines):
        if not _is_fortran_comment(line):
            result += [line]
            continue

        before = next((lines[j] for j in reversed(code_positions) if j < i), None)
        after = next((lines[j] for j in code_positions if j > i), None)
        body = line.text.lstrip()[1:]
        prefix = _comment_prefix(before, after)
        if prefix != '//':
            body = body.lstrip()
        result += [line.clone(text=(prefix + body).rstrip())]
    return result


def detect_index_variables(texts, symbols):
    """
    Collect names used as loop variables or inside ``[...]`` subscripts, as
    a hint for manual review. Names occurring in array dimensions are excluded.
    """
    candidates = []
    for text in texts:
        candidates += _re_for_variable.findall(text)
        for subscript in _re_bracket.findall(text):
            candidates += [name for name in _re_name.findall(subscript) if not is_reserved(name)]

    dimension_names = set()
    for symbol in symbols.values():
        if symbol.is_array:
            for dim in symbol.dimensions:
                dimension_names.update(w.lower() for w in re.findall(r'\w+', dim) if not w.isdigit())
    return [name for name in filter_ordered(candidates) if name.lower() not in dimension_names]


class CppCodegen:
    """
    Generator of the final C++ text of a fully translated :any:`TranslationUnit`.

    The remaining token-level rewrites (intrinsics, quotes, comments,
    semicolons, numeric literals and whitespace) are applied line by line
    before the unit is wrapped in the fixed preamble and trailer.

    Parameters
    ----------
    prototypes_first : bool, optional
        Emit synthesised declarations before instead of after the routine
        (default: ``prototypes-first`` config option)
    """

    standard_imports = ['cstddef', 'algorithm', 'cmath', 'complex']

    def __init__(self, prototypes_first=None):
        if prototypes_first is None:
            prototypes_first = as_bool(config['prototypes-first'])
        self.prototypes_first = prototypes_first

    def preamble(self):
        return ['#define NOMINMAX'] + [f'#include <{name}>' for name in self.standard_imports]

    @staticmethod
    def _rewrite_statement(text):
        text = replace_simple_intrinsics(text)
        return text.replace("'", '"')

    @staticmethod
    def _finish_statement(text):
        text = add_semicolon(text)
        text = fix_numeric_constants(text)
        return prettify(text)

    def visit_lines(self, lines):
        """
        Apply all line-level rewrites to :data:`lines` in their fixed order.
        """
        lines = [line if line.kind.is_comment else line.clone(text=self._rewrite_statement(line.text))
                 for line in lines]
        lines = reflow_comments(lines)
        lines = [line if line.kind.is_comment else line.clone(text=self._finish_statement(line.text))
                 for line in lines]
        return [line.clone(text='') if line.kind is LineKind.BLANK else line for line in lines]

    @staticmethod
    def place_diagnostics(lines, diagnostics):
        """
        Interleave diagnostic comments with :data:`lines` and return the
        resulting texts together with the diagnostics that found no anchor.
        """
        pending = diagnostics.by_line()
        texts = []
        for line in lines:
            reports = pending.pop(line.lineno, ()) if line.lineno is not None else ()
            texts += [f'{line.indent}{report.comment}' for report in reports]
            texts += [line.text]
        unanchored = [report for reports in pending.values() for report in reports]
        return texts, unanchored

    def visit(self, unit):
        lines = self.visit_lines(list(unit.buffer))
        code = [line.text for line in lines if not line.kind.is_comment]
        body, unanchored = self.place_diagnostics(lines, unit.diagnostics)

        output = self.preamble() + ['']
        if self.prototypes_first and unit.prototypes:
            output += unit.prototypes + ['']
        output += body
        if not self.prototypes_first and unit.prototypes:
            output += [''] + unit.prototypes
        output += ['', ADVISORY]
        indices = ', '.join(detect_index_variables(code, unit.symbols))
        output += [f'// Detected the following indicial variables: {indices}'.rstrip()]
        output += [report.comment for report in unanchored]
        return '\n'.join(output) + '\n'


@Timer(logger=perf, text=lambda s: f'[f2cpp::Backend] Executed cppgen in {s:.2f}s')
def cppgen(unit, **kwargs):
    """
    Generate the C++ source text of a translated :any:`TranslationUnit`.
    """
    return CppCodegen(**kwargs).visit(unit)
