# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Rewriting of 1-based Fortran array references into 0-based linear C++ subscripts.
"""

import re

from f2cpp.config import config
from f2cpp.diagnostics import DiagnosticCategory
from f2cpp.logging import debug
from f2cpp.tools import (
    iter_identifiers, get_matching_paren_pos, split_by_top_level_commas, find_unmatched_delimiter,
    truncate_string
)
from f2cpp.transformations.transformation import Transformation
from f2cpp.types import SymbolKind


__all__ = ['SubscriptLinearizer', 'linear_subscript', 'simplify_subscripts', 'simplify_index']


def linear_subscript(symbol, indices):
    """
    Build the 0-based linear subscript of :data:`symbol` for the given
    1-based :data:`indices`, using column-major storage order.

    >>> linear_subscript(Symbol('m', SymbolKind.MATRIX, dimensions=('5', '3')), ('i', 'j'))
    '[((i)-1)+((j)-1)*(5)]'
    """
    offsets = []
    for index, lower in zip(indices, symbol.lower_bounds):
        lower = lower if re.match(r'^\w+$', lower) else f'({lower})'
        offsets += [f'({index})-{lower}']
    if len(offsets) == 1:
        return f'[{offsets[0]}]'
    return f'[({offsets[0]})+({offsets[1]})*({symbol.leading_dimension})]'


# Rules of the best-effort index simplifier; the lookbehind/lookahead
# guards ensure a rewrite only applies in an additive context.
_ADDITIVE_BEFORE = r'(?<![^(+\[])'
_ADDITIVE_AFTER = r'(?=$|[)\]+\-])'

SIMPLIFY_RULES = (
    # (n) -> n and (x) -> x unless the parentheses belong to a call
    (re.compile(r'(?<![\w\]])\(\s*(\d+)\s*\)'), r'\1'),
    (re.compile(r'(?<![\w\]])\(\s*(\w+)\s*\)'), r'\1'),
    # ((x-1)+1) -> (x) and ((x+1)-1) -> (x)
    (re.compile(r'\(\(([^()]+)-1\)\+1\)'), r'(\1)'),
    (re.compile(r'\(\(([^()]+)\+1\)-1\)'), r'(\1)'),
    (re.compile(_ADDITIVE_BEFORE + r'\(([^()]+)-1\)\+1' + _ADDITIVE_AFTER), r'(\1)'),
    (re.compile(_ADDITIVE_BEFORE + r'\(([^()]+)\+1\)-1' + _ADDITIVE_AFTER), r'(\1)'),
    # Associative regrouping of chained operations by the same operator
    (re.compile(r'\(\(([^()]+)-(\w+)\)-(\w+)\)'), r'((\1)-((\2)+(\3)))'),
    (re.compile(r'\(\(([^()]+)\+(\w+)\)\+(\w+)\)'), r'((\1)+((\2)+(\3)))'),
    # x-0 -> x, but never the exponent of a real literal
    (re.compile(r'(?<=[\w)])(?<![0-9.][de])[-+]0' + _ADDITIVE_AFTER), ''),
)

_re_literal_sum = re.compile(_ADDITIVE_BEFORE + r'(\d+)([-+])(\d+)' + _ADDITIVE_AFTER)


def _fold_literals(match):
    value = int(match[1]) + int(match[3]) if match[2] == '+' else int(match[1]) - int(match[3])
    if value < 0:
        return match[0]
    return str(value)


def simplify_index(index, passes=None):
    """
    Apply the simplification rules to a single index expression until it
    no longer changes, or for at most :data:`passes` iterations.
    """
    passes = config['simplify-passes'] if passes is None else passes
    for _ in range(passes):
        previous = index
        for pattern, replace in SIMPLIFY_RULES:
            index = pattern.sub(replace, index)
        index = _re_literal_sum.sub(_fold_literals, index)
        if index == previous:
            break
    return index


def simplify_subscripts(text, passes=None):
    """
    Simplify the content of every ``[...]`` subscript in :data:`text`,
    innermost subscripts first.
    """
    result = ''
    pos = 0
    while True:
        start = text.find('[', pos)
        if start == -1:
            return result + text[pos:]
        end = get_matching_paren_pos(text, start)
        if end == -1:
            return result + text[pos:]
        inner = simplify_subscripts(text[start+1:end], passes=passes)
        result += text[pos:start] + '[' + simplify_index(inner, passes=passes) + ']'
        pos = end + 1


def _argument_spans(text):
    """
    Yield ``(start, end)`` spans of the arguments in :data:`text`, split at
    top-level commas.
    """
    start = 0
    for part in split_by_top_level_commas(text, strip=False):
        yield start, start + len(part)
        start += len(part) + 1


class SubscriptLinearizer(Transformation):
    """
    Rewrite every reference to a :any:`SymbolKind.VECTOR` or
    :any:`SymbolKind.MATRIX` symbol into 0-based linear indexing.

    Array elements passed as whole arguments to subroutine or function calls
    are prefixed with an address-of marker, as Fortran passes them by
    reference. Computed expressions involving array elements cannot be
    passed by reference and are reported instead.

    Parameters
    ----------
    simplify : bool
        Run the index simplifier after rewriting (default: `True`)
    passes : int, optional
        Iteration bound of the simplifier (default: ``simplify-passes`` config option)
    """

    def __init__(self, simplify=True, passes=None):
        self.simplify = simplify
        self.passes = passes

    def transform_unit(self, unit, **kwargs):
        if unit.routine is None:
            return

        def _rewrite_line(line):
            if not line.kind.is_executable:
                return None
            self._check_delimiters(unit, line)
            text = self.rewrite(line.text, unit, line)
            if self.simplify:
                text = simplify_subscripts(text, passes=self.passes)
            return [line.clone(text=text)] if text != line.text else None

        unit.rebuild(_rewrite_line)

        for sfunc in unit.routine.statement_functions.values():
            body = self.rewrite(sfunc.body, unit, sfunc.lineno)
            sfunc.body = simplify_subscripts(body, passes=self.passes) if self.simplify else body

    @staticmethod
    def _check_delimiters(unit, line):
        pos = find_unmatched_delimiter(line.text)
        if pos != -1:
            unit.diagnose(DiagnosticCategory.UNMATCHED_DELIMITER,
                          f"unmatched '{line.text[pos]}' at column {pos + 1}", line)

    def _is_call_target(self, unit, symbol):
        """
        Whether arguments of a reference to :data:`symbol` are passed by reference.
        """
        if symbol.kind is SymbolKind.SUBROUTINE:
            return True
        return (
            symbol.kind is SymbolKind.SCALAR and not symbol.is_character
            and symbol.name not in unit.routine.statement_functions
        )

    def rewrite(self, text, unit, anchor=None):
        """
        Rewrite all array references in :data:`text` (recursively, including
        references nested in index expressions and call arguments).
        """
        result = ''
        pos = 0
        for match in iter_identifiers(text):
            if match.start() < pos:
                continue
            name = match.group(0)
            paren = match.end()
            while paren < len(text) and text[paren] == ' ':
                paren += 1
            if paren >= len(text) or text[paren] != '(':
                continue

            symbol = unit.symbols.get(name)
            close = get_matching_paren_pos(text, paren)
            if close == -1:
                # Best effort: keep the reference and continue scanning its arguments
                result += text[pos:paren+1]
                pos = paren + 1
                continue

            inner = text[paren+1:close]
            if symbol is not None and symbol.is_array:
                replacement = name + self._rewrite_array(symbol, inner, unit, anchor)
            elif symbol is not None and self._is_call_target(unit, symbol):
                replacement = text[match.start():paren+1] + self._rewrite_arguments(
                    symbol, inner, unit, anchor) + ')'
            else:
                replacement = text[match.start():paren+1] + self.rewrite(inner, unit, anchor) + ')'

            result += text[pos:match.start()] + replacement
            pos = close + 1
        return result + text[pos:]

    def _rewrite_array(self, symbol, inner, unit, anchor):
        indices = split_by_top_level_commas(inner)
        rank = 1 if symbol.kind is SymbolKind.VECTOR else 2
        if len(indices) != rank:
            unit.diagnose(DiagnosticCategory.AMBIGUOUS_SUBSCRIPT,
                          f'{symbol.name} is referenced with {len(indices)} subscripts but declared '
                          f'with {rank}; left unrewritten', anchor)
            return '(' + self.rewrite(inner, unit, anchor) + ')'

        for index in indices:
            if self._contains_nested_call(index, unit):
                unit.diagnose(DiagnosticCategory.AMBIGUOUS_SUBSCRIPT,
                              f'subscript "{truncate_string(index, 32)}" of {symbol.name} contains a '
                              'nested call; verify the linearized index', anchor)
        indices = [self.rewrite(index, unit, anchor) for index in indices]
        return linear_subscript(symbol, indices)

    @staticmethod
    def _contains_nested_call(text, unit):
        for match in iter_identifiers(text):
            rest = text[match.end():].lstrip(' ')
            if rest.startswith('(') and not unit.symbols.is_array(match.group(0)):
                close = get_matching_paren_pos(rest)
                if ',' in rest[:close]:
                    return True
        return False

    def _is_element_reference(self, arg, unit):
        """
        Whether :data:`arg` consists of exactly one array element reference.
        """
        match = re.match(r'^\s*([a-z_]\w*)\s*\(', arg, re.I)
        if not match or not unit.symbols.is_array(match[1]):
            return False
        return get_matching_paren_pos(arg, match.end() - 1) == len(arg.rstrip()) - 1

    def _contains_element_reference(self, arg, unit):
        for match in iter_identifiers(arg):
            if unit.symbols.is_array(match.group(0)) and arg[match.end():].lstrip(' ').startswith('('):
                return True
        return False

    def _rewrite_arguments(self, symbol, inner, unit, anchor):
        result = ''
        pos = 0
        for start, end in _argument_spans(inner):
            arg = inner[start:end]
            new_arg = self.rewrite(arg, unit, anchor)
            if self._is_element_reference(arg, unit):
                stripped = new_arg.lstrip()
                new_arg = new_arg[:len(new_arg) - len(stripped)] + '&' + stripped
            elif self._contains_element_reference(arg, unit):
                debug(f'[f2cpp::SubscriptLinearizer] Computed argument {arg.strip()} in call to {symbol.name}')
                unit.diagnose(DiagnosticCategory.STRUCTURAL_RISK,
                              f'computed argument "{truncate_string(arg.strip(), 32)}" to {symbol.name} '
                              'cannot be passed by reference', anchor)
            result += inner[pos:start] + new_arg
            pos = end
        return result + inner[pos:]
