# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Type and dimension inference: builds the :any:`SymbolTable` of a unit and
rewrites its specification part into C++ declarations.
"""

import re
from math import prod

from f2cpp.diagnostics import DiagnosticCategory
from f2cpp.frontend.classify import HEADER_PATTERN, DECLARATION_PATTERN
from f2cpp.ir import Line, LineKind
from f2cpp.logging import debug, detail
from f2cpp.tools import (
    CaseInsensitiveDict, split_by_top_level_commas, get_matching_paren_pos, iter_identifiers
)
from f2cpp.transformations.transformation import Transformation
from f2cpp.transformations.utilities import is_reserved, fold_integer, comment_out
from f2cpp.types import BaseType, SymbolKind, UNKNOWN_CTYPE
from f2cpp.unit import RoutineContext, StatementFunction


__all__ = ['TypeInference', 'parse_parameter_list', 'parse_declaration_entry']


_re_entry = re.compile(
    r'^(?P<name>[a-z_]\w*)\s*(?:\((?P<dims>.*)\))?\s*(?:\*\s*(?P<length>\d+|\(.*\)))?$'
)
_re_parameter = re.compile(r'^\s*parameter\s*\((?P<list>.*)\)\s*$')
_re_statement_function = re.compile(r'^\s*(?P<name>[a-z_]\w*)\s*\(')
_re_if_return = re.compile(r'\breturn\s*$')

STATEMENT_INDENT = ' ' * 6


def parse_parameter_list(text):
    """
    Parse the assignments of a ``parameter (a = v, b = (re, im), ...)`` statement.

    Complex-valued pairs are turned into ``std::complex<double>`` constructor calls.

    Returns
    -------
    list of tuple
        ``(name, value)`` pairs in order of appearance
    """
    match = _re_parameter.match(text)
    if not match:
        return []
    values = []
    for assignment in split_by_top_level_commas(match['list']):
        if '=' not in assignment:
            continue
        name, value = (s.strip() for s in assignment.split('=', 1))
        if value.startswith('(') and get_matching_paren_pos(value) == len(value) - 1:
            parts = split_by_top_level_commas(value[1:-1])
            if len(parts) == 2:
                value = f'std::complex<double>({parts[0]}, {parts[1]})'
        values += [(name.lower(), value)]
    return values


def parse_declaration_entry(entry):
    """
    Split one entry of a declaration's name list into name, dimensions and length.

    Returns
    -------
    tuple or None
        ``(name, dimensions, length)`` or `None` if the entry is malformed
    """
    match = _re_entry.match(entry.strip())
    if not match:
        return None
    dims = tuple(split_by_top_level_commas(match['dims'])) if match['dims'] is not None else ()
    length = match['length']
    if length and length.startswith('('):
        length = length[1:-1].strip()
    return match['name'], dims, length


class TypeInference(Transformation):
    """
    Classify every identifier of a unit and translate its declarations.

    This records the :any:`RoutineContext` when the header is encountered,
    registers all declared names with kind, base type and dimensions in the
    :any:`SymbolTable`, consumes ``parameter`` statements, captures
    statement functions and finally rewrites the header line into a C++
    function signature once ``end`` is reached.
    """

    def transform_unit(self, unit, **kwargs):
        self._parameters = CaseInsensitiveDict()
        self._declared = set()
        self._finished = False
        self._prescan(unit)

        unit.rebuild(lambda line: self._process_line(unit, line))

        if unit.routine is None:
            unit.diagnose(DiagnosticCategory.UNSUPPORTED, 'no subroutine or function header found', 1)
            return
        if unit.routine.active:
            unit.diagnose(DiagnosticCategory.STRUCTURAL_RISK,
                          f'missing end statement for {unit.routine.name}', unit.routine.header)

        self._register_undeclared(unit)

        detail(f'[f2cpp::TypeInference] {len(unit.symbols)} symbols in {unit.routine}')

    def _prescan(self, unit):
        """
        Collect ``parameter`` values and all declared names ahead of the
        main pass, as they may appear in either order.
        """
        for line in unit.buffer:
            if line.kind is LineKind.PARAMETER:
                self._parameters.update(parse_parameter_list(line.text))
            elif line.kind is LineKind.DECLARATION:
                match = DECLARATION_PATTERN.match(line.text)
                for entry in split_by_top_level_commas(match['names']):
                    parsed = parse_declaration_entry(entry)
                    if parsed:
                        self._declared.add(parsed[0])

    def _process_line(self, unit, line):
        if line.kind.is_comment:
            return None

        if self._finished:
            if line.kind is LineKind.HEADER:
                name = HEADER_PATTERN.match(line.text)['name']
                unit.diagnose(DiagnosticCategory.UNSUPPORTED,
                              f'additional program unit {name} left untranslated', line)
            return [comment_out(line)]

        if unit.routine is None:
            if line.kind is LineKind.HEADER:
                return self._process_header(unit, line)
            unit.diagnose(DiagnosticCategory.UNSUPPORTED,
                          'statement before routine header left untranslated', line)
            return [comment_out(line)]

        handler = {
            LineKind.HEADER: self._process_nested_header,
            LineKind.END: self._process_end,
            LineKind.PARAMETER: self._process_parameter,
            LineKind.DECLARATION: self._process_declaration,
            LineKind.EXTERNAL: self._process_external,
            LineKind.ASSIGNMENT: self._process_assignment,
            LineKind.RETURN: self._process_return,
            LineKind.IF: self._process_logical_if,
        }.get(line.kind)
        if handler:
            return handler(unit, line)
        return None

    def _process_header(self, unit, line):
        match = HEADER_PATTERN.match(line.text)
        is_function = match['keyword'] == 'function'
        return_type = BaseType.from_fortran_type(match['type']) if match['type'] else None
        arguments = split_by_top_level_commas(match['args'] or '')

        routine = RoutineContext(
            match['name'], arguments=arguments, header=line,
            is_function=is_function, return_type=return_type
        )
        unit.routine = routine
        debug(f'[f2cpp::TypeInference] Found {routine} at line {line.lineno}')

        kind = SymbolKind.FUNCTION if is_function else SymbolKind.SUBROUTINE
        unit.symbols.declare(routine.name, kind, base_type=return_type)
        for arg in routine.arguments:
            if unit.symbols.declare(arg, SymbolKind.UNKNOWN, is_argument=True) is None:
                unit.diagnose(DiagnosticCategory.UNSUPPORTED, f'duplicate argument {arg}', line)

        new_lines = [
            line.clone(kind=LineKind.HEADER, label=None),
            Line(f'{STATEMENT_INDENT}using namespace std', kind=LineKind.SYNTHETIC, lineno=line.lineno)
        ]
        if is_function and return_type is not None:
            new_lines += [Line(f'{STATEMENT_INDENT}{return_type.ctype} {routine.name}',
                               kind=LineKind.DECLARATION, lineno=line.lineno, declares=routine.name)]
        routine.header = new_lines[0]
        return new_lines

    def _process_nested_header(self, unit, line):
        unit.diagnose(DiagnosticCategory.UNSUPPORTED,
                      'routine header inside an active routine left untranslated', line)
        return [comment_out(line)]

    def _process_end(self, unit, line):
        routine = unit.routine
        routine.active = False
        self._finished = True

        for arg in routine.arguments:
            symbol = unit.symbols[arg]
            if symbol.base_type is None and not symbol.is_external and symbol.kind not in (
                    SymbolKind.SUBROUTINE, SymbolKind.FUNCTION):
                unit.diagnose(DiagnosticCategory.UNRESOLVED_SYMBOL,
                              f'argument {arg} has no type declaration', routine.header)

        routine.header.text = routine.signature(unit.symbols)

        new_lines = []
        if routine.is_function:
            new_lines += [line.clone(text=f'{line.indent}return {routine.name}', kind=LineKind.SYNTHETIC,
                                     label=None)]
        new_lines += [line.clone(text='}', label=None)]
        if line.label:
            # Keep the label attached to a statement for the control-flow stage
            new_lines[0].label = line.label
        return new_lines

    def _process_parameter(self, unit, line):
        new_lines = [comment_out(line)]
        for name, value in parse_parameter_list(line.text):
            if name in self._declared:
                continue
            unit.symbols.declare(name, SymbolKind.PARAMETER, constant_value=value)
            unit.diagnose(DiagnosticCategory.UNRESOLVED_SYMBOL,
                          f'parameter {name} has no type declaration', line)
            new_lines += [Line(f'{line.indent}const {UNKNOWN_CTYPE} {name} = {value}',
                               kind=LineKind.DECLARATION, lineno=line.lineno, declares=name)]
        return new_lines

    def _process_external(self, unit, line):
        name = line.content.split()[-1]
        symbol = unit.symbols.get(name)
        if symbol is None:
            unit.symbols.declare(name, SymbolKind.UNKNOWN, is_external=True)
        else:
            unit.symbols[name] = symbol.clone(is_external=True)
        return [line.clone(declares=name)]

    def _character_length(self, unit, length):
        """
        Buffer size of a character variable of declared :data:`length`,
        or `None` for assumed length.
        """
        length = (length or '1').strip()
        if length == '*':
            return None
        value = fold_integer(length, unit.symbols, self._parameters)
        if value is not None:
            return str(value + 1)
        return f'{length}+1'

    def _process_declaration(self, unit, line):
        match = DECLARATION_PATTERN.match(line.text)
        base_type = BaseType.from_fortran_type(match['type'])
        type_length = None
        if match['length']:
            type_length = match['length'].strip()[1:].strip()
            if type_length.startswith('('):
                type_length = type_length[1:-1].strip()

        new_lines = []
        for entry in split_by_top_level_commas(match['names']):
            parsed = parse_declaration_entry(entry)
            if parsed is None:
                unit.diagnose(DiagnosticCategory.UNSUPPORTED, f'cannot parse declaration of "{entry}"', line)
                new_lines += [Line(f'{line.indent}// {entry}', kind=LineKind.COMMENT, lineno=line.lineno)]
                continue
            name, dims, length = parsed
            decl = self._declare(unit, line, base_type, name, dims, length or type_length)
            if decl is not None:
                new_lines += [Line(f'{line.indent}{decl}', kind=LineKind.DECLARATION,
                                   lineno=line.lineno, declares=name)]
        if line.label:
            unit.diagnose(DiagnosticCategory.UNSUPPORTED, f'label {line.label} on a declaration dropped', line)
        return new_lines

    def _declare(self, unit, line, base_type, name, dims, length):
        """
        Register a single declared entity and return its C++ declaration,
        or `None` if no local declaration is required.
        """
        routine = unit.routine

        if name == routine.name and routine.is_function:
            unit.symbols.set_type(name, base_type)
            if routine.return_type is not None:
                return None
            return f'{base_type.ctype} {name}'

        kind = SymbolKind.from_rank(len(dims))
        if kind is SymbolKind.UNKNOWN:
            unit.diagnose(DiagnosticCategory.UNSUPPORTED,
                          f'{name} has {len(dims)} dimensions; only vectors and matrices are supported', line)

        char_length = self._character_length(unit, length) if base_type is BaseType.CHARACTER else None
        value = self._parameters.get(name)
        if value is not None and kind is SymbolKind.SCALAR:
            kind = SymbolKind.PARAMETER

        existing = unit.symbols.get(name)
        is_argument = existing.is_argument if existing else False
        symbol = unit.symbols.declare(
            name, kind, base_type=base_type, dimensions=dims,
            constant_value=value if kind is SymbolKind.PARAMETER else None, char_length=char_length
        )
        if symbol is None:
            unit.diagnose(DiagnosticCategory.UNSUPPORTED, f'redeclaration of {name} ignored', line)
            return None

        if is_argument:
            return None

        ctype = base_type.ctype
        if kind is SymbolKind.PARAMETER:
            if base_type is BaseType.CHARACTER:
                return f'const {ctype} *{name} = {value}'
            return f'const {ctype} {name} = {value}'
        if kind in (SymbolKind.SCALAR, SymbolKind.UNKNOWN):
            if base_type is BaseType.CHARACTER:
                return f'{ctype} {name}[{char_length}]' if char_length else f'{ctype} *{name}'
            return f'{ctype} {name}'

        sizes = [fold_integer(dim, unit.symbols, self._parameters) for dim in symbol.dimensions]
        size = prod(sizes) if None not in sizes else None
        if size is not None and base_type is BaseType.CHARACTER and char_length and char_length.isdigit():
            return f'{ctype} {name}[{size}][{char_length}]'
        if size is not None and base_type is not BaseType.CHARACTER:
            return f'{ctype} {name}[{size}]'

        unit.diagnose(DiagnosticCategory.UNSUPPORTED,
                      f'local array {name}({", ".join(dims)}) has non-constant size; '
                      'emitted as a pointer that needs manual allocation', line)
        return f'{ctype} *{name}'

    def _process_assignment(self, unit, line):
        match = _re_statement_function.match(line.text)
        if not match:
            return None
        symbol = unit.symbols.lookup(match['name'], kind=SymbolKind.SCALAR)
        if symbol is None or symbol.is_character or symbol.is_argument:
            return None

        start = match.end() - 1
        end = get_matching_paren_pos(line.text, start)
        if end == -1:
            return None
        rest = line.text[end+1:]
        if not re.match(r'^\s*=(?!=)', rest):
            return None

        params = [p.lower() for p in split_by_top_level_commas(line.text[start+1:end])]
        body = rest.split('=', 1)[1].strip()
        unit.routine.statement_functions[symbol.name] = StatementFunction(
            symbol.name, params, body, lineno=line.lineno
        )
        debug(f'[f2cpp::TypeInference] Found statement function {symbol.name}({", ".join(params)})')
        return [comment_out(line)]

    def _process_return(self, unit, line):
        if unit.routine.is_function:
            return [line.clone(text=f'{line.indent}return {unit.routine.name}')]
        return None

    def _process_logical_if(self, unit, line):
        if unit.routine.is_function and _re_if_return.search(line.text):
            return [line.clone(text=_re_if_return.sub(f'return {unit.routine.name}', line.text))]
        return None

    def _register_undeclared(self, unit):
        """
        Register every referenced but undeclared identifier as
        :any:`SymbolKind.UNKNOWN` and report it once.
        """
        params = set()
        for sfunc in unit.routine.statement_functions.values():
            params.update(sfunc.params)

        texts = [(line, line.text) for line in unit.buffer if line.kind.is_executable]
        texts += [(sfunc.lineno, sfunc.body) for sfunc in unit.routine.statement_functions.values()]

        for anchor, text in texts:
            if getattr(anchor, 'kind', None) is LineKind.CALL:
                name = re.match(r'^\s*call\s+(\w+)', text)[1]
                unit.symbols.declare(name, SymbolKind.SUBROUTINE)
                text = text[text.index(name) + len(name):]

            for match in iter_identifiers(text):
                name = match.group(0).lower()
                if name in unit.symbols or name in params or is_reserved(name):
                    continue
                unit.symbols.declare(name, SymbolKind.UNKNOWN)
                unit.diagnose(DiagnosticCategory.UNRESOLVED_SYMBOL,
                              f'{name} is referenced but never declared', anchor)
