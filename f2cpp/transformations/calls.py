# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Resolution of subroutine and function calls into forward declarations,
function-pointer parameters and inline statement functions.
"""

import re
from collections import OrderedDict

from f2cpp.backend.cppgen import replace_simple_intrinsics, fix_numeric_constants
from f2cpp.diagnostics import DiagnosticCategory
from f2cpp.ir import LineKind
from f2cpp.logging import debug
from f2cpp.tools import QUOTES, get_matching_paren_pos, split_by_top_level_commas, iter_identifiers
from f2cpp.transformations.transformation import Transformation
from f2cpp.types import SymbolKind, UNKNOWN_CTYPE


__all__ = ['CallResolver', 'argument_ctype']


_re_call = re.compile(r'^(?P<indent>\s*)call\s+(?P<name>[a-z_]\w*)\s*(?:\((?P<args>.*)\))?\s*$')
_re_int_literal = re.compile(r'^[-+]?\d+$')
_re_real_literal = re.compile(r'^[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[de][-+]?\d+)?$')


def argument_ctype(arg, symbols):
    """
    Infer the C++ parameter type for an actual argument from its text.

    Literals determine the type directly, otherwise the first typed symbol
    referenced in the argument does. Array elements passed by reference
    and whole arrays become pointers.
    """
    arg = arg.strip()
    if arg[:1] in QUOTES:
        return 'const char *'
    if _re_int_literal.match(arg):
        return 'size_t'
    if arg in ('true', 'false'):
        return 'bool'
    if _re_real_literal.match(arg):
        return 'double'

    for match in iter_identifiers(arg):
        symbol = symbols.get(match.group(0))
        if symbol is None or symbol.base_type is None:
            continue
        if symbol.is_character:
            return 'const char *'
        if arg.startswith('&') or (symbol.is_array and arg == symbol.name):
            return f'{symbol.ctype} *'
        return symbol.ctype
    return UNKNOWN_CTYPE


def _parameter(ctype, name):
    return f'{ctype}{name}' if ctype.endswith('*') else f'{ctype} {name}'


class CallResolver(Transformation):
    """
    Rewrite call sites and synthesise declarations for all called procedures.

    ``call`` statements lose their keyword; references to scalar,
    non-character symbols followed by ``(`` are function calls. Every
    called name is resolved once, from its first call site: statement
    functions become ``static inline`` definitions, dummy procedure
    arguments become function-pointer parameters of the routine and
    everything else receives a forward declaration.
    """

    def transform_unit(self, unit, **kwargs):
        if unit.routine is None:
            return

        subroutines = OrderedDict()
        functions = OrderedDict()

        def _rewrite_calls(line):
            if not line.kind.is_executable:
                return None
            text = line.text
            match = _re_call.match(text) if line.kind is LineKind.CALL else None
            if match:
                args = match['args'] or ''
                subroutines.setdefault(match['name'], args)
                unit.calls.setdefault(match['name'], args)
                text = f'{match["indent"]}{match["name"]}({args})'
            self._collect_functions(unit, line, text, functions)
            return [line.clone(text=text)] if text != line.text else None

        unit.rebuild(_rewrite_calls)

        resolved = []
        for name, args in subroutines.items():
            self._resolve(unit, name, args, 'void')
            resolved += [name]
        for name, args in functions.items():
            if name in resolved:
                continue
            self._resolve(unit, name, args, unit.symbols[name].ctype)
            resolved += [name]

        for sfunc in unit.routine.statement_functions.values():
            if sfunc.name not in functions:
                unit.diagnose(DiagnosticCategory.UNSUPPORTED,
                              f'statement function {sfunc.name} is never referenced', sfunc.lineno)

        self._remove_declarations(unit, set(resolved), set(functions))

    def _collect_functions(self, unit, line, text, functions):
        """
        Record the argument text of the first reference to every called function in :data:`text`.
        """
        for match in iter_identifiers(text):
            name = match.group(0).lower()
            rest = text[match.end():]
            if not rest.lstrip(' ').startswith('('):
                continue
            symbol = unit.symbols.get(name)
            if symbol is None or symbol.kind is not SymbolKind.SCALAR or symbol.is_character:
                continue

            start = match.end() + len(rest) - len(rest.lstrip(' '))
            close = get_matching_paren_pos(text, start)
            if close == -1:
                unit.diagnose(DiagnosticCategory.STRUCTURAL_RISK,
                              f'unbalanced argument list in call to {name}', line)
                continue
            functions.setdefault(name, text[start+1:close])
            unit.calls.setdefault(name, text[start+1:close])

    def _resolve(self, unit, name, args, result_ctype):
        symbol = unit.symbols.get(name)
        ctypes = [argument_ctype(arg, unit.symbols) for arg in split_by_top_level_commas(args)]
        routine = unit.routine

        if name in routine.statement_functions:
            sfunc = routine.statement_functions[name]
            if len(sfunc.params) != len(ctypes):
                unit.prototypes += [f'// Argument number mismatch in call to {name}']
                unit.diagnose(DiagnosticCategory.ARITY_MISMATCH,
                              f'{name} is defined with {len(sfunc.params)} arguments but called '
                              f'with {len(ctypes)}', sfunc.lineno)
                return
            params = ', '.join(_parameter(t, p) for t, p in zip(ctypes, sfunc.params))
            body = fix_numeric_constants(replace_simple_intrinsics(sfunc.body))
            unit.prototypes += [f'static inline {result_ctype} {name}({params}){{ return {body}; }}']
            debug(f'[f2cpp::CallResolver] Synthesised statement function {name}')
            return

        if symbol is not None and symbol.is_argument:
            routine.procedure_arguments[name] = f'{result_ctype} (*{name})({", ".join(ctypes)})'
            return

        unit.prototypes += [f'{result_ctype} {name}({", ".join(ctypes)});']

    def _remove_declarations(self, unit, resolved, functions):
        """
        Drop ``extern`` lines of resolved procedures and local declarations
        of called functions, and re-render the routine signature.
        """
        routine = unit.routine

        def _remove(line):
            if line.kind is LineKind.EXTERNAL and line.declares in resolved:
                return ()
            if line.kind is LineKind.DECLARATION and line.declares in functions \
                    and line.declares != routine.name:
                return ()
            if line.kind is LineKind.HEADER and routine.procedure_arguments:
                routine.header = line.clone(text=routine.signature(unit.symbols))
                return [routine.header]
            return None

        unit.rebuild(_remove)
