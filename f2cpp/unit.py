# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Per-unit translation context.

A :any:`TranslationUnit` owns every piece of mutable state of one
translation: the :any:`LineBuffer`, the :any:`SymbolTable`, the
:any:`RoutineContext` of the routine being translated and the
:any:`Diagnostics` sink. A fresh instance is created for every source.
"""

from f2cpp.diagnostics import Diagnostics
from f2cpp.ir import LineBuffer
from f2cpp.tools import CaseInsensitiveDict
from f2cpp.types import SymbolTable, UNKNOWN_CTYPE


__all__ = ['StatementFunction', 'RoutineContext', 'TranslationUnit']


class StatementFunction:
    """
    A one-line function ``name(params) = body`` defined in the specification part.
    """

    def __init__(self, name, params, body, lineno=None):
        self.name = name.lower()
        self.params = tuple(params)
        self.body = body
        self.lineno = lineno

    def __repr__(self):
        return f'StatementFunction<{self.name}({", ".join(self.params)}) = {self.body}>'


class RoutineContext:
    """
    Identity and signature information of the subroutine or function being translated.

    Parameters
    ----------
    name : str
        Name of the routine
    arguments : tuple of str
        Dummy argument names, in positional order
    header : :any:`Line`
        The header line, rewritten once the routine has been fully analysed
    is_function : bool
        Whether this is a ``function`` rather than a ``subroutine``
    return_type : :any:`BaseType`, optional
        Return type given as a prefix of the ``function`` header
    """

    def __init__(self, name, arguments=(), header=None, is_function=False, return_type=None):
        self.name = name.lower()
        self.arguments = tuple(a.lower() for a in arguments)
        self.header = header
        self.is_function = is_function
        self.return_type = return_type
        self.active = True

        self.statement_functions = CaseInsensitiveDict()
        self.procedure_arguments = CaseInsensitiveDict()

    def label(self, label):
        """
        Named label replacing a numeric Fortran statement label.
        """
        return f'{self.name}_L{label.lstrip("0") or "0"}'

    def _render_argument(self, name, symbols):
        if name in self.procedure_arguments:
            return self.procedure_arguments[name]
        symbol = symbols.get(name)
        if symbol is None or symbol.base_type is None:
            return f'{UNKNOWN_CTYPE} {name}'
        if symbol.is_array:
            return f'{symbol.ctype} *{name}'
        if symbol.is_character:
            return f'const char *{name}'
        return f'{symbol.ctype} {name}'

    def result_ctype(self, symbols):
        if not self.is_function:
            return 'void'
        symbol = symbols.get(self.name)
        if symbol is not None and symbol.base_type is not None:
            return symbol.ctype
        if self.return_type is not None:
            return self.return_type.ctype
        return UNKNOWN_CTYPE

    def signature(self, symbols):
        """
        Render the C++ function header from the completed :any:`SymbolTable`.
        """
        params = ', '.join(self._render_argument(a, symbols) for a in self.arguments)
        return f'{self.result_ctype(symbols)} {self.name}({params}){{'

    def __repr__(self):
        kind = 'Function' if self.is_function else 'Subroutine'
        return f'{kind}<{self.name}({", ".join(self.arguments)})>'


class TranslationUnit:
    """
    Mutable state of the translation of a single Fortran routine.

    Parameters
    ----------
    buffer : :any:`LineBuffer`
        The classified lines of the routine
    filename : str, optional
        Name of the source file, used in log messages
    """

    def __init__(self, buffer=None, filename=None):
        self.filename = filename
        self.buffer = buffer if buffer is not None else LineBuffer()
        self.symbols = SymbolTable()
        self.routine = None
        self.diagnostics = Diagnostics(filename=filename)

        # Synthesised forward declarations and inline functions
        self.prototypes = []

        # Procedure name -> argument list text of the first call site
        self.calls = CaseInsensitiveDict()

    def rebuild(self, callback):
        """
        Replace the line buffer by the result of :meth:`LineBuffer.rebuild`.
        """
        self.buffer = self.buffer.rebuild(callback)
        return self.buffer

    def diagnose(self, category, message, line=None):
        """
        Record a diagnostic anchored at :data:`line` (a :any:`Line` or line number).
        """
        lineno = getattr(line, 'lineno', line)
        return self.diagnostics.add(category, message, lineno)

    @property
    def name(self):
        return self.routine.name if self.routine else None

    def __repr__(self):
        return f'TranslationUnit<{self.filename or self.name}>'
