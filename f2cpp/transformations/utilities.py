# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Name sets and small helpers shared by the translation stages.
"""

import re

from f2cpp.ir import LineKind
from f2cpp.types import BaseType


__all__ = ['FORTRAN_KEYWORDS', 'FORTRAN_INTRINSICS', 'is_reserved', 'fold_integer', 'comment_out']


FORTRAN_KEYWORDS = frozenset((
    'access', 'assign', 'backspace', 'blank', 'block', 'call', 'close', 'common',
    'continue', 'data', 'dimension', 'direct', 'do', 'else', 'endif', 'enddo', 'end',
    'entry', 'eof', 'equivalence', 'err', 'exist', 'external', 'file', 'fmt', 'form',
    'format', 'formatted', 'function', 'go', 'to', 'goto', 'if', 'implicit', 'include',
    'inquire', 'intrinsic', 'iostat', 'named', 'namelist', 'nextrec', 'number', 'open',
    'opened', 'parameter', 'pause', 'print', 'program', 'read', 'rec', 'recl', 'return',
    'rewind', 'sequential', 'status', 'stop', 'subroutine', 'then', 'type', 'unformatted',
    'unit', 'write', 'save', 'while', 'none', 'true', 'false', 'extern',
)) | frozenset(BaseType.keywords())
"""
Words that never name a symbol of the translated routine.
"""

FORTRAN_INTRINSICS = frozenset((
    'abs', 'dabs', 'iabs', 'cabs', 'sqrt', 'dsqrt', 'exp', 'dexp', 'log', 'dlog', 'log10',
    'dlog10', 'sin', 'dsin', 'cos', 'dcos', 'tan', 'dtan', 'asin', 'acos', 'atan', 'datan',
    'atan2', 'datan2', 'sinh', 'cosh', 'tanh', 'min', 'max', 'min0', 'max0', 'amin1',
    'amax1', 'dmin1', 'dmax1', 'mod', 'dmod', 'sign', 'dsign', 'isign', 'int', 'nint',
    'idint', 'idnint', 'ifix', 'dble', 'dfloat', 'float', 'sngl', 'real', 'dreal',
    'aimag', 'dimag', 'cmplx', 'dcmplx', 'conjg', 'dconjg', 'ichar', 'char', 'len',
    'index', 'lge', 'lgt', 'lle', 'llt', 'pow',
))
"""
Fortran 77 intrinsic functions (plus ``pow`` introduced by the frontend).
"""


def is_reserved(name):
    name = name.lower()
    return name in FORTRAN_KEYWORDS or name in FORTRAN_INTRINSICS


_re_int = re.compile(r'^[-+]?\d+$')


def fold_integer(expr, symbols=None, parameters=None, _depth=0):
    """
    Evaluate a dimension or length expression to an :any:`int` if it is an
    integer literal, an integer-valued ``parameter`` constant, a ``lo:hi``
    range of those, or a product of those. Returns `None` otherwise.
    """
    if _depth > 16:
        return None
    expr = expr.strip()
    fold = lambda e: fold_integer(e, symbols, parameters, _depth + 1)  # pylint: disable=unnecessary-lambda-assignment

    if ':' in expr:
        lower, upper = (fold(e) for e in expr.split(':', 1))
        if lower is None or upper is None:
            return None
        return upper - lower + 1
    if '*' in expr:
        value = 1
        for factor in expr.split('*'):
            factor = fold(factor)
            if factor is None:
                return None
            value *= factor
        return value
    if expr.startswith('(') and expr.endswith(')'):
        return fold(expr[1:-1])
    if _re_int.match(expr):
        return int(expr)

    value = None
    if parameters is not None and expr in parameters:
        value = parameters[expr]
    elif symbols is not None and expr in symbols:
        value = symbols[expr].constant_value
    if value is not None:
        return fold(value)
    return None


def comment_out(line):
    """
    Return a clone of :data:`line` whose text is turned into a ``//`` comment.
    """
    return line.clone(text=f'{line.indent}// {line.content}', kind=LineKind.COMMENT, label=None)
