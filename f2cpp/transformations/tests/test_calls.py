# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

import pytest

from f2cpp.diagnostics import DiagnosticCategory
from f2cpp.frontend import parse_source
from f2cpp.ir import LineKind
from f2cpp.transformations import (
    Pipeline, TypeInference, SubscriptLinearizer, ControlFlowRestructurer, CallResolver,
    argument_ctype
)
from f2cpp.types import BaseType, SymbolKind, SymbolTable
from f2cpp.unit import TranslationUnit


@pytest.fixture(name='symbols')
def fixture_symbols():
    symbols = SymbolTable()
    symbols.declare('x', SymbolKind.VECTOR, base_type=BaseType.DOUBLEPRECISION, dimensions=('n',))
    symbols.declare('n', SymbolKind.SCALAR, base_type=BaseType.INTEGER)
    symbols.declare('c', SymbolKind.SCALAR, base_type=BaseType.CHARACTER)
    symbols.declare('z', SymbolKind.UNKNOWN)
    return symbols


def resolve(fcode):
    unit = TranslationUnit(buffer=parse_source(fcode))
    pipeline = Pipeline(classes=(TypeInference, SubscriptLinearizer, ControlFlowRestructurer, CallResolver))
    pipeline.apply(unit)
    return unit


def statements(unit):
    return [line.text for line in unit.buffer if not line.kind.is_comment]


@pytest.mark.parametrize('arg, ctype', [
    ("'abc'", 'const char *'),
    ('1', 'size_t'),
    ('-2', 'size_t'),
    ('true', 'bool'),
    ('2.0d0', 'double'),
    ('.5', 'double'),
    ('x', 'double *'),
    ('&x[1]', 'double *'),
    ('x[0]', 'double'),
    ('n + 1', 'int'),
    ('c', 'const char *'),
    ('z', 'unknown_type'),
    ('z + n', 'int'),
])
def test_argument_ctype(symbols, arg, ctype):
    assert argument_ctype(arg, symbols) == ctype


def test_statement_function():
    fcode = """
      integer function g(n)
      integer n
      integer f, x
      f(x) = x*x + 1
      g = f(3) + n
      end
"""
    unit = resolve(fcode)
    assert unit.prototypes == ['static inline int f(size_t x){ return x*x + 1; }']
    assert statements(unit) == [
        'int g(int n){',
        '      using namespace std',
        '      int g',
        '      int x',
        '      g = f(3) + n',
        '      return g',
        '}',
    ]
    assert unit.calls['f'] == '3'
    assert not unit.diagnostics


def test_statement_function_arity_mismatch():
    fcode = """
      subroutine s(y)
      double precision y, f, a, b
      f(a, b) = a + b
      y = f(y)
      end
"""
    unit = resolve(fcode)
    assert unit.prototypes == ['// Argument number mismatch in call to f']
    reports = unit.diagnostics.by_category(DiagnosticCategory.ARITY_MISMATCH)
    assert [d.message for d in reports] == ['f is defined with 2 arguments but called with 1']
    assert reports[0].lineno == 4


def test_statement_function_never_referenced():
    fcode = """
      subroutine s(y)
      double precision y, h, a
      h(a) = dabs(a)
      y = 1.0d0
      end
"""
    unit = resolve(fcode)
    assert not unit.prototypes
    reports = unit.diagnostics.by_category(DiagnosticCategory.UNSUPPORTED)
    assert [d.message for d in reports] == ['statement function h is never referenced']


def test_statement_function_body_intrinsics():
    fcode = """
      subroutine s(y)
      double precision y, h, a
      h(a) = dabs(a) + mod(a, 2.0d0)
      y = h(y)
      end
"""
    unit = resolve(fcode)
    assert unit.prototypes == [
        'static inline double h(double a){ return std::abs(a) + (a % 2.0e0); }'
    ]


def test_external_subroutine_calls():
    fcode = """
      subroutine scale2(n, v)
      integer n
      double precision v(n)
      external dscal
      call dscal(n, 2.0d0, v, 1)
      call dscal(n, 3.0d0, v(2), 1)
      call flush
      end
"""
    unit = resolve(fcode)
    assert unit.prototypes == ['void dscal(int, double, double *, size_t);', 'void flush();']
    assert statements(unit)[2:] == [
        '      dscal(n, 2.0d0, v, 1)',
        '      dscal(n, 3.0d0, &v[1], 1)',
        '      flush()',
        '}',
    ]
    assert not unit.buffer.find(LineKind.EXTERNAL)
    assert unit.calls['dscal'] == 'n, 2.0d0, v, 1'
    assert unit.symbols['dscal'].kind is SymbolKind.SUBROUTINE


def test_external_function_calls():
    fcode = """
      subroutine norm(n, x, y)
      integer n
      double precision x(n), y, dnrm2
      external dnrm2
      y = dnrm2(n, x, 1) + dnrm2(1, x(2), 1)
      end
"""
    unit = resolve(fcode)
    assert unit.prototypes == ['double dnrm2(int, double *, size_t);']
    assert statements(unit)[2:] == ['      y = dnrm2(n, x, 1) + dnrm2(1, &x[1], 1)', '}']


def test_procedure_argument():
    fcode = """
      subroutine apply(f, n, x)
      external f
      integer n
      double precision f, x(n)
      x(1) = f(x(2))
      end
"""
    unit = resolve(fcode)
    assert not unit.prototypes
    assert unit.routine.procedure_arguments['f'] == 'double (*f)(double *)'
    assert statements(unit) == [
        'void apply(double (*f)(double *), int n, double *x){',
        '      using namespace std',
        '      x[0] = f(&x[1])',
        '}',
    ]
    assert unit.routine.header is unit.buffer.find(LineKind.HEADER)[0]


def test_unbalanced_call():
    fcode = """
      subroutine s(y)
      double precision y, g
      y = g(y
      end
"""
    unit = resolve(fcode)
    risks = unit.diagnostics.by_category(DiagnosticCategory.STRUCTURAL_RISK)
    assert [d.message for d in risks] == ['unbalanced argument list in call to g']
    assert not unit.prototypes
