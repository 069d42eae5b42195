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
from f2cpp.transformations import TypeInference, parse_parameter_list, parse_declaration_entry
from f2cpp.types import BaseType, SymbolKind
from f2cpp.unit import TranslationUnit


def infer(fcode):
    unit = TranslationUnit(buffer=parse_source(fcode))
    TypeInference().apply(unit)
    return unit


def statements(unit):
    return [line.text for line in unit.buffer if not line.kind.is_comment]


def test_parse_parameter_list():
    assert parse_parameter_list('      parameter (n = 10, z = (1.0d0, 2.0d0))') == [
        ('n', '10'), ('z', 'std::complex<double>(1.0d0, 2.0d0)')
    ]
    assert parse_parameter_list('      x = 1') == []


@pytest.mark.parametrize('entry, expected', [
    ('x', ('x', (), None)),
    ('x(n)', ('x', ('n',), None)),
    ('a(lda, *)', ('a', ('lda', '*'), None)),
    ('name*8', ('name', (), '8')),
    ('msg*(*)', ('msg', (), '*')),
    ('1x', None),
])
def test_parse_declaration_entry(entry, expected):
    assert parse_declaration_entry(entry) == expected


def test_inference_subroutine():
    fcode = """
      subroutine axpy(n, a, x, y)
      integer n
      double precision a, x(n), y(n)
      integer i
      end
"""
    unit = infer(fcode)
    routine = unit.routine
    assert routine.name == 'axpy'
    assert routine.arguments == ('n', 'a', 'x', 'y')
    assert not routine.is_function
    assert not routine.active

    assert statements(unit) == [
        'void axpy(int n, double a, double *x, double *y){',
        '      using namespace std',
        '      int i',
        '}',
    ]
    assert unit.routine.header is unit.buffer.find(LineKind.HEADER)[0]

    symbols = unit.symbols
    assert symbols['axpy'].kind is SymbolKind.SUBROUTINE
    assert symbols['x'].kind is SymbolKind.VECTOR
    assert symbols['x'].dimensions == ('n',)
    assert symbols['x'].is_argument
    assert symbols['a'].base_type is BaseType.DOUBLEPRECISION
    assert symbols['i'].kind is SymbolKind.SCALAR
    assert not symbols['i'].is_argument
    assert not unit.diagnostics


def test_inference_function_with_typed_header():
    fcode = """
      double precision function twice(x)
      double precision x
      twice = x*2
      return
      end
"""
    unit = infer(fcode)
    assert unit.routine.is_function
    assert unit.routine.return_type is BaseType.DOUBLEPRECISION
    assert statements(unit) == [
        'double twice(double x){',
        '      using namespace std',
        '      double twice',
        '      twice = x*2',
        '      return twice',
        '      return twice',
        '}',
    ]


def test_inference_function_typed_in_body():
    fcode = """
      function cnt(n)
      integer n, cnt
      cnt = n
      end
"""
    unit = infer(fcode)
    assert statements(unit)[0] == 'int cnt(int n){'
    assert '      int cnt' in statements(unit)
    assert unit.symbols['cnt'].kind is SymbolKind.FUNCTION


def test_inference_logical_if_return():
    fcode = """
      double precision function g(x)
      double precision x
      g = 0
      if (x .gt. 0) return
      g = x
      end
"""
    unit = infer(fcode)
    assert '      if (x > 0) return g' in statements(unit)
    assert '      return g' in statements(unit)

    fcode = """
      subroutine s(x)
      double precision x
      if (x .gt. 0) return
      x = 1
      end
"""
    unit = infer(fcode)
    assert '      if (x > 0) return' in statements(unit)


def test_inference_parameters_and_local_arrays():
    fcode = """
      subroutine work
      integer n
      parameter (n = 10, m = 3)
      double precision w(n, 2), v(0:n)
      character*8 name
      character*(n) label
      end
"""
    unit = infer(fcode)
    texts = [line.text for line in unit.buffer]
    assert '      const int n = 10' in texts
    assert '      // parameter (n = 10, m = 3)' in texts
    assert '      const unknown_type m = 3' in texts
    assert '      double w[20]' in texts
    assert '      double v[11]' in texts
    assert '      char name[9]' in texts
    assert '      char label[11]' in texts

    assert unit.symbols['n'].kind is SymbolKind.PARAMETER
    assert unit.symbols['n'].constant_value == '10'
    assert unit.symbols['w'].kind is SymbolKind.MATRIX
    assert unit.symbols['v'].lower_bounds == ('0',)
    assert unit.symbols['name'].char_length == '9'

    diags = unit.diagnostics.by_category(DiagnosticCategory.UNRESOLVED_SYMBOL)
    assert [d.message for d in diags] == ['parameter m has no type declaration']


def test_inference_character_parameter():
    fcode = """
      subroutine greet
      character*5 hello
      parameter (hello = 'hello')
      end
"""
    unit = infer(fcode)
    assert "      const char *hello = 'hello'" in statements(unit)


def test_inference_variable_size_local_array():
    fcode = """
      subroutine scratch(n)
      integer n
      double precision tmp(n)
      end
"""
    unit = infer(fcode)
    assert '      double *tmp' in statements(unit)
    diags = unit.diagnostics.by_category(DiagnosticCategory.UNSUPPORTED)
    assert len(diags) == 1
    assert 'non-constant size' in diags[0].message


def test_inference_statement_function():
    fcode = """
      integer function g(n)
      integer n
      integer f, x
      f(x) = x*x + 1
      g = f(3) + n
      end
"""
    unit = infer(fcode)
    sfunc = unit.routine.statement_functions['f']
    assert sfunc.params == ('x',)
    assert sfunc.body == 'x*x + 1'
    assert sfunc.lineno == 5
    assert '      // f(x) = x*x + 1' in [line.text for line in unit.buffer]
    assert '      g = f(3) + n' in statements(unit)


def test_inference_undeclared_names():
    fcode = """
      subroutine s(n, y)
      double precision y
      y = z + 1.0d0
      call foo(y)
      end
"""
    unit = infer(fcode)
    assert unit.routine.header.text == 'void s(unknown_type n, double y){'
    assert unit.symbols['foo'].kind is SymbolKind.SUBROUTINE
    assert unit.symbols['z'].kind is SymbolKind.UNKNOWN

    messages = [d.message for d in unit.diagnostics.by_category(DiagnosticCategory.UNRESOLVED_SYMBOL)]
    assert messages == ['argument n has no type declaration', 'z is referenced but never declared']
    assert unit.diagnostics.by_category(DiagnosticCategory.UNRESOLVED_SYMBOL)[1].lineno == 4


def test_inference_external_names():
    fcode = """
      subroutine apply(f, n)
      external f
      double precision f
      integer n
      end
"""
    unit = infer(fcode)
    assert unit.symbols['f'].is_external
    assert unit.symbols['f'].is_argument
    assert unit.symbols['f'].base_type is BaseType.DOUBLEPRECISION
    extern = unit.buffer.find(LineKind.EXTERNAL)
    assert len(extern) == 1 and extern[0].declares == 'f'


def test_inference_structural_problems():
    unit = infer('      x = 1\n')
    messages = [d.message for d in unit.diagnostics]
    assert 'statement before routine header left untranslated' in messages
    assert 'no subroutine or function header found' in messages
    assert unit.buffer[0].text == '      // x = 1'

    unit = infer('      subroutine open\n      integer i\n')
    risks = unit.diagnostics.by_category(DiagnosticCategory.STRUCTURAL_RISK)
    assert [d.message for d in risks] == ['missing end statement for open']

    unit = infer('      subroutine one\n      end\n      subroutine two\n      end\n')
    assert [line.text for line in unit.buffer][-2:] == ['      // subroutine two', '      // end']
    messages = [d.message for d in unit.diagnostics.by_category(DiagnosticCategory.UNSUPPORTED)]
    assert messages == ['additional program unit two left untranslated']
