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
from f2cpp.transformations import TypeInference, ControlFlowRestructurer, translate_do_loop
from f2cpp.unit import TranslationUnit


def restructure(fcode):
    unit = TranslationUnit(buffer=parse_source(fcode))
    TypeInference().apply(unit)
    ControlFlowRestructurer().apply(unit)
    return unit


def body(unit):
    """
    Statement texts between the synthesised ``using`` line and the closing brace.
    """
    texts = [line.text for line in unit.buffer if not line.kind.is_comment]
    return texts[2:-1]


@pytest.mark.parametrize('args, expected', [
    (('i', '1', 'n'), 'for(i = 1; i <= n; ++i){'),
    (('i', '1', 'n', '2'), 'for(i = 1; i <= n; i += 2){'),
    (('i', 'n', '1', '-1'), 'for(i = n; i >= 1; i -= 1){'),
    (('i', 'n', '1', '- 3'), 'for(i = n; i >= 1; i -= 3){'),
    (('k', '1', 'n', 'inc'),
     'for(k = 1; ((inc < 0) ? (k >= n) : (k <= n)); k += inc){'),
])
def test_translate_do_loop(args, expected):
    assert translate_do_loop(*args) == expected


def test_labelled_loops():
    fcode = """
      subroutine sum2(n, m, a, s)
      integer n, m, i, j
      double precision a, s
      do 20 j = 1, m
      do 20 i = 1, n
         s = s + a
   20 continue
      do 30 i = n, 1, -1
   30 s = s - a
      end
"""
    unit = restructure(fcode)
    assert body(unit) == [
        '      int i',
        '      int j',
        '      for(j = 1; j <= m; ++j){',
        '      for(i = 1; i <= n; ++i){',
        '         s = s + a',
        'sum2_L20:',
        '      }',
        '      }',
        '      for(i = n; i >= 1; i -= 1){',
        'sum2_L30:',
        '      s = s - a',
        '      }',
    ]
    labels = unit.buffer.find(LineKind.LABEL)
    assert [line.lineno for line in labels] == [8, 10]
    assert not unit.diagnostics


def test_block_constructs():
    fcode = """
      subroutine cmp(a, b, c)
      double precision a, b, c
      if (a > b) then
         c = a
      else if (a < b) then
         c = b
      else
         c = 0
      endif
      do while (c > 1)
         c = c / 2
      enddo
      end
"""
    unit = restructure(fcode)
    assert body(unit) == [
        '      if (a > b) {',
        '         c = a',
        '      }else if(a < b) {',
        '         c = b',
        '      }else{',
        '         c = 0',
        '      }',
        '      while(c > 1){',
        '         c = c / 2',
        '      }',
    ]


def test_goto_and_labels():
    fcode = """
      subroutine jump(x)
      double precision x
   10 x = x - 1
      if (x > 0) go to 10
      goto 20
   20 continue
      end
"""
    unit = restructure(fcode)
    assert body(unit) == [
        'jump_L10:',
        '      x = x - 1',
        '      if (x > 0) goto jump_L10',
        '      goto jump_L20',
        'jump_L20:',
    ]


def test_labelled_end_keeps_label():
    fcode = """
      subroutine early(x)
      double precision x
      if (x > 0) goto 99
      x = 1
   99 end
"""
    unit = restructure(fcode)
    texts = [line.text for line in unit.buffer]
    assert texts[-2:] == ['early_L99:', '}']


def test_missing_loop_target():
    fcode = """
      subroutine broken(n)
      integer n, i
      do 50 i = 1, n
      n = n + 1
      end
"""
    unit = restructure(fcode)
    risks = unit.diagnostics.by_category(DiagnosticCategory.STRUCTURAL_RISK)
    assert [d.message for d in risks] == ['do loop target label 50 not found; loop is left unclosed']
    assert risks[0].lineno == 4


def test_loop_with_bad_bounds():
    fcode = """
      subroutine odd(n)
      integer n, i
      do i = 1, n, 1, 2
      enddo
      end
"""
    unit = restructure(fcode)
    messages = [d.message for d in unit.diagnostics.by_category(DiagnosticCategory.UNSUPPORTED)]
    assert messages == ['do loop with 4 bounds left untranslated']
    assert body(unit)[1] == '      do i = 1, n, 1, 2'
