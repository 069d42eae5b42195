# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

import pytest

from f2cpp.config import config_override
from f2cpp.frontend import (
    read_file, is_comment_line, is_comment_or_empty_line, expand_tabs, join_continuation_lines
)
from f2cpp.ir import LineKind


@pytest.mark.parametrize('text, expected', [
    ('c     a comment', True),
    ('C     a comment', True),
    ('*     a comment', True),
    ('!     a comment', True),
    ('      ! indented comment', True),
    ('      x = 1', False),
    ('   10 continue', False),
    ('', False),
])
def test_is_comment_line(text, expected):
    assert is_comment_line(text) is expected


def test_is_comment_or_empty_line():
    assert is_comment_or_empty_line('')
    assert is_comment_or_empty_line('     ')
    assert not is_comment_or_empty_line('      call foo')


def test_expand_tabs():
    assert expand_tabs('\tx = 1', tab_width=6) == '      x = 1'
    with config_override({'tab-width': 2}):
        assert expand_tabs('\tx') == '  x'
    assert expand_tabs('\tx') == ' ' * 8 + 'x'


def test_join_continuation_lines():
    fcode = """
c     Comment line
      y = a +
     &    b +
     $    c
      call foo(x,
     $         z)
"""
    lines = join_continuation_lines(fcode)
    assert [line.kind for line in lines] == [
        LineKind.BLANK, LineKind.COMMENT, LineKind.OTHER, LineKind.OTHER
    ]
    assert lines[2].text == '      y = a + b + c'
    assert lines[2].lineno == 3
    assert lines[3].text == '      call foo(x, z)'
    assert lines[3].lineno == 6


def test_join_dollar_continuation():
    fcode = '      x = 1 +\n  $ 2\n'
    lines = join_continuation_lines(fcode)
    assert len(lines) == 1
    assert lines[0].text == '      x = 1 + 2'


def test_continuation_column_zero_is_not_a_continuation():
    lines = join_continuation_lines('      x = 1\n     0y = 2\n')
    assert len(lines) == 2


def test_read_file(tmp_path):
    path = tmp_path/'source.f'
    path.write_text('      subroutine foo\n      end\n', encoding='utf-8')
    assert read_file(path) == '      subroutine foo\n      end\n'

    bad_path = tmp_path/'bad.f'
    bad_path.write_bytes(b'      x = 1 \xff\n')
    assert read_file(bad_path) == '      x = 1 \n'
