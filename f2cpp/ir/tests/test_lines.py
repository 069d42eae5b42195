# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

from f2cpp.ir import Line, LineKind, LineBuffer


def test_line_properties():
    line = Line('      x = 1', kind=LineKind.ASSIGNMENT, label='10', lineno=3)
    assert line.indent == ' ' * 6
    assert line.content == 'x = 1'
    assert 'ASSIGNMENT 10@3' in repr(line)

    clone = line.clone(text='      y = 2', label=None)
    assert clone.text == '      y = 2'
    assert clone.kind is LineKind.ASSIGNMENT
    assert clone.label is None
    assert clone.lineno == 3
    assert line.text == '      x = 1'

    assert Line('foo').kind is LineKind.OTHER


def test_line_kind_groups():
    assert LineKind.ASSIGNMENT.is_executable
    assert LineKind.CALL.is_executable
    assert not LineKind.DECLARATION.is_executable
    assert not LineKind.LABEL.is_executable
    assert LineKind.BLANK.is_comment and LineKind.COMMENT.is_comment
    assert not LineKind.OTHER.is_comment


def test_line_buffer_rebuild():
    buffer = LineBuffer.from_source('a\nb\nc')
    assert len(buffer) == 3
    assert [line.lineno for line in buffer] == [1, 2, 3]

    def _callback(line):
        if line.text == 'a':
            return None
        if line.text == 'b':
            return ()
        return ['c1', Line('c2', kind=LineKind.SYNTHETIC)]

    new_buffer = buffer.rebuild(_callback)
    assert new_buffer is not buffer
    assert len(buffer) == 3
    assert [line.text for line in new_buffer] == ['a', 'c1', 'c2']
    assert new_buffer[0] is buffer[0]
    assert new_buffer[1].lineno == 3
    assert new_buffer[2].kind is LineKind.SYNTHETIC
    assert new_buffer.to_source() == 'a\nc1\nc2'


def test_line_buffer_find():
    buffer = LineBuffer([
        Line('x', kind=LineKind.ASSIGNMENT), Line('c', kind=LineKind.COMMENT),
        Line('y', kind=LineKind.ASSIGNMENT)
    ])
    assert [line.text for line in buffer.find(LineKind.ASSIGNMENT)] == ['x', 'y']
    assert len(buffer.find((LineKind.COMMENT, LineKind.BLANK))) == 1
    assert buffer.lines[1].text == 'c'
