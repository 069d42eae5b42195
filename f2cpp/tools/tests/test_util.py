# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

import sys

import pytest

from f2cpp.tools import (
    as_tuple, filter_ordered, CaseInsensitiveDict, set_excepthook, auto_post_mortem_debugger
)


def test_as_tuple():
    assert as_tuple(None) == ()
    assert as_tuple('abc') == ('abc',)
    assert as_tuple(['a', 'b']) == ('a', 'b')
    assert as_tuple(3) == (3,)
    with pytest.raises(ValueError):
        as_tuple((1, 2), length=3)
    with pytest.raises(TypeError):
        as_tuple((1, 'a'), type=int)


def test_filter_ordered():
    assert filter_ordered(['b', 'a', 'b', 'c', 'a']) == ['b', 'a', 'c']
    assert filter_ordered(['I', 'j', 'i'], key=str.lower) == ['I', 'j']


def test_case_insensitive_dict():
    table = CaseInsensitiveDict()
    table['NaMe'] = 1
    assert table['name'] == 1
    assert table['NAME'] == 1
    assert 'nAmE' in table
    assert 1 not in table
    assert table.get('NAME') == 1
    assert table.get('other', 42) == 42
    assert list(table.keys()) == ['name']

    table.update({'X': 2})
    assert table['x'] == 2
    assert table.pop('X') == 2
    del table['NAME']
    assert not table


def test_set_excepthook():
    try:
        set_excepthook(hook=auto_post_mortem_debugger)
        assert sys.excepthook is auto_post_mortem_debugger
    finally:
        set_excepthook()
    assert sys.excepthook is sys.__excepthook__
