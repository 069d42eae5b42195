# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

from codetiming import Timer

from f2cpp.frontend.classify import classify_lines
from f2cpp.frontend.reader import expand_tabs, join_continuation_lines
from f2cpp.frontend.sanitise import sanitize_lines
from f2cpp.ir import LineBuffer
from f2cpp.logging import perf


__all__ = ['parse_source']


@Timer(logger=perf, text=lambda s: f'[f2cpp::Frontend] Executed parse_source in {s:.2f}s')
def parse_source(source, tab_width=None):
    """
    Run the full frontend on a Fortran source string.

    Parameters
    ----------
    source : str
        Fixed-form Fortran 77 source text
    tab_width : int, optional
        Number of spaces per tab (default taken from the ``tab-width`` config option)

    Returns
    -------
    :any:`LineBuffer`
        The classified logical lines of the source
    """
    lines = join_continuation_lines(expand_tabs(source, tab_width=tab_width))
    lines = sanitize_lines(lines)
    return LineBuffer(classify_lines(lines))
