# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Collection of non-fatal translation problems.

Nothing in the translator aborts on malformed or ambiguous input. Each
problem is recorded as a :any:`Diagnostic` anchored to the original source
line, logged, and later rendered as a comment next to the affected output.
"""

from enum import Enum

from f2cpp.logging import warning


__all__ = ['DiagnosticCategory', 'Diagnostic', 'Diagnostics']


class DiagnosticCategory(Enum):
    """
    Taxonomy of translation problems.
    """

    UNMATCHED_DELIMITER = 'unmatched-delimiter'
    UNRESOLVED_SYMBOL = 'unresolved-symbol'
    ARITY_MISMATCH = 'arity-mismatch'
    AMBIGUOUS_SUBSCRIPT = 'ambiguous-subscript'
    STRUCTURAL_RISK = 'structural-risk'
    UNSUPPORTED = 'unsupported'


class Diagnostic:
    """
    A single problem report.

    Parameters
    ----------
    category : :any:`DiagnosticCategory`
        The kind of problem
    message : str
        Human-readable description
    lineno : int, optional
        Original source line the problem is anchored to
    """

    def __init__(self, category, message, lineno=None):
        self.category = category
        self.message = message
        self.lineno = lineno

    @property
    def comment(self):
        return f'// [f2cpp] {self.category.value}: {self.message}'

    def __eq__(self, other):
        if not isinstance(other, Diagnostic):
            return NotImplemented
        return (self.category, self.message, self.lineno) == (other.category, other.message, other.lineno)

    def __hash__(self):
        return hash((self.category, self.message, self.lineno))

    def __repr__(self):
        return f'Diagnostic<{self.category.value}@{self.lineno}: {self.message}>'


class Diagnostics:
    """
    Sink that accumulates :any:`Diagnostic` reports for one translation unit.
    """

    def __init__(self, filename=None):
        self.filename = filename
        self._reports = []

    def add(self, category, message, lineno=None):
        """
        Record a problem, ignoring exact duplicates, and log it as a warning.
        """
        report = Diagnostic(category, message, lineno)
        if report in self._reports:
            return report
        self._reports.append(report)

        location = f'{self.filename or "<source>"}:{lineno if lineno is not None else "?"}'
        warning(f'[f2cpp] {location} {category.value}: {message}')
        return report

    def __iter__(self):
        return iter(self._reports)

    def __len__(self):
        return len(self._reports)

    def __bool__(self):
        return bool(self._reports)

    def by_category(self, category):
        return tuple(r for r in self._reports if r.category is category)

    def by_line(self):
        """
        Map of anchor line numbers to their reports, in order of recording.
        """
        anchored = {}
        for report in self._reports:
            anchored.setdefault(report.lineno, []).append(report)
        return anchored
