# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
The line buffer shared by all translation stages.

Each source line is classified once into a :any:`LineKind` by the
frontend. Stages never splice the buffer in place; instead they call
:meth:`LineBuffer.rebuild` with a callback that maps every line onto
zero or more replacement lines.
"""

from enum import Enum

from f2cpp.tools import as_tuple


__all__ = ['LineKind', 'Line', 'LineBuffer']


class LineKind(Enum):
    """
    Closed set of syntactic line shapes recognised by the classifier.
    """

    COMMENT = 'comment'
    BLANK = 'blank'
    HEADER = 'header'
    END = 'end'
    DECLARATION = 'declaration'
    PARAMETER = 'parameter'
    EXTERNAL = 'external'
    INTRINSIC = 'intrinsic'
    IMPLICIT = 'implicit'
    DO = 'do'
    DO_WHILE = 'do_while'
    IF_THEN = 'if_then'
    ELSE_IF = 'else_if'
    ELSE = 'else'
    END_IF = 'end_if'
    END_DO = 'end_do'
    CONTINUE = 'continue'
    GOTO = 'goto'
    CALL = 'call'
    RETURN = 'return'
    IF = 'if'
    ASSIGNMENT = 'assignment'
    OTHER = 'other'
    # Lines synthesised during translation
    LABEL = 'label'
    SYNTHETIC = 'synthetic'

    @property
    def is_executable(self):
        """
        Lines whose expressions are subject to subscript and call rewriting.
        """
        return self in (
            LineKind.DO, LineKind.DO_WHILE, LineKind.IF_THEN, LineKind.ELSE_IF,
            LineKind.CALL, LineKind.RETURN, LineKind.IF, LineKind.ASSIGNMENT,
            LineKind.OTHER
        )

    @property
    def is_comment(self):
        return self in (LineKind.COMMENT, LineKind.BLANK)


class Line:
    """
    A single (logical) line of the unit being translated.

    Parameters
    ----------
    text : str
        The line content, without trailing newline
    kind : :any:`LineKind`, optional
        Classification of the line
    label : str, optional
        Numeric statement label split off the fixed-form label field
    lineno : int, optional
        Line number in the original source file, used to anchor diagnostics
    declares : str, optional
        Name of the local variable that this line declares
    """

    def __init__(self, text, kind=None, label=None, lineno=None, declares=None):
        self.text = text
        self.kind = kind or LineKind.OTHER
        self.label = label
        self.lineno = lineno
        self.declares = declares

    def clone(self, **kwargs):
        args = {
            'text': self.text, 'kind': self.kind, 'label': self.label,
            'lineno': self.lineno, 'declares': self.declares
        }
        args.update(kwargs)
        return type(self)(**args)

    @property
    def indent(self):
        return self.text[:len(self.text) - len(self.text.lstrip())]

    @property
    def content(self):
        return self.text.strip()

    def __repr__(self):
        label = f' {self.label}' if self.label else ''
        return f'Line<{self.kind.name}{label}@{self.lineno}: {self.text.strip()!r}>'


class LineBuffer:
    """
    Ordered sequence of :any:`Line` objects.
    """

    def __init__(self, lines=None):
        self._lines = list(as_tuple(lines))

    @classmethod
    def from_source(cls, source):
        return cls(Line(text, lineno=i + 1) for i, text in enumerate(source.splitlines()))

    def __iter__(self):
        return iter(self._lines)

    def __len__(self):
        return len(self._lines)

    def __getitem__(self, index):
        return self._lines[index]

    @property
    def lines(self):
        return tuple(self._lines)

    def rebuild(self, callback):
        """
        Build a new :any:`LineBuffer` by passing every line through :data:`callback`.

        The callback returns `None` to keep a line unchanged, or a (possibly
        empty) sequence of replacement lines. Replacement entries may be
        :any:`Line` objects or plain strings; strings inherit kind, label
        and line number from the line they replace.
        """
        new_lines = []
        for line in self._lines:
            result = callback(line)
            if result is None:
                new_lines.append(line)
                continue
            for new in as_tuple(result):
                new_lines.append(new if isinstance(new, Line) else line.clone(text=new))
        return type(self)(new_lines)

    def find(self, kind):
        return tuple(line for line in self._lines if line.kind in as_tuple(kind))

    def to_source(self):
        return '\n'.join(line.text for line in self._lines)
