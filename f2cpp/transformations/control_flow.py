# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Conversion of labels, loops, block-IF constructs and jumps into
block-structured C++ control flow.
"""

import re
from collections import Counter

from f2cpp.diagnostics import DiagnosticCategory
from f2cpp.frontend.classify import DO_PATTERN
from f2cpp.ir import Line, LineKind
from f2cpp.tools import split_by_top_level_commas
from f2cpp.transformations.transformation import Transformation


__all__ = ['ControlFlowRestructurer', 'translate_do_loop']


_re_goto = re.compile(r'\bgo\s*to\s*(\d+)\b')
_re_do_while = re.compile(r'^do\s*(?P<label>\d+)?\s*,?\s*while\s*(?P<cond>\(.*\))$')
_re_literal_step = re.compile(r'^[-+]?\s*\d+$')


def translate_do_loop(var, start, stop, step=None):
    """
    Render the header of a counted ``for`` loop.

    The loop direction is taken from the sign of a literal :data:`step`, or
    decided at run time for non-literal steps.
    """
    if step is None:
        return f'for({var} = {start}; {var} <= {stop}; ++{var}){{'

    if _re_literal_step.match(step):
        increment = int(step.replace(' ', ''))
        if increment > 0:
            return f'for({var} = {start}; {var} <= {stop}; {var} += {increment}){{'
        if increment < 0:
            return f'for({var} = {start}; {var} >= {stop}; {var} -= {-increment}){{'

    return (f'for({var} = {start}; (({step} < 0) ? ({var} >= {stop}) : ({var} <= {stop})); '
            f'{var} += {step}){{')


class ControlFlowRestructurer(Transformation):
    """
    Translate Fortran control flow into C++ syntax.

    * numeric statement labels become named labels ``<routine>_L<label>``
      on a line of their own,
    * labelled ``do`` loops are closed by one brace per loop at their
      terminating statement, ``enddo``/``endif``/unlabelled ``continue``
      close a block,
    * ``do`` and ``do while`` become ``for`` and ``while`` loops,
    * block-IF constructs become brace blocks and ``go to`` becomes ``goto``.
    """

    def transform_unit(self, unit, **kwargs):
        if unit.routine is None:
            return

        labels = {line.label for line in unit.buffer if line.label}
        open_loops = Counter()

        def _restructure(line):
            if line.kind.is_comment:
                return None

            if line.kind in (LineKind.DO, LineKind.DO_WHILE):
                target = self._loop_label(line)
                if target:
                    open_loops[target] += 1
                    if target not in labels:
                        unit.diagnose(DiagnosticCategory.STRUCTURAL_RISK,
                                      f'do loop target label {target} not found; loop is left unclosed', line)

            new_lines = []
            closing = 0
            if line.label:
                new_lines += [Line(f'{unit.routine.label(line.label)}:', kind=LineKind.LABEL,
                                   lineno=line.lineno)]
                closing = open_loops.pop(line.label, 0)

            # A labelled continue is only a jump target or a loop terminator
            if not (line.kind is LineKind.CONTINUE and line.label):
                new_lines += self._translate(unit, line.clone(label=None) if line.label else line)

            new_lines += [Line(f'{line.indent}}}', kind=LineKind.END_DO, lineno=line.lineno)] * closing
            return new_lines

        unit.rebuild(_restructure)

    @staticmethod
    def _loop_label(line):
        if line.kind is LineKind.DO:
            return DO_PATTERN.match(line.text)['label']
        match = _re_do_while.match(line.content)
        return match['label'] if match else None

    def _translate(self, unit, line):
        """
        Translate a single unlabelled statement.
        """
        indent = line.indent
        content = line.content

        if line.kind is LineKind.DO:
            match = DO_PATTERN.match(line.text)
            bounds = split_by_top_level_commas(match['bounds'])
            if len(bounds) not in (2, 3):
                unit.diagnose(DiagnosticCategory.UNSUPPORTED,
                              f'do loop with {len(bounds)} bounds left untranslated', line)
                return [line]
            header = translate_do_loop(match['var'], *bounds)
            return [line.clone(text=f'{indent}{header}')]

        if line.kind is LineKind.DO_WHILE:
            match = _re_do_while.match(content)
            return [line.clone(text=f'{indent}while{match["cond"]}{{')]

        if line.kind in (LineKind.IF_THEN, LineKind.ELSE_IF, LineKind.ELSE):
            content = re.sub(r'^else\s*', '}else{ ', content)
            content = re.sub(r'\}else\{\s+if\s*\(', '}else if(', content)
            content = re.sub(r'\bthen$', '{', content).rstrip()
            return [line.clone(text=f'{indent}{content}')]

        if line.kind in (LineKind.END_IF, LineKind.END_DO, LineKind.CONTINUE):
            return [line.clone(text=f'{indent}}}')]

        if line.kind in (LineKind.GOTO, LineKind.IF):
            text = _re_goto.sub(lambda m: f'goto {unit.routine.label(m[1])}', line.text)
            return [line.clone(text=text)]

        return [line]
