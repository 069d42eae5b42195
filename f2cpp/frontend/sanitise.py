# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Regex-based token substitutions applied to every statement line before
classification.
"""

import re
from collections import defaultdict, OrderedDict

from codetiming import Timer

from f2cpp.logging import detail, perf
from f2cpp.tools import (
    replace_outside_quotes, get_matching_paren_pos, get_matching_paren_pos_backwards,
    split_quoted
)


__all__ = ['PPRule', 'PowerRule', 'sanitize_registry', 'sanitize_lines', 'replace_power_operator']


class PPRule:
    """
    A preprocessing rule that defines and applies a source replacement
    and collects associated meta-data.

    Parameters
    ----------
    match : str or re.Pattern
        Plain string or compiled pattern to replace
    replace : str or callable
        Replacement string or function, as accepted by :meth:`re.Pattern.sub`
    quoted : bool
        Also apply the rule inside quoted string literals (default: `False`)
    """

    _empty_pattern = re.compile('')

    def __init__(self, match, replace, quoted=False):
        self.match = match
        self.replace = replace
        self.quoted = quoted

        self._info = defaultdict(list)

    def reset(self):
        self._info = defaultdict(list)

    def _apply(self, text, lineno):
        if isinstance(self.match, type(self._empty_pattern)):
            for info in self.match.finditer(text):
                self._info[lineno] += [info.group(0)]
            return self.match.sub(self.replace, text)
        if self.match in text:
            self._info[lineno] += [self.match]
        return text.replace(self.match, self.replace)

    def filter(self, line, lineno):
        """
        Filter a source line by matching the given rule and storing meta-content.
        """
        if self.quoted:
            return self._apply(line, lineno)
        return replace_outside_quotes(line, lambda seg: self._apply(seg, lineno))

    @property
    def info(self):
        """
        Per-line record of the fragments replaced by this rule.
        """
        return self._info


def _split_power_base(before):
    """
    Split the text preceding ``**`` into ``(prefix, base)``.
    """
    stripped = before.rstrip()
    if stripped.endswith(')'):
        start = get_matching_paren_pos_backwards(stripped)
        if start == -1:
            return before, None
        # A function call or array reference keeps its name as part of the base
        name = re.search(r'[a-z_][a-z0-9_]*\s*$', stripped[:start], re.I)
        if name:
            return stripped[:name.start()], stripped[name.start():]
        return stripped[:start], stripped[start+1:-1].strip()

    token = re.search(r'[a-z0-9_.]+$', stripped, re.I)
    if not token:
        return before, None
    return stripped[:token.start()], token.group(0)


def _split_power_exponent(after):
    """
    Split the text following ``**`` into ``(exponent, suffix)``.
    """
    stripped = after.lstrip()
    if stripped.startswith('('):
        end = get_matching_paren_pos(stripped)
        if end == -1:
            return None, after
        return stripped[1:end].strip(), stripped[end+1:]

    token = re.match(r'[-+]?\s*[a-z0-9_.]+', stripped, re.I)
    if not token:
        return None, after
    expo, rest = token.group(0).replace(' ', ''), stripped[token.end():]
    # Function calls and array references in the exponent
    if rest.startswith('('):
        end = get_matching_paren_pos(rest)
        if end != -1:
            expo, rest = expo + rest[:end+1], rest[end+1:]
    return expo, rest


def replace_power_operator(line):
    """
    Replace every ``base**expo`` by ``pow(base, expo)``, innermost-right first.

    Operands that cannot be determined are left untouched.
    """
    while True:
        pos = -1
        offset = 0
        for segment, quoted in split_quoted(line):
            if not quoted and '**' in segment:
                pos = offset + segment.rindex('**')
            offset += len(segment)
        if pos == -1:
            return line

        prefix, base = _split_power_base(line[:pos])
        expo, suffix = _split_power_exponent(line[pos+2:])
        if not base or not expo:
            return line
        line = f'{prefix}pow({base}, {expo}){suffix}'


class PowerRule(PPRule):
    """
    Rule converting the Fortran exponentiation operator into calls to ``pow``.
    """

    def __init__(self):
        super().__init__(match='**', replace=None)

    def filter(self, line, lineno):
        new_line = replace_power_operator(line)
        if new_line != line:
            self._info[lineno] += [new_line]
        return new_line


def _lower(match):
    return match.group(0).lower()


sanitize_registry = OrderedDict([
    # Fortran is case-insensitive; string literals keep their case
    ('LOWERCASE', PPRule(match=re.compile(r'[A-Z]+'), replace=_lower)),

    # Collapse multi-word and sized type names
    ('DOUBLEPRECISION', PPRule(match=re.compile(r'\bdouble\s+precision\b'), replace='doubleprecision')),
    ('DOUBLECOMPLEX', PPRule(match=re.compile(r'\bdouble\s+complex\b'), replace='doublecomplex')),
    ('COMPLEX16', PPRule(match=re.compile(r'\bcomplex\s*\*\s*16\b'), replace='doublecomplex')),
    ('REAL8', PPRule(match=re.compile(r'\breal\s*\*\s*8\b'), replace='doubleprecision')),

    # Relational and logical operators
    ('GT', PPRule(match=re.compile(r'\s*\.gt\.\s*'), replace=' > ')),
    ('GE', PPRule(match=re.compile(r'\s*\.ge\.\s*'), replace=' >= ')),
    ('LT', PPRule(match=re.compile(r'\s*\.lt\.\s*'), replace=' < ')),
    ('LE', PPRule(match=re.compile(r'\s*\.le\.\s*'), replace=' <= ')),
    ('EQ', PPRule(match=re.compile(r'\s*\.eq\.\s*'), replace=' == ')),
    ('NE', PPRule(match=re.compile(r'\s*\.ne\.\s*'), replace=' != ')),
    ('NOT', PPRule(match=re.compile(r'\.not\.\s*'), replace='!')),
    ('AND', PPRule(match=re.compile(r'\s*\.and\.\s*'), replace=' && ')),
    ('OR', PPRule(match=re.compile(r'\s*\.or\.\s*'), replace=' || ')),
    ('TRUE', PPRule(match='.true.', replace='true')),
    ('FALSE', PPRule(match='.false.', replace='false')),

    # Exponentiation
    ('POWER', PowerRule()),
])
"""
The ordered registry of sanitisation rules applied to every statement line.
Case folding must come first, as all other rules match lower-case text only.
"""


@Timer(logger=perf, text=lambda s: f'[f2cpp::Frontend] Executed sanitize_lines in {s:.2f}s')
def sanitize_lines(lines):
    """
    Apply all rules of the :data:`sanitize_registry` to every statement
    line in :data:`lines`, modifying them in place.
    """
    for name, rule in sanitize_registry.items():
        rule.reset()
        for line in lines:
            if line.kind.is_comment:
                continue
            line.text = rule.filter(line.text, lineno=line.lineno)
        if rule.info:
            detail(f'[f2cpp::Frontend] Rule {name} applied on {len(rule.info)} line(s)')
    return lines
