# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Delimiter-aware string scanning utilities shared by all translation stages.

All scanners treat ``()``, ``[]`` and ``{}`` as one family of nesting
delimiters and skip over quoted string literals, so that commas or
parentheses inside a Fortran character constant never count.
"""

import re


__all__ = [
    'OPENERS', 'CLOSERS', 'QUOTES', 'split_quoted', 'get_matching_paren_pos',
    'get_matching_paren_pos_backwards', 'split_by_top_level_commas',
    'find_unmatched_delimiter', 'iter_identifiers', 'replace_outside_quotes',
    'truncate_string'
]


OPENERS = '([{'
CLOSERS = ')]}'
QUOTES = '\'"'

_re_identifier = re.compile(r'(?<![\w$.])[a-z_][a-z0-9_]*', re.I)


def truncate_string(string, length=16, continuation='...'):
    """
    Truncates a string to have a maximum given number of characters and indicates the
    truncation by continuation characters '...'.
    """
    if len(string) > length:
        return string[:length - len(continuation)] + continuation
    return string


def _quote_mask(string):
    """
    Return a list of booleans flagging every character of :data:`string`
    that belongs to a quoted literal (including the quote characters).
    """
    mask = [False] * len(string)
    open_quote = None
    for i, ch in enumerate(string):
        if open_quote:
            mask[i] = True
            if ch == open_quote:
                open_quote = None
        elif ch in QUOTES:
            mask[i] = True
            open_quote = ch
    return mask


def split_quoted(string):
    """
    Split :data:`string` into a list of ``(segment, is_quoted)`` tuples.

    Doubled quote characters inside a literal (Fortran's escape for a
    quote) keep the whole literal in one quoted segment.
    """
    segments = []
    mask = _quote_mask(string)
    start = 0
    for i in range(1, len(string) + 1):
        if i == len(string) or mask[i] != mask[start]:
            segments += [(string[start:i], mask[start])]
            start = i
    return segments


def replace_outside_quotes(string, func):
    """
    Apply :data:`func` to every unquoted segment of :data:`string`.
    """
    return ''.join(seg if quoted else func(seg) for seg, quoted in split_quoted(string))


def get_matching_paren_pos(string, start=0):
    """
    Find the position of the delimiter closing the one at :data:`start`.

    Parameters
    ----------
    string : str
        The text to scan
    start : int, optional
        Index of the opening delimiter (default: 0)

    Returns
    -------
    int
        Index of the balancing closing delimiter, or ``-1`` if
        ``string[start]`` is not an opening delimiter or it is never closed.
    """
    if start >= len(string) or string[start] not in OPENERS:
        return -1
    mask = _quote_mask(string)
    depth = 0
    for i in range(start, len(string)):
        if mask[i]:
            continue
        if string[i] in OPENERS:
            depth += 1
        elif string[i] in CLOSERS:
            depth -= 1
            if depth == 0:
                return i
    return -1


def get_matching_paren_pos_backwards(string, end=None):
    """
    Find the position of the delimiter opening the one at :data:`end`.

    This is the mirror image of :meth:`get_matching_paren_pos`, scanning
    from a closing delimiter (by default the last character) towards the
    start of the string. Returns ``-1`` if there is no balancing opener.
    """
    if end is None:
        end = len(string) - 1
    if end < 0 or end >= len(string) or string[end] not in CLOSERS:
        return -1
    mask = _quote_mask(string)
    depth = 0
    for i in range(end, -1, -1):
        if mask[i]:
            continue
        if string[i] in CLOSERS:
            depth += 1
        elif string[i] in OPENERS:
            depth -= 1
            if depth == 0:
                return i
    return -1


def split_by_top_level_commas(string, strip=True):
    """
    Split :data:`string` at commas that are not nested in any delimiters.

    >>> split_by_top_level_commas('a,(b,c),d')
    ['a', '(b,c)', 'd']
    >>> split_by_top_level_commas('(a,(b,c))')
    ['(a,(b,c))']

    Commas inside quoted literals are never split. An empty string yields
    an empty list.
    """
    if not string.strip():
        return []
    mask = _quote_mask(string)
    parts = []
    depth = 0
    start = 0
    for i, ch in enumerate(string):
        if mask[i]:
            continue
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth = max(depth - 1, 0)
        elif ch == ',' and depth == 0:
            parts += [string[start:i]]
            start = i + 1
    parts += [string[start:]]
    if strip:
        parts = [p.strip() for p in parts]
    return parts


def find_unmatched_delimiter(string):
    """
    Return the index of the first unbalanced delimiter in :data:`string`.

    This is either a closing delimiter that has no opener (depth underflow)
    or the outermost opener still open at the end of the string. If all
    delimiters are balanced ``-1`` is returned.
    """
    mask = _quote_mask(string)
    stack = []
    for i, ch in enumerate(string):
        if mask[i]:
            continue
        if ch in OPENERS:
            stack += [i]
        elif ch in CLOSERS:
            if not stack:
                return i
            stack.pop()
    return stack[0] if stack else -1


def iter_identifiers(string):
    """
    Yield ``re.Match`` objects for every identifier outside quoted literals.

    Tokens that merely continue a numeric literal (eg. the ``d0`` in
    ``1.0d0``) are not identifiers and are skipped.
    """
    mask = _quote_mask(string)
    for match in _re_identifier.finditer(string):
        if not mask[match.start()]:
            yield match
