# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Per-unit symbol table that records kind, base type and dimensions of
every identifier of the routine being translated.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from f2cpp.tools import CaseInsensitiveDict, as_tuple
from f2cpp.types.datatypes import BaseType, SymbolKind, UNKNOWN_CTYPE


__all__ = ['Symbol', 'SymbolTable']


@dataclass
class Symbol:
    """
    Type information for a single identifier.

    Parameters
    ----------
    name : str
        The identifier, normalised to lower case
    kind : :any:`SymbolKind`
        Syntactic role of the identifier
    base_type : :any:`BaseType`, optional
        Declared base type, `None` while undeclared
    dimensions : tuple of str
        Dimension expressions as written in the declaration
    is_argument : bool
        The name is a dummy argument of the routine
    constant_value : str, optional
        Value expression of a ``parameter`` constant
    char_length : str, optional
        Buffer size of ``character`` variables (declared length + 1)
    is_external : bool
        The name appeared in an ``external`` statement
    """

    name: str
    kind: SymbolKind = SymbolKind.UNKNOWN
    base_type: Optional[BaseType] = None
    dimensions: Tuple[str, ...] = field(default_factory=tuple)
    is_argument: bool = False
    constant_value: Optional[str] = None
    char_length: Optional[str] = None
    is_external: bool = False

    def __post_init__(self):
        self.name = self.name.lower()
        self.dimensions = as_tuple(self.dimensions)

    def clone(self, **kwargs):
        return replace(self, **kwargs)

    @property
    def ctype(self):
        return self.base_type.ctype if self.base_type else UNKNOWN_CTYPE

    @property
    def is_array(self):
        return self.kind.is_array

    @property
    def is_character(self):
        return self.base_type is BaseType.CHARACTER

    @staticmethod
    def _split_bounds(dim):
        if ':' in dim:
            lower, upper = dim.split(':', 1)
            return lower.strip(), upper.strip()
        return '1', dim.strip()

    @property
    def lower_bounds(self):
        """
        Lower bound expressions of all dimensions (``'1'`` unless declared as ``lo:hi``).
        """
        return tuple(self._split_bounds(d)[0] for d in self.dimensions)

    @property
    def extents(self):
        """
        Extent expressions of all dimensions.
        """
        extents = []
        for dim in self.dimensions:
            lower, upper = self._split_bounds(dim)
            extents += [upper if lower == '1' else f'({upper})-({lower})+1']
        return tuple(extents)

    @property
    def leading_dimension(self):
        """
        The first declared extent, used for column-major linearisation.
        """
        return self.extents[0] if self.dimensions else None


class SymbolTable(CaseInsensitiveDict):
    """
    Case-insensitive mapping of identifier names to :any:`Symbol` objects.

    Symbols are fixed once declared: :meth:`declare` only upgrades symbols
    that are still of :any:`SymbolKind.UNKNOWN` kind and refuses any other
    redeclaration.
    """

    def declare(self, name, kind, base_type=None, dimensions=None, **kwargs):
        """
        Declare a new symbol, or upgrade an existing placeholder.

        Returns
        -------
        :any:`Symbol` or None
            The declared symbol, or `None` if :data:`name` was already declared.
        """
        existing = self.get(name)
        if existing is not None and existing.kind is not SymbolKind.UNKNOWN:
            return None

        if existing is None:
            symbol = Symbol(name=name, kind=kind, base_type=base_type,
                            dimensions=as_tuple(dimensions), **kwargs)
        else:
            symbol = existing.clone(kind=kind, base_type=base_type or existing.base_type,
                                    dimensions=as_tuple(dimensions), **kwargs)
        self[name] = symbol
        return symbol

    def set_type(self, name, base_type):
        """
        Attach a base type to an already registered symbol.
        """
        self[name] = self[name].clone(base_type=base_type)
        return self[name]

    def lookup(self, name, kind=None):
        """
        Return the symbol for :data:`name`, optionally only if it is of
        (one of) the given :data:`kind`.
        """
        symbol = self.get(name)
        if symbol is None or kind is None:
            return symbol
        return symbol if symbol.kind in as_tuple(kind) else None

    def is_array(self, name):
        symbol = self.get(name)
        return symbol is not None and symbol.is_array

    def by_kind(self, kind):
        return tuple(s for s in self.values() if s.kind in as_tuple(kind))

    @property
    def arguments(self):
        return tuple(s for s in self.values() if s.is_argument)
