# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Classes representing the base types and symbol kinds of Fortran 77
identifiers, and their mapping onto C++ types.
"""

from enum import Enum


__all__ = ['BaseType', 'SymbolKind', 'UNKNOWN_CTYPE']


UNKNOWN_CTYPE = 'unknown_type'
"""
Placeholder type emitted wherever no type could be inferred.
"""


class BaseType(int, Enum):
    """
    Representation of the Fortran 77 base types recognised by the translator.

    Names are taken from the collapsed Fortran keyword spelling, and every
    member maps onto exactly one C++ type via :attr:`ctype`.
    """

    LOGICAL = 1
    CHARACTER = 2
    INTEGER = 3
    FTNLEN = 4
    DOUBLEPRECISION = 5
    DOUBLECOMPLEX = 6

    @property
    def ctype(self):
        """
        The C++ type string corresponding to this base type.
        """
        return {
            BaseType.LOGICAL: 'bool',
            BaseType.CHARACTER: 'char',
            BaseType.INTEGER: 'int',
            BaseType.FTNLEN: 'size_t',
            BaseType.DOUBLEPRECISION: 'double',
            BaseType.DOUBLECOMPLEX: 'std::complex<double>',
        }[self]

    @property
    def keyword(self):
        return self.name.lower()

    @classmethod
    def from_fortran_type(cls, value):
        """
        Convert the given string representation of a Fortran type,
        accepting the uncollapsed spellings as well.
        """
        type_map = {
            'logical': cls.LOGICAL, 'character': cls.CHARACTER,
            'integer': cls.INTEGER, 'ftnlen': cls.FTNLEN,
            'doubleprecision': cls.DOUBLEPRECISION, 'double precision': cls.DOUBLEPRECISION,
            'real*8': cls.DOUBLEPRECISION,
            'doublecomplex': cls.DOUBLECOMPLEX, 'double complex': cls.DOUBLECOMPLEX,
            'complex*16': cls.DOUBLECOMPLEX,
        }
        return type_map[' '.join(value.lower().split())]

    @classmethod
    def keywords(cls):
        """
        The collapsed Fortran keywords of all base types.
        """
        return tuple(t.keyword for t in cls)


class SymbolKind(Enum):
    """
    Syntactic role of an identifier within a translation unit.
    """

    SCALAR = 'Scalar'
    VECTOR = 'Vector'
    MATRIX = 'Matrix'
    PARAMETER = 'Parameter'
    SUBROUTINE = 'Subroutine'
    FUNCTION = 'Function'
    UNKNOWN = 'Unknown'

    @property
    def is_array(self):
        return self in (SymbolKind.VECTOR, SymbolKind.MATRIX)

    @classmethod
    def from_rank(cls, rank):
        """
        Derive the kind from the number of declared dimensions.
        """
        return {0: cls.SCALAR, 1: cls.VECTOR, 2: cls.MATRIX}.get(rank, cls.UNKNOWN)
