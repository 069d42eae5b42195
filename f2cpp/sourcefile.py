# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Contains the declaration of :any:`Sourcefile` that represents one Fortran 77
source file and drives its translation into C++.
"""

from pathlib import Path

from codetiming import Timer

from f2cpp.backend import cppgen
from f2cpp.frontend import parse_source, read_file
from f2cpp.logging import info, perf
from f2cpp.transformations import (
    Pipeline, TypeInference, SubscriptLinearizer, ControlFlowRestructurer, CallResolver
)
from f2cpp.unit import TranslationUnit


__all__ = ['Sourcefile', 'translation_pipeline']


def translation_pipeline(**kwargs):
    """
    The ordered translation stages; every stage relies on the results of
    the previous ones.
    """
    return Pipeline(
        classes=(TypeInference, SubscriptLinearizer, ControlFlowRestructurer, CallResolver),
        **kwargs
    )


class Sourcefile:
    """
    Class to handle a fixed-form Fortran source file holding one
    subroutine or function.

    Reading existing source code from file or string can be done via
    :meth:`from_file` or :meth:`from_source`; :meth:`translate` runs the
    pipeline and :meth:`to_cpp` renders the result.

    Parameters
    ----------
    path : str
        The name of the source file.
    unit : :any:`TranslationUnit`
        The translation state of the file content
    """

    def __init__(self, path, unit):
        self.path = Path(path) if path is not None else path
        self.unit = unit
        self.translated = False

    @classmethod
    def from_file(cls, filename, tab_width=None):
        """
        Read and parse the file :data:`filename`.
        """
        log = f'[f2cpp::Sourcefile] Constructed from {filename}' + ' in {:.2f}s'
        with Timer(logger=info, text=log):
            filepath = Path(filename)
            source = read_file(filepath)
            return cls.from_source(source, path=filepath, tab_width=tab_width)

    @classmethod
    def from_source(cls, source, path=None, tab_width=None):
        """
        Parse the Fortran source string :data:`source`.
        """
        filename = str(path) if path is not None else None
        buffer = parse_source(source, tab_width=tab_width)
        return cls(path=path, unit=TranslationUnit(buffer=buffer, filename=filename))

    @property
    def symbols(self):
        return self.unit.symbols

    @property
    def diagnostics(self):
        return self.unit.diagnostics

    @property
    def routine(self):
        return self.unit.routine

    def translate(self, **kwargs):
        """
        Apply the translation pipeline to the unit. Translation happens only once.

        Keyword arguments are matched to the constructors of the stages.
        """
        if self.translated:
            return self
        with Timer(logger=perf, text=f'[f2cpp::Sourcefile] Translated {self.unit}' + ' in {:.2f}s'):
            translation_pipeline(**kwargs).apply(self.unit)
        self.translated = True
        return self

    def to_cpp(self, prototypes_first=None, **kwargs):
        """
        Translate (if not done yet) and return the generated C++ source.
        """
        self.translate(**kwargs)
        return cppgen(self.unit, prototypes_first=prototypes_first)

    def write(self, path=None, source=None, prototypes_first=None):
        """
        Write the generated C++ source to :data:`path` (default: the source
        path with a ``.cpp`` suffix).
        """
        path = self.path.with_suffix('.cpp') if path is None else Path(path)
        source = self.to_cpp(prototypes_first=prototypes_first) if source is None else source
        self.to_file(source=source, path=path)

    @classmethod
    def to_file(cls, source, path):
        """
        Same as :meth:`write` but can be called from a static context.
        """
        info(f'[f2cpp::Sourcefile] Writing to {path}')
        with Path(path).open('w') as f:
            f.write(source)
            if source[-1] != '\n':
                f.write('\n')

    def __repr__(self):
        return f'Sourcefile<{self.path}>'
