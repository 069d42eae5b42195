# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Base class definition for translation stages.
"""

from codetiming import Timer

from f2cpp.logging import perf
from f2cpp.unit import TranslationUnit


__all__ = ['Transformation', 'TransformationError']


class TransformationError(Exception):
    """
    Exception raised when a :any:`Transformation` fails with an internal
    error while processing a :any:`TranslationUnit`

    Problems with the translated source never raise; they are recorded as
    diagnostics. This error signals a defect of the translator itself.

    Parameters
    ----------
    message : str
        Description of the error
    transformation : subclass of :any:`Transformation`
        The class of the transformation in which the error occured
    source : :any:`TranslationUnit`
        The unit that was processed when the error occured
    """

    def __init__(self, message, transformation, source):
        super().__init__(message)
        self.message = message
        self.transformation = transformation
        self.source = source

    def __str__(self):
        return f"Applying {self.transformation.__name__} to {self.source} failed: {self.message}"


class Transformation:
    """
    Base class for translation stages that rewrite a :any:`TranslationUnit`
    in place via :meth:`apply`.

    Subclasses implement :meth:`transform_unit`, which reads and rebuilds
    the unit's :any:`LineBuffer` and updates its :any:`SymbolTable`.
    """

    def __str__(self):
        return type(self).__name__

    def transform_unit(self, unit, **kwargs):
        """
        Defines the translation stage to apply to a :any:`TranslationUnit`.

        Parameters
        ----------
        unit : :any:`TranslationUnit`
            The unit to transform.
        **kwargs : optional
            Keyword arguments for the transformation.
        """

    def apply(self, unit, **kwargs):
        """
        Apply :meth:`transform_unit` to :data:`unit`, timing the stage and
        wrapping internal errors in a :any:`TransformationError`.
        """
        if not isinstance(unit, TranslationUnit):
            raise TypeError('Transformation.apply can only be applied to TranslationUnit object')

        text = lambda s: f'[f2cpp::{self}] Executed on {unit.filename or unit.name} in {s:.2f}s'
        with Timer(logger=perf, text=text):
            try:
                self.transform_unit(unit, **kwargs)
            except Exception as e:
                raise TransformationError(
                    message=f'Error in unit {unit.name} -- {e!s}',
                    transformation=type(self), source=unit
                ) from e
