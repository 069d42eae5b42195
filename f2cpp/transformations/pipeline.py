# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Ordered chaining of the translation stages.
"""

from inspect import signature, Parameter

from f2cpp.logging import detail


__all__ = ['Pipeline']


class Pipeline:
    """
    An ordered sequence of :any:`Transformation` stages applied to one
    :any:`TranslationUnit`.

    The stages are constructed from the keyword arguments given here: each
    stage receives exactly those keywords that appear in a constructor
    signature of its class hierarchy, so that e.g. ``simplify=False`` reaches
    the :any:`SubscriptLinearizer` while the other stages ignore it.

    Attributes
    ----------
    transformations : list of :any:`Transformation`
        The stages, in order of application

    Parameters
    ----------
    classes : tuple of types
        The :any:`Transformation` classes to instantiate, in order
    **kwargs : optional
        Keyword arguments matched to the constructor signatures of the stages
    """

    def __init__(self, classes=None, **kwargs):
        self.transformations = [cls(**self._constructor_kwargs(cls, kwargs)) for cls in classes or ()]

    @staticmethod
    def _constructor_kwargs(cls, kwargs):
        parameters = {
            name for c in cls.__mro__ for name, p in signature(c).parameters.items()
            if p.kind not in (Parameter.VAR_KEYWORD, Parameter.VAR_POSITIONAL)
        }
        return {k: v for k, v in kwargs.items() if k in parameters}

    def __str__(self):
        return ' -> '.join(str(t) for t in self.transformations)

    def apply(self, unit, **kwargs):
        """
        Apply the stages to :data:`unit` in order; each one relies on the
        results of the stages before it.
        """
        for trafo in self.transformations:
            trafo.apply(unit, **kwargs)
            detail(f'[f2cpp::Pipeline] {trafo} left {len(unit.buffer)} lines and '
                   f'{len(unit.diagnostics)} diagnostics in {unit.name}')
