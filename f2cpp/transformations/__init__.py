# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
The translation stages of the symbol-resolution and rewriting pipeline.
"""

from f2cpp.transformations.transformation import *  # noqa
from f2cpp.transformations.pipeline import *  # noqa
from f2cpp.transformations.utilities import *  # noqa
from f2cpp.transformations.inference import *  # noqa
from f2cpp.transformations.subscripts import *  # noqa
from f2cpp.transformations.control_flow import *  # noqa
from f2cpp.transformations.calls import *  # noqa
