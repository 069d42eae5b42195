# (C) Copyright 2018- ECMWF.
# This software is licensed under the terms of the Apache Licence Version 2.0
# which can be obtained at http://www.apache.org/licenses/LICENSE-2.0.
# In applying this licence, ECMWF does not waive the privileges and immunities
# granted to it by virtue of its status as an intergovernmental organisation
# nor does it submit to any jurisdiction.

"""
Frontend turning fixed-form Fortran 77 text into a classified :any:`LineBuffer`.
"""

from f2cpp.frontend.reader import *  # noqa
from f2cpp.frontend.sanitise import *  # noqa
from f2cpp.frontend.classify import *  # noqa
from f2cpp.frontend.source import *  # noqa
