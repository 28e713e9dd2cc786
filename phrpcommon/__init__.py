# Copyright (C) 2025  Technische Universitaet Berlin
#
# This library is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 3 of the License, or (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301
# USA


"""
phrpcommon: Common library for peptide hit results processing.

This package contains the normalization engine shared by the search tool specific result
readers:
- Configuration and errors (config, const, errors)
- Sequences and modifications (sequences, modifications, search_result, cleavage, mass)
- Protein mapping (protein_mapping, protein_mods)
- Statistics (fdr)
- Dataset names (dataset_names)
- I/O utilities (output_format, utils, string_utils, phrp_logging)
- Processing (context, adapters, processor)
"""

__version__ = "1.0.0"

# Core modules
from . import config
from . import const
from . import errors
from . import string_utils
from . import phrp_logging
from . import mass
from . import cleavage
from . import modifications
from . import sequences
from . import protein_mapping
from . import search_result
from . import protein_mods
from . import fdr
from . import dataset_names
from . import utils
from . import output_format
from . import context
from . import adapters
from . import processor

__all__ = [
    "config",
    "const",
    "errors",
    "string_utils",
    "phrp_logging",
    "mass",
    "cleavage",
    "modifications",
    "sequences",
    "protein_mapping",
    "search_result",
    "protein_mods",
    "fdr",
    "dataset_names",
    "utils",
    "output_format",
    "context",
    "adapters",
    "processor",
]
