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
The conftest.py file serves as a means of providing fixtures for an entire directory.
Fixtures defined in a conftest.py can be used by any test in that package without needing to
import them (pytest will automatically discover them).
"""

import pytest
from phrpcommon.config import Config, CleavageRule, Modification
from phrpcommon.context import ProcessingContext
from phrpcommon.modifications import ModificationRegistry, ModificationDefinition


@pytest.fixture()
def phrp_config():
    # Basic config with the usual trypsin search modifications
    return Config(
        cleavage_rule=CleavageRule.trypsin,
        modifications=[
            Modification(mass_correction_tag='Plus1Oxy', symbol='*', mass=15.994915,
                         target_residues='M'),
            Modification(mass_correction_tag='IodoAcet', mass=57.021464, target_residues='C',
                         type='static'),
            Modification(mass_correction_tag='Phosph', symbol='#', mass=79.966331,
                         target_residues='STY'),
        ],
    )


@pytest.fixture()
def context(phrp_config):
    return ProcessingContext(phrp_config)


@pytest.fixture()
def registry():
    return ModificationRegistry([
        ModificationDefinition('*', 15.994915, 'M', 'dynamic', 'Plus1Oxy'),
        ModificationDefinition('-', 57.021464, 'C', 'static', 'IodoAcet'),
        ModificationDefinition('#', 79.966331, 'STY', 'dynamic', 'Phosph'),
    ])


@pytest.fixture()
def mapping_file(tmpdir):
    """Write a peptide to protein mapping file and return its path."""
    def write(rows, header=True):
        path = str(tmpdir.join("Dataset_PepToProtMapMTS.txt"))
        with open(path, 'w') as f:
            if header:
                f.write("Peptide\tProtein\tResidue_Start\tResidue_End\n")
            for row in rows:
                f.write("\t".join(str(x) for x in row) + "\n")
        return path
    return write
