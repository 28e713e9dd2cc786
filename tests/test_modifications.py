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


import pytest
from phrpcommon.modifications import ModificationRegistry, ModificationDefinition, \
    ResidueTerminusState, generic_mod_mass_name


@pytest.mark.parametrize("mass, name", [
    (15.994915, "+15.9949"),
    (79.966331, "+79.9663"),
    (-17.026549, "-17.0265"),
    (0.984016, "+0.98402"),
    (123.45, "+123.450"),
    (100, "+100.000"),
    (0, "+0.00000"),
])
def test_generic_mod_mass_name(mass, name):
    assert generic_mod_mass_name(mass) == name


def test_residue_terminus_state():
    assert ResidueTerminusState.PEPTIDE_N_TERMINUS.is_n_terminal
    assert ResidueTerminusState.PROTEIN_N_AND_C_TERMINUS.is_n_terminal
    assert ResidueTerminusState.PROTEIN_C_TERMINUS.is_c_terminal
    assert not ResidueTerminusState.NONE.is_n_terminal
    assert not ResidueTerminusState.NONE.is_c_terminal


def test_registry_from_config(phrp_config):
    registry = ModificationRegistry.from_config(phrp_config)
    assert len(registry) == 3
    assert registry.lookup_by_tag('Plus1Oxy').symbol == '*'
    assert registry.lookup_by_tag('IodoAcet').type == 'static'
    assert registry.lookup_by_tag('Unknown') is None


def test_add_merges_equivalent_definitions(registry):
    merged = registry.add(ModificationDefinition('*', 15.9949, 'W', 'dynamic', 'Plus1Oxy'))
    assert merged is registry.lookup_by_tag('Plus1Oxy')
    assert merged.target_residues == 'MW'
    assert len(registry) == 3


def test_add_assigns_next_symbol(registry):
    # '*' and '#' are taken by the predefined modifications
    definition = registry.add(ModificationDefinition('?', 42.010565, 'K', 'dynamic', 'Acetyl'),
                              use_next_available_symbol=True)
    assert definition.symbol == '@'


def test_lookup_by_mass_residue_specific(registry):
    definition = registry.lookup_by_mass(79.9663, 'S')
    assert definition.mass_correction_tag == 'Phosph'
    assert registry.lookup_by_mass(57.0215, 'C').mass_correction_tag == 'IodoAcet'


def test_lookup_by_mass_adds_residue_to_dynamic_mod(registry):
    definition = registry.lookup_by_mass(15.9949, 'W')
    assert definition.mass_correction_tag == 'Plus1Oxy'
    assert definition.target_residues == 'MW'
    assert len(registry) == 3


def test_lookup_by_mass_prefers_unrestricted_definition(registry):
    registry.add(ModificationDefinition('@', 15.9949, '', 'dynamic', 'OxyAny'))
    assert registry.lookup_by_mass(15.9949, 'W').mass_correction_tag == 'OxyAny'
    assert registry.lookup_by_mass(15.9949, 'M').mass_correction_tag == 'Plus1Oxy'


def test_lookup_by_mass_terminal_symbols():
    registry = ModificationRegistry([
        ModificationDefinition('!', 42.010565, '<', 'dynamic', 'Acetyl'),
    ])
    definition = registry.lookup_by_mass(42.0106, 'A', ResidueTerminusState.PEPTIDE_N_TERMINUS)
    assert definition.mass_correction_tag == 'Acetyl'
    assert definition.target_residues == '<'


def test_lookup_by_mass_defines_unknown_modification(registry):
    definition = registry.lookup_by_mass(-18.010565, 'E')
    assert definition.mass_correction_tag == '-18.0106'
    assert definition.symbol == '@'
    assert definition.auto_defined
    assert definition.type == 'dynamic'
    assert definition.target_residues == 'E'
    assert len(registry) == 4
    # the second lookup finds the definition
    assert registry.lookup_by_mass(-18.0106, 'E') is definition

    terminal = registry.lookup_by_mass(-0.984016, 'K', ResidueTerminusState.PEPTIDE_C_TERMINUS)
    assert terminal.target_residues == '>'

    transient = registry.lookup_by_mass(500.0, 'K', add_if_unknown=False)
    assert transient.mass_correction_tag == '+500.000'
    assert len(registry) == 5


def test_mass_digits(registry):
    registry.mass_digits = 1
    assert registry.lookup_by_mass(15.96, 'M').mass_correction_tag == 'Plus1Oxy'
    registry.mass_digits = 3
    assert registry.lookup_by_mass(15.96, 'M', add_if_unknown=False).auto_defined


def test_summary_rows_skip_unused_auto_defined(registry):
    unused = registry.lookup_by_mass(1.0, 'K')
    used = registry.lookup_by_mass(2.0, 'K')
    used.occurrence_count = 1

    rows = list(registry.summary_rows())
    assert unused not in rows
    assert used in rows
    # predefined modifications are always listed
    assert registry.lookup_by_tag('Phosph') in rows

    registry.reset_counts()
    assert all(d.occurrence_count == 0 for d in registry)
    assert used not in list(registry.summary_rows())
