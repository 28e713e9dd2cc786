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


from phrpcommon.modifications import ModificationDefinition
from phrpcommon.search_result import AminoAcidModInfo
from phrpcommon.sequences import UniqueSequenceRegistry, SeqToProteinMap, mod_description, \
    sort_modifications


def make_mod(tag, location, residue='M'):
    return AminoAcidModInfo(residue, location, 0, ModificationDefinition('*', 1.0, residue,
                                                                        'dynamic', tag))


def test_get_or_create_assigns_dense_ids():
    registry = UniqueSequenceRegistry()
    assert registry.get_or_create('PEPTIDE', '') == (1, False)
    assert registry.get_or_create('PEPTIDE', 'Plus1Oxy:1') == (2, False)
    assert registry.get_or_create('PEPTIDE', '') == (1, True)
    assert registry.get_or_create('PEPTIDEK', '') == (3, False)
    assert len(registry) == 3
    assert ('PEPTIDE', 'Plus1Oxy:1') in registry


def test_none_is_treated_as_empty_text():
    registry = UniqueSequenceRegistry()
    assert registry.get_or_create('PEPTIDE', None) == (1, False)
    assert registry.get_or_create('PEPTIDE', '') == (1, True)


def test_clear_restarts_ids():
    registry = UniqueSequenceRegistry(initial_seq_id=100)
    assert registry.get_or_create('PEPTIDE', '')[0] == 100
    registry.clear()
    assert len(registry) == 0
    assert registry.get_or_create('KING', '') == (1, False)
    registry.clear(initial_seq_id=50)
    assert registry.get_or_create('KING', '') == (50, False)


def test_seq_to_protein_map():
    seq_to_protein = SeqToProteinMap()
    assert not seq_to_protein.check_defined(1, 'ProtA')
    assert seq_to_protein.check_defined(1, 'ProtA')
    assert not seq_to_protein.check_defined(1, 'ProtB')
    assert not seq_to_protein.check_defined(2, 'ProtA')
    assert not seq_to_protein.check_defined(3, None)
    assert seq_to_protein.check_defined(3, '')
    assert len(seq_to_protein) == 4
    seq_to_protein.clear()
    assert not seq_to_protein.check_defined(1, 'ProtA')


def test_mod_description_order():
    mods = [make_mod('Phosph', 7, 'S'), make_mod('Plus1Oxy', 4), make_mod('Acetyl', 7, 'S'),
            make_mod('IodoAcet ', 2, 'C')]
    assert [(m.residue_loc_in_peptide, m.mass_correction_tag)
            for m in sort_modifications(mods)] == \
        [(2, 'IodoAcet '), (4, 'Plus1Oxy'), (7, 'Acetyl'), (7, 'Phosph')]
    # tags are written without surrounding whitespace
    assert mod_description(mods) == 'IodoAcet:2,Plus1Oxy:4,Acetyl:7,Phosph:7'
    assert mod_description([]) == ''


def test_mod_description_ordinal_tag_order():
    # upper case sorts before lower case
    mods = [make_mod('acetyl', 1), make_mod('Methyl', 1)]
    assert mod_description(mods) == 'Methyl:1,acetyl:1'


def test_isotopic_mods_are_listed_first():
    mods = [make_mod('Plus1Oxy', 1), make_mod('15N', 0, '-')]
    assert mod_description(mods) == '15N:0,Plus1Oxy:1'
