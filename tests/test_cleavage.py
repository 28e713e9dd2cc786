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
from phrpcommon.cleavage import CleavageState, TerminusState, CleavageStateCalculator, \
    split_prefix_and_suffix, extract_clean_sequence
from phrpcommon.config import CleavageRule


@pytest.mark.parametrize("sequence, expected", [
    ("R.PEPTIDEK.L", (True, "PEPTIDEK", "R", "L")),
    ("-.PEPTIDEK.L", (True, "PEPTIDEK", "-", "L")),
    ("R.PEPTIDEK.-", (True, "PEPTIDEK", "R", "-")),
    ("RPEP.TIDESEQK.LAB", (True, "TIDESEQK", "RPEP", "LAB")),
    (".PEPTIDE", (True, "PEPTIDE", "", "")),
    ("PEPTIDE.", (True, "PEPTIDE", "", "")),
    ("R.PEPTIDE", (True, "PEPTIDE", "R", "")),
    ("PEPTIDE.L", (True, "PEPTIDE", "", "L")),
    ("..PEPTIDE..", (True, "PEPTIDE", "", "")),
    ("PEPTIDE", (False, "PEPTIDE", "", "")),
    ("", (False, "", "", "")),
])
def test_split_prefix_and_suffix(sequence, expected):
    assert split_prefix_and_suffix(sequence) == expected


def test_extract_clean_sequence():
    assert extract_clean_sequence("K.M*PEPT#IDE.-") == "MPEPTIDE"
    assert extract_clean_sequence("M*PEPT#IDE") == "MPEPTIDE"
    assert extract_clean_sequence("K.M*PEPTIDE.-", check_prefix_suffix=False) == "KMPEPTIDE"
    assert extract_clean_sequence(None) == ""


def test_terminus_state():
    calculator = CleavageStateCalculator()
    assert calculator.compute_terminus_state("PEPTIDEK", "R", "L") == TerminusState.NONE
    assert calculator.compute_terminus_state("PEPTIDEK", "-", "L") == \
        TerminusState.PROTEIN_N_TERMINUS
    assert calculator.compute_terminus_state("PEPTIDEK", "R", "]") == \
        TerminusState.PROTEIN_C_TERMINUS
    assert calculator.compute_terminus_state("PEPTIDEK", "[", "-") == \
        TerminusState.PROTEIN_N_AND_C_TERMINUS
    # empty flanking residues count as protein terminus
    assert calculator.compute_terminus_state("PEPTIDEK", "", "") == \
        TerminusState.PROTEIN_N_AND_C_TERMINUS
    assert calculator.compute_terminus_state("", "R", "L") == TerminusState.NONE
    assert calculator.compute_terminus_state_from_sequence("-.PEPTIDEK.L") == \
        TerminusState.PROTEIN_N_TERMINUS


def test_trypsin_cleavage_state():
    calculator = CleavageStateCalculator()
    assert calculator.compute_cleavage_state("AEPTIDEK", "R", "L") == CleavageState.FULL
    assert calculator.compute_cleavage_state("AEPTIDEK", "A", "L") == CleavageState.PARTIAL
    assert calculator.compute_cleavage_state("AEPTIDEA", "R", "L") == CleavageState.PARTIAL
    assert calculator.compute_cleavage_state("AEPTIDEA", "A", "L") == \
        CleavageState.NON_SPECIFIC
    # proline rule
    assert calculator.compute_cleavage_state("AEPTIDEK", "R", "P") == CleavageState.PARTIAL
    # at a protein terminus only one end has to match
    assert calculator.compute_cleavage_state("AEPTIDEK", "-", "L") == CleavageState.FULL
    assert calculator.compute_cleavage_state("AEPTIDEA", "-", "L") == \
        CleavageState.NON_SPECIFIC
    assert calculator.compute_cleavage_state("AEPTIDEA", "K", "-") == CleavageState.FULL
    assert calculator.compute_cleavage_state("AEPTIDEA", "-", "-") == CleavageState.FULL
    assert calculator.compute_cleavage_state("", "K", "L") == CleavageState.NON_SPECIFIC
    # modification symbols are skipped
    assert calculator.compute_cleavage_state_from_sequence("R.AEPTIDEK*.L") == \
        CleavageState.FULL


def test_other_cleavage_rules():
    glu_c = CleavageStateCalculator(CleavageRule.glu_c)
    assert glu_c.compute_cleavage_state("PEPTIDE", "E", "P") == CleavageState.FULL
    assert glu_c.compute_cleavage_state("PEPTIDEK", "R", "L") == CleavageState.NON_SPECIFIC

    no_proline_rule = CleavageStateCalculator(CleavageRule.trypsin_without_proline_rule)
    assert no_proline_rule.test_cleavage_rule("K", "P")
    assert not CleavageStateCalculator().test_cleavage_rule("K", "P")

    asp_n = CleavageStateCalculator(CleavageRule.endo_asp_n)
    assert asp_n.compute_cleavage_state("DPEPTIDE", "A", "D") == CleavageState.FULL


def test_missed_cleavages():
    calculator = CleavageStateCalculator()
    assert calculator.compute_missed_cleavages("R.PEPTIDEK.L") == 0
    assert calculator.compute_missed_cleavages("R.PEPKTIDERK.L") == 2
    # KP is not cleaved
    assert calculator.compute_missed_cleavages("R.PEKPTIDEK.L") == 0
    assert calculator.compute_missed_cleavages("R.PEK*TIDEK.L") == 1
    assert calculator.compute_missed_cleavages("PEPKTIDEK") == 0
