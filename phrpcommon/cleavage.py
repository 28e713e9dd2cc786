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
Cleavage and terminus state of peptides.

Peptides are given either as clean sequence plus prefix and suffix residues or in the
``K.PEPTIDER.G`` notation, where ``-`` (or ``[`` / ``]``) marks a protein terminus.
"""
from enum import IntEnum
from phrpcommon import const
from phrpcommon.config import CleavageRule
from phrpcommon.string_utils import is_letter_a_to_z


class CleavageState(IntEnum):
    UNKNOWN = -1
    NON_SPECIFIC = 0
    PARTIAL = 1
    FULL = 2


class TerminusState(IntEnum):
    NONE = 0
    PROTEIN_N_TERMINUS = 1
    PROTEIN_C_TERMINUS = 2
    PROTEIN_N_AND_C_TERMINUS = 3


def split_prefix_and_suffix(sequence):
    """
    Split a peptide into prefix, primary sequence and suffix.

    A sequence starting or ending with ``..`` is treated as starting or ending with a single
    period. More than one character before the first or after the last period is returned
    as prefix or suffix as is.

    :param sequence: (str) peptide, e.g. ``R.PEPTIDEK.L``
    :return: (tuple) (found, primary_sequence, prefix, suffix) where found is False if no
        prefix and suffix could be identified
    """
    if not sequence:
        return False, '', '', ''

    if sequence.startswith('..') and len(sequence) > 2:
        sequence = '.' + sequence[2:]
    if sequence.endswith('..') and len(sequence) > 2:
        sequence = sequence[:-2] + '.'

    period_loc1 = sequence.find('.')
    if period_loc1 < 0:
        return False, sequence, '', ''

    period_loc2 = sequence.rfind('.')

    if period_loc2 > period_loc1 + 1:
        # R.PEPTIDEK.L or RPEP.TIDESEQK.L
        prefix = sequence[:period_loc1]
        return True, sequence[period_loc1 + 1:period_loc2], prefix, sequence[period_loc2 + 1:]

    if period_loc2 == period_loc1 + 1:
        # two periods in a row
        if period_loc1 <= 1:
            return True, '', sequence[:period_loc1], sequence[period_loc2 + 1:]
        return False, sequence, '', ''

    # only one period
    if period_loc1 == 0:
        return True, sequence[1:], '', ''
    if period_loc1 == len(sequence) - 1:
        return True, sequence[:period_loc1], '', ''
    if period_loc1 == 1 and len(sequence) > 2:
        return True, sequence[period_loc1 + 1:], sequence[:period_loc1], ''
    if period_loc1 == len(sequence) - 2:
        return True, sequence[:period_loc1], '', sequence[period_loc1 + 1:]

    return False, sequence, '', ''


def extract_clean_sequence(sequence_with_mods, check_prefix_suffix=True):
    """
    Remove modification symbols (and optionally prefix and suffix residues) from a peptide.

    :param sequence_with_mods: (str) peptide, e.g. ``K.M*PEPT#IDE.-``
    :param check_prefix_suffix: (bool) strip prefix and suffix residues if present
    :return: (str) the letters of the peptide
    """
    if sequence_with_mods is None:
        return ''
    if check_prefix_suffix:
        found, primary, _, _ = split_prefix_and_suffix(sequence_with_mods)
        if found:
            return const.NOT_LETTER_PATTERN.sub('', primary)
    return const.NOT_LETTER_PATTERN.sub('', sequence_with_mods)


def _is_terminus(character):
    return character in const.TERMINUS_SYMBOLS


def _letter_nearest_end(text):
    if not text:
        return const.TERMINUS_SYMBOL_SEQUEST
    index = len(text) - 1
    while index > 0 and not (is_letter_a_to_z(text[index]) or _is_terminus(text[index])):
        index -= 1
    return text[index]


def _letter_nearest_start(text):
    if not text:
        return const.TERMINUS_SYMBOL_SEQUEST
    index = 0
    while index < len(text) - 1 and not (is_letter_a_to_z(text[index])
                                         or _is_terminus(text[index])):
        index += 1
    return text[index]


class CleavageStateCalculator:
    """Evaluate peptides against a cleavage rule."""

    def __init__(self, rule=None):
        """
        Initialise the CleavageStateCalculator.

        :param rule: (CleavageRule) cleavage specificity, trypsin if None
        """
        if rule is None:
            rule = CleavageRule.trypsin
        self.rule = rule
        self._standard_trypsin = rule.is_standard_trypsin

    def test_cleavage_rule(self, left, right):
        """Return True if the bond between left and right residue is cleavable."""
        if self._standard_trypsin:
            return left in ('K', 'R') and right != 'P'
        return self.rule.left_regex.search(left) is not None and \
            self.rule.right_regex.search(right) is not None

    @staticmethod
    def terminus_state_from_residues(prefix, suffix):
        """Determine the terminus state from the residues flanking a peptide."""
        if _is_terminus(prefix):
            if _is_terminus(suffix):
                return TerminusState.PROTEIN_N_AND_C_TERMINUS
            return TerminusState.PROTEIN_N_TERMINUS
        if _is_terminus(suffix):
            return TerminusState.PROTEIN_C_TERMINUS
        return TerminusState.NONE

    def compute_terminus_state(self, clean_sequence, prefix_residues, suffix_residues):
        """
        Determine the terminus state of a peptide.

        :param clean_sequence: (str) peptide without prefix and suffix
        :param prefix_residues: (str) residues preceding the peptide
        :param suffix_residues: (str) residues following the peptide
        :return: (TerminusState)
        """
        if not clean_sequence:
            return TerminusState.NONE
        return self.terminus_state_from_residues(_letter_nearest_end(prefix_residues),
                                                 _letter_nearest_start(suffix_residues))

    def compute_cleavage_state(self, clean_sequence, prefix_residues, suffix_residues):
        """
        Determine the cleavage state of a peptide.

        Peptides at a protein terminus can only be fully specific or non-specific.

        :param clean_sequence: (str) peptide without prefix and suffix
        :param prefix_residues: (str) residues preceding the peptide
        :param suffix_residues: (str) residues following the peptide
        :return: (CleavageState)
        """
        if not clean_sequence:
            return CleavageState.NON_SPECIFIC

        prefix = _letter_nearest_end(prefix_residues)
        suffix = _letter_nearest_start(suffix_residues)
        sequence_start = _letter_nearest_start(clean_sequence)
        sequence_end = _letter_nearest_end(clean_sequence)

        terminus_state = self.terminus_state_from_residues(prefix, suffix)

        if terminus_state == TerminusState.PROTEIN_N_AND_C_TERMINUS:
            return CleavageState.FULL
        if terminus_state == TerminusState.PROTEIN_N_TERMINUS:
            if self.test_cleavage_rule(sequence_end, suffix):
                return CleavageState.FULL
            return CleavageState.NON_SPECIFIC
        if terminus_state == TerminusState.PROTEIN_C_TERMINUS:
            if self.test_cleavage_rule(prefix, sequence_start):
                return CleavageState.FULL
            return CleavageState.NON_SPECIFIC

        match_start = self.test_cleavage_rule(prefix, sequence_start)
        match_end = self.test_cleavage_rule(sequence_end, suffix)
        if match_start and match_end:
            return CleavageState.FULL
        if match_start or match_end:
            return CleavageState.PARTIAL
        return CleavageState.NON_SPECIFIC

    def compute_cleavage_state_from_sequence(self, sequence_with_prefix_and_suffix):
        """Determine the cleavage state of a peptide like ``K.PEPTIDER.G``."""
        found, primary, prefix, suffix = split_prefix_and_suffix(sequence_with_prefix_and_suffix)
        if not found:
            return CleavageState.NON_SPECIFIC
        return self.compute_cleavage_state(primary, prefix, suffix)

    def compute_terminus_state_from_sequence(self, sequence_with_prefix_and_suffix):
        """Determine the terminus state of a peptide like ``-.PEPTIDER.G``."""
        found, primary, prefix, suffix = split_prefix_and_suffix(sequence_with_prefix_and_suffix)
        if not found:
            return TerminusState.NONE
        return self.compute_terminus_state(primary, prefix, suffix)

    def compute_missed_cleavages(self, sequence_with_prefix_and_suffix):
        """
        Count the cleavable bonds inside a peptide.

        :param sequence_with_prefix_and_suffix: (str) peptide like ``K.PEPKTIDER.G``
        :return: (int) number of missed cleavages; 0 if the peptide has no prefix and suffix
        """
        found, primary, _, _ = split_prefix_and_suffix(sequence_with_prefix_and_suffix)
        if not found or not primary.strip():
            return 0

        missed = 0
        previous = None
        for residue in primary:
            if not is_letter_a_to_z(residue):
                continue
            if previous is not None and self.test_cleavage_rule(previous, residue):
                missed += 1
            previous = residue
        return missed
