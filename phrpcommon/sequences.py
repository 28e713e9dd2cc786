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

"""Deduplication of peptide sequences and their modification patterns."""
from phrpcommon import const

MOD_LIST_SEPARATOR = ','


def sort_modifications(modifications):
    """
    Order located modifications by residue position, then by mass correction tag.

    :param modifications: (iterable of AminoAcidModInfo) the modifications of a peptide
    :return: (list of AminoAcidModInfo) the modifications in canonical order
    """
    return sorted(modifications,
                  key=lambda m: (m.residue_loc_in_peptide, m.definition.mass_correction_tag))


def mod_description(modifications):
    """
    Build the canonical description of a modification pattern, e.g. 'Plus1Oxy:4,Phosph:7'.

    Isotopic modifications are listed with position 0.

    :param modifications: (iterable of AminoAcidModInfo) the modifications of a peptide
    :return: (str) the description, empty for unmodified peptides
    """
    return MOD_LIST_SEPARATOR.join(
        "%s:%d" % (m.definition.mass_correction_tag.strip(), m.residue_loc_in_peptide)
        for m in sort_modifications(modifications))


class UniqueSequenceRegistry:
    """
    Assigns IDs to distinct combinations of clean sequence and modification description.

    IDs are handed out in order of first sighting and never reused within a run.
    """

    def __init__(self, initial_seq_id=1):
        self.clear(initial_seq_id)

    def clear(self, initial_seq_id=1):
        """Forget all sequences; the next new sequence gets initial_seq_id."""
        self._ids = {}
        self._next_id = initial_seq_id

    def __len__(self):
        return len(self._ids)

    def __contains__(self, key):
        sequence, description = key
        return (sequence or '', description or '') in self._ids

    def get_or_create(self, clean_sequence, mod_description):
        """
        Look up the ID of a sequence, creating a new one on first sighting.

        :param clean_sequence: (str) peptide sequence without modification symbols
        :param mod_description: (str) canonical modification description
        :return: (tuple) (ID, existing_found)
        """
        key = (clean_sequence or '', mod_description or '')
        seq_id = self._ids.get(key)
        if seq_id is not None:
            return seq_id, True
        seq_id = self._next_id
        self._ids[key] = seq_id
        self._next_id += 1
        return seq_id, False


class SeqToProteinMap:
    """Set of (unique sequence ID, protein) pairs already written to the output."""

    def __init__(self):
        self._keys = set()

    def clear(self):
        self._keys.clear()

    def __len__(self):
        return len(self._keys)

    def check_defined(self, seq_id, protein_name):
        """
        Check whether a pair is known, recording it if not.

        :return: (bool) True if the pair was seen before
        """
        key = "%d%s%s" % (seq_id, const.KEY_SEPARATOR, protein_name or '')
        if key in self._keys:
            return True
        self._keys.add(key)
        return False
