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

"""Monoisotopic masses of peptide sequences."""
from pyteomics.cmass import CComposition, calculate_mass, std_aa_comp
import numpy as np

# Generate lookup table mapping ASCII values to residue masses.
aa_masses = np.empty(256)
aa_masses[:] = np.nan  # make invalid residues result in an invalid mass.

# calculate masses from compositions (std_aa_mass dict contains wrong entry for 'O'
for AA, comp in std_aa_comp.items():
    if AA not in ['-OH', 'H-'] and len(AA) == 1:
        aa_masses[ord(AA)] = calculate_mass(composition=comp)

# ambiguous residues: B as Asn, Z as Gln, X as Leu/Ile; J is not counted
ambiguous_residues = {'B': 'N', 'Z': 'Q', 'X': 'L'}
for AA, substitute in ambiguous_residues.items():
    aa_masses[ord(AA)] = calculate_mass(composition=std_aa_comp[substitute])
aa_masses[ord('J')] = 0.0

# lower case letters are treated like their upper case counterpart
for code in range(ord('a'), ord('z') + 1):
    aa_masses[code] = aa_masses[code - 32]

_ambiguous_translation = str.maketrans(dict(ambiguous_residues, J=None))

# mass of the unmodified termini (H- and -OH)
unmodified_termini_mass = calculate_mass(formula='H') + calculate_mass(formula='OH')


def sequence_mass(clean_sequence):
    """
    Calculate the monoisotopic mass of an unmodified peptide.

    :param clean_sequence: (str) peptide sequence in one letter code (letters only)
    :return: (float) mass including the water of the termini; nan for unknown residues
    """
    if not clean_sequence:
        return 0.0
    codes = np.frombuffer(clean_sequence.encode('ascii', errors='replace'), dtype=np.uint8)
    return float(aa_masses[codes].sum() + unmodified_termini_mass)


def monoisotopic_mass(clean_sequence, mod_masses=()):
    """
    Calculate the monoisotopic mass of a peptide including its modifications.

    :param clean_sequence: (str) peptide sequence in one letter code
    :param mod_masses: (iterable of float) mass shifts of all modifications on the peptide
    :return: (float) monoisotopic mass
    """
    return sequence_mass(clean_sequence) + float(np.sum(np.asarray(list(mod_masses),
                                                                   dtype=np.float64)))


def atom_count(clean_sequence, atom):
    """
    Count the atoms of one element in an unmodified peptide.

    :param clean_sequence: (str) peptide sequence in one letter code
    :param atom: (str) element symbol, e.g. 'N'
    :return: (int) number of atoms including the termini
    """
    if not clean_sequence:
        return 0
    sequence = clean_sequence.upper().translate(_ambiguous_translation)
    if not sequence:
        return 0
    composition = CComposition(sequence=sequence)
    return composition.get(atom, 0)
