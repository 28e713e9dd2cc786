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

"""Module for handling the modifications that search results carry."""
from enum import IntEnum
import math
from phrpcommon import const
from phrpcommon.phrp_logging import log

# one letter codes of the modification types used in the ModSummary file
MODIFICATION_TYPE_SYMBOLS = {
    'dynamic': 'D',
    'static': 'S',
    'terminal_peptide_static': 'T',
    'isotopic': 'I',
    'protein_terminus_static': 'P',
    'unknown': '?',
}


class ResidueTerminusState(IntEnum):
    """Location of a modified residue relative to the peptide and protein termini."""
    NONE = 0
    PEPTIDE_N_TERMINUS = 1
    PEPTIDE_C_TERMINUS = 2
    PROTEIN_N_TERMINUS = 3
    PROTEIN_C_TERMINUS = 4
    PROTEIN_N_AND_C_TERMINUS = 5

    @property
    def is_n_terminal(self):
        return self in (ResidueTerminusState.PEPTIDE_N_TERMINUS,
                        ResidueTerminusState.PROTEIN_N_TERMINUS,
                        ResidueTerminusState.PROTEIN_N_AND_C_TERMINUS)

    @property
    def is_c_terminal(self):
        return self in (ResidueTerminusState.PEPTIDE_C_TERMINUS,
                        ResidueTerminusState.PROTEIN_C_TERMINUS)


def generic_mod_mass_name(mass):
    """
    Convert a modification mass into an 8 character name.

    The name starts with the sign followed by the mass rounded to fit, e.g. +15.9949 or
    -17.0265.

    :param mass: (float) modification mass
    :return: (str) the generic name
    """
    if abs(mass) < 1e-7:
        return '+0.00000'
    if mass < -9999999:
        return '-9999999'
    if mass > 9999999:
        return '+9999999'

    log10 = math.log10(abs(mass))
    if abs(log10 - round(log10)) < 1e-7:
        # powers of 10 need one more digit
        int_digits = int(round(log10)) + 1
    else:
        int_digits = int(math.ceil(log10))
    int_digits = max(int_digits, 1)

    decimals = max(6 - int_digits, 0)
    name = '%+.*f' % (decimals, mass)
    if len(name) < 8 and '.' not in name:
        name += '.'
    name = name.ljust(8, '0')
    if len(name) > 8:
        raise ValueError("Generated modification name is longer than 8 characters: %s" % name)
    return name


class ModificationDefinition:
    """A modification known to a ModificationRegistry."""

    def __init__(self, symbol, mass, target_residues='', mod_type='dynamic',
                 mass_correction_tag=const.UNKNOWN_MASS_CORRECTION_TAG,
                 affected_atom=const.NO_AFFECTED_ATOM_SYMBOL, auto_defined=False):
        self.symbol = symbol
        self.mass = mass
        self.target_residues = target_residues or ''
        self.type = mod_type
        self.mass_correction_tag = mass_correction_tag
        self.affected_atom = affected_atom
        self.auto_defined = auto_defined
        self.occurrence_count = 0

    @classmethod
    def from_config(cls, modification):
        """
        Create a ModificationDefinition from a configured Modification.

        :param modification: (config.Modification) the configured modification
        """
        return cls(modification.symbol, modification.mass, modification.target_residues,
                   modification.type, modification.mass_correction_tag,
                   modification.affected_atom)

    @property
    def type_symbol(self):
        """One letter code of the modification type."""
        return MODIFICATION_TYPE_SYMBOLS.get(self.type, '?')

    def target_residues_contain(self, residue):
        if not residue:
            return False
        return residue in self.target_residues

    def equivalent_mass_type_tag_and_atom(self, other):
        """Compare with another definition, ignoring symbol and target residues."""
        return round(self.mass - other.mass, const.MASS_DIGITS_OF_PRECISION) == 0 and \
            self.type == other.type and \
            self.mass_correction_tag == other.mass_correction_tag and \
            self.affected_atom == other.affected_atom

    def __repr__(self):
        return "ModificationDefinition(%r, %r, %r, %r)" % (self.mass_correction_tag, self.mass,
                                                          self.target_residues, self.type)


class ModificationRegistry:
    """
    Modification definitions of one processing run.

    Definitions are looked up by mass correction tag or by mass. Unknown masses are
    auto-defined as dynamic modifications.
    """

    # types considered when matching a mass to residue specific definitions
    _residue_match_types = ('dynamic', 'static', 'unknown')
    # types that may get further target residues added when matched ignoring residues
    _residue_free_types = ('dynamic', 'unknown')

    def __init__(self, definitions=(), mass_digits=const.MASS_DIGITS_OF_PRECISION):
        """
        Initialise the ModificationRegistry.

        :param definitions: (iterable of ModificationDefinition) predefined modifications
        :param mass_digits: (int) decimals compared when looking up a mass
        """
        self.mass_digits = mass_digits
        self.modifications = []
        self._available_symbols = list(const.DEFAULT_MODIFICATION_SYMBOLS)
        for definition in definitions:
            self.add(definition)

    @classmethod
    def from_config(cls, config):
        """Create a registry holding the modifications of a Config."""
        return cls([ModificationDefinition.from_config(m) for m in config.modifications],
                   mass_digits=config.mod_mass_digits)

    def __len__(self):
        return len(self.modifications)

    def __iter__(self):
        return iter(self.modifications)

    def _next_symbol(self):
        if self._available_symbols:
            return self._available_symbols.pop(0)
        return const.LAST_RESORT_MODIFICATION_SYMBOL

    def add(self, definition, use_next_available_symbol=False):
        """
        Add a definition unless an equivalent one is already present.

        An equivalent dynamic or static definition gets the target residues of the new one
        merged into its own.

        :param definition: (ModificationDefinition) the definition to add
        :param use_next_available_symbol: (bool) assign the next free default symbol
        :return: (ModificationDefinition) the added or the matching existing definition
        """
        for existing in self.modifications:
            if not existing.equivalent_mass_type_tag_and_atom(definition):
                continue
            if existing.type in ('dynamic', 'static'):
                for residue in definition.target_residues:
                    if not existing.target_residues_contain(residue):
                        existing.target_residues += residue
            return existing

        if use_next_available_symbol:
            definition.symbol = self._next_symbol()
        elif definition.symbol in self._available_symbols:
            self._available_symbols.remove(definition.symbol)
        self.modifications.append(definition)
        return definition

    def lookup_by_tag(self, mass_correction_tag):
        """Return the first definition with the given mass correction tag, None if unknown."""
        for definition in self.modifications:
            if definition.mass_correction_tag == mass_correction_tag:
                return definition
        return None

    def _mass_matches(self, definition, mass):
        return round(abs(definition.mass - mass), self.mass_digits) == 0

    @staticmethod
    def _closest(candidates, mass):
        return min(candidates, key=lambda d: abs(d.mass - mass))

    def lookup_by_mass(self, mass, residue=None,
                       terminus_state=ResidueTerminusState.NONE, add_if_unknown=True):
        """
        Find the definition best matching a modification mass.

        Candidates are searched in this order, the one closest in mass wins:
            - definitions whose target residues contain the residue or the terminal symbol
            - definitions without target residues
            - dynamic and unknown definitions, ignoring their target residues (the residue is
              added to the definition)
        If nothing matches, a dynamic modification named after its mass is defined.

        :param mass: (float) modification mass
        :param residue: (str) modified residue, None for terminal modifications
        :param terminus_state: (ResidueTerminusState) location of the residue
        :param add_if_unknown: (bool) register an auto-defined modification
        :return: (ModificationDefinition)
        """
        terminus_state = ResidueTerminusState(terminus_state)

        if residue or terminus_state != ResidueTerminusState.NONE:
            terminal_symbol = None
            if terminus_state.is_n_terminal:
                terminal_symbol = const.N_TERMINAL_PEPTIDE_SYMBOL
            elif terminus_state.is_c_terminal:
                terminal_symbol = const.C_TERMINAL_PEPTIDE_SYMBOL

            candidates = [
                d for d in self.modifications
                if d.type in self._residue_match_types and d.target_residues
                and self._mass_matches(d, mass)
                and (d.target_residues_contain(residue)
                     or d.target_residues_contain(terminal_symbol))
            ]
            if candidates:
                return self._closest(candidates, mass)

        candidates = [d for d in self.modifications
                      if d.type in self._residue_match_types and not d.target_residues.strip()
                      and self._mass_matches(d, mass)]
        if candidates:
            return self._closest(candidates, mass)

        candidates = [d for d in self.modifications
                      if d.type in self._residue_free_types and self._mass_matches(d, mass)]
        if candidates:
            closest = self._closest(candidates, mass)
            if residue and not closest.target_residues_contain(residue):
                closest.target_residues += residue
            return closest

        return self._define_unknown(mass, residue, terminus_state, add_if_unknown)

    def _define_unknown(self, mass, residue, terminus_state, add_if_unknown):
        target_residues = residue or ''
        if terminus_state.is_n_terminal:
            target_residues = const.N_TERMINAL_PEPTIDE_SYMBOL
        elif terminus_state.is_c_terminal:
            target_residues = const.C_TERMINAL_PEPTIDE_SYMBOL

        definition = ModificationDefinition(const.LAST_RESORT_MODIFICATION_SYMBOL, mass,
                                            target_residues, 'dynamic',
                                            generic_mod_mass_name(mass), auto_defined=True)
        if not add_if_unknown:
            return definition

        definition = self.add(definition, use_next_available_symbol=True)
        log("Auto-defined modification %s (%s) for mass %s" % (
            definition.mass_correction_tag, definition.symbol, mass))
        return definition

    def reset_counts(self):
        """Set the occurrence count of all definitions to zero."""
        for definition in self.modifications:
            definition.occurrence_count = 0

    def summary_rows(self):
        """
        Yield the definitions to be listed in a modification summary.

        Auto-defined modifications that never occurred are left out.
        """
        for definition in self.modifications:
            if definition.occurrence_count <= 0 and definition.auto_defined:
                continue
            yield definition
