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

"""Normalised search result (one PSM and protein) as handed over by search tool adapters."""
from phrpcommon import const
from phrpcommon.cleavage import CleavageState, TerminusState, split_prefix_and_suffix, \
    extract_clean_sequence
from phrpcommon.mass import monoisotopic_mass, atom_count
from phrpcommon.modifications import ResidueTerminusState
from phrpcommon.protein_mapping import ProteinClassification, classify_protein
from phrpcommon.protein_mods import compute_pseudo_location
from phrpcommon.sequences import mod_description


class AminoAcidModInfo:
    """A modification located on a residue of a peptide."""

    def __init__(self, residue, residue_loc_in_peptide, terminus_state, definition):
        """
        Initialise the AminoAcidModInfo.

        :param residue: (str) modified residue; a terminal symbol or '-' if there is none
        :param residue_loc_in_peptide: (int) 1-based position; 0 for isotopic modifications
        :param terminus_state: (ResidueTerminusState) location relative to the termini
        :param definition: (ModificationDefinition) the modification
        """
        self.residue = residue
        self.residue_loc_in_peptide = residue_loc_in_peptide
        self.terminus_state = ResidueTerminusState(terminus_state)
        self.definition = definition

    @property
    def mass_correction_tag(self):
        return self.definition.mass_correction_tag

    @property
    def mod_mass(self):
        return self.definition.mass

    def __repr__(self):
        return "AminoAcidModInfo(%r, %d, %s)" % (self.residue, self.residue_loc_in_peptide,
                                                 self.mass_correction_tag)


class SearchResult:
    """One peptide spectrum match associated with one protein."""

    def __init__(self, result_id=0, clean_sequence='', prefix_residues='', suffix_residues='',
                 protein_name='', **kwargs):
        self.result_id = result_id
        self.scan = kwargs.pop('scan', '')
        self.charge = kwargs.pop('charge', '')
        self.protein_name = protein_name or ''
        # kept as text, they are written to the output as reported by the tool
        self.protein_expectation_value = kwargs.pop('protein_expectation_value', '')
        self.protein_intensity = kwargs.pop('protein_intensity', '')
        self.spec_prob = kwargs.pop('spec_prob', '')

        self.protein_seq_residue_number_start = kwargs.pop('protein_seq_residue_number_start', 0)
        self.protein_seq_residue_number_end = kwargs.pop('protein_seq_residue_number_end', 0)
        self.peptide_loc_in_protein_start = kwargs.pop('peptide_loc_in_protein_start', 0)
        self.peptide_loc_in_protein_end = kwargs.pop('peptide_loc_in_protein_end', 0)

        self.prefix_residues = prefix_residues or ''
        self.suffix_residues = suffix_residues or ''
        self.clean_sequence = clean_sequence or ''
        self.sequence_with_mods = kwargs.pop('sequence_with_mods', None)

        # scores used for ranking; lower is better
        self.expectation_value = kwargs.pop('expectation_value', 0.0)
        self.fdr = kwargs.pop('fdr', None)
        self.q_value = kwargs.pop('q_value', None)

        if kwargs:
            raise TypeError("Unknown search result field(s): %s" % ", ".join(kwargs))

        self.cleavage_state = CleavageState.UNKNOWN
        self.terminus_state = TerminusState.NONE
        self.mod_description = ''
        self.monoisotopic_mass = 0.0
        self.unique_seq_id = 0
        self.modifications = []
        self.error_message = ''

    @property
    def protein_classification(self):
        return classify_protein(self.protein_name)

    @property
    def decoy(self):
        """True if the protein of this result is a reversed or scrambled one."""
        return self.protein_classification == ProteinClassification.DECOY

    @property
    def mod_count(self):
        return len(self.modifications)

    def ensure_protein_location(self):
        """Give the result a pseudo location if its tool reports no protein coordinates."""
        if self.protein_seq_residue_number_end == 0:
            compute_pseudo_location(self)

    def set_sequence_with_mods(self, sequence_with_mods, check_prefix_suffix=True,
                               auto_populate_clean_sequence=True):
        """
        Set the peptide from its notation with modification symbols, e.g. ``K.M*PEPTIDE.-``.

        :param sequence_with_mods: (str) peptide with modification symbols
        :param check_prefix_suffix: (bool) look for prefix and suffix residues
        :param auto_populate_clean_sequence: (bool) also set clean sequence, prefix and suffix
        """
        primary = sequence_with_mods
        if check_prefix_suffix:
            found, split_primary, prefix, suffix = split_prefix_and_suffix(sequence_with_mods)
            if found:
                primary = split_primary
                if auto_populate_clean_sequence:
                    self.prefix_residues = prefix
                    self.suffix_residues = suffix
        if auto_populate_clean_sequence:
            self.clean_sequence = extract_clean_sequence(primary, False)
        self.sequence_with_mods = primary

    def clear_modifications(self):
        self.modifications = []
        self.mod_description = ''

    def residue_terminus_state(self, residue_loc_in_peptide):
        """
        Determine whether a residue sits at a terminus of the peptide or the protein.

        Results without protein coordinates get their pseudo location first.

        :param residue_loc_in_peptide: (int) 1-based position of the residue
        :return: (ResidueTerminusState)
        """
        self.ensure_protein_location()
        if residue_loc_in_peptide == 1:
            if self.peptide_loc_in_protein_start == self.protein_seq_residue_number_start:
                if self.peptide_loc_in_protein_end == self.protein_seq_residue_number_end:
                    return ResidueTerminusState.PROTEIN_N_AND_C_TERMINUS
                return ResidueTerminusState.PROTEIN_N_TERMINUS
            return ResidueTerminusState.PEPTIDE_N_TERMINUS

        peptide_length = self.peptide_loc_in_protein_end - self.peptide_loc_in_protein_start + 1
        if residue_loc_in_peptide == peptide_length:
            if self.peptide_loc_in_protein_end == self.protein_seq_residue_number_end:
                return ResidueTerminusState.PROTEIN_C_TERMINUS
            return ResidueTerminusState.PEPTIDE_C_TERMINUS
        return ResidueTerminusState.NONE

    def add_modification(self, definition, residue, residue_loc_in_peptide,
                         terminus_state=ResidueTerminusState.NONE, update_occurrence_count=True):
        """
        Attach a modification to a residue.

        Isotopic modifications are located at position 0, all others need a position of 1 or
        more.

        :return: (bool) True if the modification was added
        """
        if residue_loc_in_peptide < 1 and definition.type != 'isotopic':
            self.error_message = "Invalid value for residue_loc_in_peptide: %d (%s)" % (
                residue_loc_in_peptide, definition.type)
            return False

        if update_occurrence_count:
            definition.occurrence_count += 1
        self.modifications.append(AminoAcidModInfo(residue, residue_loc_in_peptide,
                                                   terminus_state, definition))
        return True

    def add_modification_by_mass(self, registry, mass, residue, residue_loc_in_peptide,
                                 terminus_state=None, update_occurrence_count=True):
        """
        Attach a modification given by its mass, defining it in the registry if unknown.

        :param registry: (ModificationRegistry) the modifications of the run
        :param mass: (float) modification mass
        :param residue: (str) modified residue
        :param residue_loc_in_peptide: (int) 1-based position
        :param terminus_state: (ResidueTerminusState) derived from the position if None
        :return: (bool) True if the modification was added
        """
        if residue_loc_in_peptide < 1:
            self.error_message = "Invalid value for residue_loc_in_peptide: %d" % \
                residue_loc_in_peptide
            return False
        if terminus_state is None:
            terminus_state = self.residue_terminus_state(residue_loc_in_peptide)
        definition = registry.lookup_by_mass(mass, residue, terminus_state, add_if_unknown=True)
        return self.add_modification(definition, residue, residue_loc_in_peptide,
                                     terminus_state, update_occurrence_count)

    def add_isotopic_modifications(self, registry, update_occurrence_count=True):
        """Attach every isotopic modification of the registry to the whole peptide."""
        added = False
        for definition in registry:
            if definition.type == 'isotopic':
                added = self.add_modification(definition, const.NO_AFFECTED_ATOM_SYMBOL, 0,
                                              ResidueTerminusState.NONE,
                                              update_occurrence_count)
        return added

    def add_static_terminus_mods(self, registry, allow_duplicate_mod_on_terminus=False,
                                 update_occurrence_count=True):
        """
        Attach the static terminal modifications of the registry.

        Peptide terminus modifications apply to every peptide, protein terminus modifications
        only to peptides at that terminus of their protein.
        """
        if not self.clean_sequence:
            return
        at_n_term = self.terminus_state in (TerminusState.PROTEIN_N_TERMINUS,
                                            TerminusState.PROTEIN_N_AND_C_TERMINUS)
        at_c_term = self.terminus_state in (TerminusState.PROTEIN_C_TERMINUS,
                                            TerminusState.PROTEIN_N_AND_C_TERMINUS)
        last = len(self.clean_sequence)

        for definition in registry:
            location = None
            if definition.type == 'terminal_peptide_static':
                if definition.target_residues == const.N_TERMINAL_PEPTIDE_SYMBOL:
                    location = 1
                    state = ResidueTerminusState.PROTEIN_N_TERMINUS if at_n_term \
                        else ResidueTerminusState.PEPTIDE_N_TERMINUS
                elif definition.target_residues == const.C_TERMINAL_PEPTIDE_SYMBOL:
                    location = last
                    state = ResidueTerminusState.PROTEIN_C_TERMINUS if at_c_term \
                        else ResidueTerminusState.PEPTIDE_C_TERMINUS
            elif definition.type == 'protein_terminus_static':
                if definition.target_residues == const.N_TERMINAL_PROTEIN_SYMBOL and at_n_term:
                    location = 1
                    state = ResidueTerminusState.PROTEIN_N_TERMINUS
                elif definition.target_residues == const.C_TERMINAL_PROTEIN_SYMBOL and at_c_term:
                    location = last
                    state = ResidueTerminusState.PROTEIN_C_TERMINUS

            if location is None:
                continue
            if not allow_duplicate_mod_on_terminus and self._has_mod_at(definition, location):
                continue
            self.add_modification(definition, self.clean_sequence[location - 1], location, state,
                                  update_occurrence_count)

    def _has_mod_at(self, definition, location):
        for mod in self.modifications:
            if mod.definition is definition:
                return True
            if mod.residue_loc_in_peptide == location and (
                    mod.mass_correction_tag == definition.mass_correction_tag
                    or round(abs(mod.mod_mass - definition.mass),
                             const.MASS_DIGITS_OF_PRECISION) == 0):
                return True
        return False

    def update_mod_description(self):
        """Rebuild the canonical modification description."""
        self.mod_description = mod_description(self.modifications)
        return self.mod_description

    def compute_monoisotopic_mass(self):
        """
        Compute the mass of the peptide including all modifications.

        Isotopic modifications shift the mass once per atom of their affected element.
        """
        mod_masses = []
        for mod in self.modifications:
            atom = mod.definition.affected_atom
            if mod.definition.type == 'isotopic' and atom != const.NO_AFFECTED_ATOM_SYMBOL:
                mod_masses.append(mod.mod_mass * atom_count(self.clean_sequence, atom))
            else:
                mod_masses.append(mod.mod_mass)
        self.monoisotopic_mass = monoisotopic_mass(self.clean_sequence, mod_masses)
        return self.monoisotopic_mass

    def compute_cleavage_state(self, calculator):
        """
        Update cleavage state and terminus state from the sequence and its flanking residues.

        :param calculator: (CleavageStateCalculator) calculator holding the cleavage rule
        """
        self.cleavage_state = calculator.compute_cleavage_state(
            self.clean_sequence, self.prefix_residues, self.suffix_residues)
        self.terminus_state = calculator.compute_terminus_state(
            self.clean_sequence, self.prefix_residues, self.suffix_residues)

    def sequence_with_prefix_and_suffix(self, with_mods=True):
        """
        Return the peptide with its flanking residues, e.g. ``K.PEPTIDER.S``.

        X!Tandem style terminus symbols are replaced by '-'.
        """
        prefix = const.TERMINUS_SYMBOL_SEQUEST
        pre = self.prefix_residues.strip()
        if pre:
            prefix = pre[-1]
            if prefix == const.TERMINUS_SYMBOL_XTANDEM_NTERMINUS:
                prefix = const.TERMINUS_SYMBOL_SEQUEST

        suffix = const.TERMINUS_SYMBOL_SEQUEST
        post = self.suffix_residues.strip()
        if post:
            suffix = post[0]
            if suffix == const.TERMINUS_SYMBOL_XTANDEM_CTERMINUS:
                suffix = const.TERMINUS_SYMBOL_SEQUEST

        if with_mods and self.sequence_with_mods is not None:
            return "%s.%s.%s" % (prefix, self.sequence_with_mods, suffix)
        if not self.clean_sequence:
            return ''
        return "%s.%s.%s" % (prefix, self.clean_sequence, suffix)
