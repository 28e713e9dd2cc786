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

"""Modified residues in protein coordinates (the _ProteinMods.txt file)."""
from phrpcommon import const
from phrpcommon.output_format import PROTEIN_MODS_COLUMNS
from phrpcommon.phrp_logging import log, log_warning, show_periodic_warning
from phrpcommon.protein_mapping import ProteinClassification, classify_protein, \
    find_first_match, load_peptide_to_protein_map, sort_mappings
from phrpcommon.string_utils import collapse_list, is_letter_a_to_z


def resolve_residue(mod_residue, clean_sequence, residue_loc_in_peptide):
    """
    Determine the residue letter of a modification.

    Modifications on terminal symbols take the letter at their position in the peptide; the
    position is clamped to the peptide.

    :param mod_residue: (str) residue recorded with the modification
    :param clean_sequence: (str) peptide sequence
    :param residue_loc_in_peptide: (int) 1-based position
    :return: (str) one letter
    """
    if is_letter_a_to_z(mod_residue):
        return mod_residue
    if not clean_sequence:
        return ''
    if residue_loc_in_peptide < 1:
        return clean_sequence[0]
    if residue_loc_in_peptide > len(clean_sequence):
        return clean_sequence[-1]
    return clean_sequence[residue_loc_in_peptide - 1]


def compute_pseudo_location(result):
    """
    Assign made up protein coordinates to a result whose tool reports none.

    The protein is assumed to span residues 1 to 10000; the peptide is placed at the
    N-terminus, the C-terminus or right after the first residue, depending on its flanking
    residues. The protein end is extended where the peptide would not fit.

    :param result: (SearchResult) result to update in place
    """
    length = len(result.clean_sequence)
    result.protein_seq_residue_number_start = 1
    result.protein_seq_residue_number_end = const.PSEUDO_PROTEIN_END

    prefix = result.prefix_residues.strip()
    suffix = result.suffix_residues.strip()

    if prefix.endswith(const.TERMINUS_SYMBOL_SEQUEST):
        result.peptide_loc_in_protein_start = result.protein_seq_residue_number_start
        result.peptide_loc_in_protein_end = result.peptide_loc_in_protein_start + length - 1
        if suffix.startswith(const.TERMINUS_SYMBOL_SEQUEST):
            # peptide covers the whole protein
            result.protein_seq_residue_number_end = result.peptide_loc_in_protein_end
        elif result.peptide_loc_in_protein_end > result.protein_seq_residue_number_end:
            result.protein_seq_residue_number_end = result.peptide_loc_in_protein_end + 1

    elif suffix.startswith(const.TERMINUS_SYMBOL_SEQUEST):
        result.peptide_loc_in_protein_end = result.protein_seq_residue_number_end
        result.peptide_loc_in_protein_start = result.peptide_loc_in_protein_end - length + 1
        if result.peptide_loc_in_protein_start < result.protein_seq_residue_number_start:
            result.protein_seq_residue_number_end = \
                result.protein_seq_residue_number_start + 1 + length
            result.peptide_loc_in_protein_end = result.protein_seq_residue_number_end
            result.peptide_loc_in_protein_start = result.peptide_loc_in_protein_end - length + 1

    else:
        result.peptide_loc_in_protein_start = result.protein_seq_residue_number_start + 1
        result.peptide_loc_in_protein_end = result.peptide_loc_in_protein_start + length - 1
        if result.peptide_loc_in_protein_end > result.protein_seq_residue_number_end:
            result.protein_seq_residue_number_end = result.peptide_loc_in_protein_end + 1


class ProteinModsWriter:
    """
    Writes one row per modified residue and protein a result maps to.

    Counters of the written and skipped results are kept for the final report.
    """

    def __init__(self, mappings, include_reversed=False, warning_threshold=10):
        """
        Initialise the ProteinModsWriter.

        :param mappings: (list of PepToProteinMapping) the peptide to protein mapping; sorted
            in place
        :param include_reversed: (bool) write rows for decoy proteins
        :param warning_threshold: (int) number of missing peptides always reported
        """
        self.mappings = sort_mappings(mappings)
        self.include_reversed = include_reversed
        self.warning_threshold = warning_threshold
        self.psm_count = 0
        self.psm_count_skipped_reversed = 0
        self.peptides_not_found = 0

    @staticmethod
    def _peptide_text(result):
        return result.sequence_with_prefix_and_suffix(with_mods=True) or result.clean_sequence

    def rows(self, result):
        """
        Yield the output rows (as lists) of one result.

        :param result: (SearchResult) result with unique_seq_id and located modifications
        """
        index = find_first_match(self.mappings, result.clean_sequence)
        if index < 0:
            self.peptides_not_found += 1
            show_periodic_warning(self.peptides_not_found, self.warning_threshold,
                                  "Peptide not found in peptide to protein mapping: " +
                                  result.clean_sequence)
            return

        primary_is_decoy = classify_protein(result.protein_name) == ProteinClassification.DECOY
        while index < len(self.mappings) and \
                self.mappings[index].peptide == result.clean_sequence:
            mapping = self.mappings[index]
            index += 1
            self.psm_count += 1

            if not self.include_reversed and \
                    mapping.classification == ProteinClassification.DECOY:
                self.psm_count_skipped_reversed += 1
                continue

            for mod in result.modifications:
                if mapping.classification == ProteinClassification.NO_MATCH and \
                        primary_is_decoy:
                    self.psm_count_skipped_reversed += 1
                    continue
                residue = resolve_residue(mod.residue, result.clean_sequence,
                                          mod.residue_loc_in_peptide)
                yield [result.result_id, self._peptide_text(result), result.unique_seq_id,
                       mapping.protein, residue,
                       mapping.residue_start + mod.residue_loc_in_peptide - 1,
                       mod.mass_correction_tag, mod.residue_loc_in_peptide, result.spec_prob]

    def report(self):
        """Log the summary of skipped results."""
        if self.psm_count > 0:
            if self.psm_count_skipped_reversed == self.psm_count:
                log_warning("All PSMs map to reversed or scrambled proteins; the "
                            "_ProteinMods.txt file is empty")
            elif self.psm_count_skipped_reversed > 0:
                log("Note: skipped %s / %s PSMs that map to reversed or scrambled proteins "
                    "while creating the _ProteinMods.txt file" % (
                        format(self.psm_count_skipped_reversed, ','),
                        format(self.psm_count, ',')))
        if self.peptides_not_found > self.warning_threshold:
            log("Note: %s peptides were not found in the peptide to protein mapping" %
                format(self.peptides_not_found, ','))


def create_protein_mod_details_file(results, mapping_file_path, output_file_path,
                                    include_reversed=False, warning_threshold=10):
    """
    Write the _ProteinMods.txt file.

    :param results: (iterable of SearchResult) results with unique sequence IDs assigned
    :param mapping_file_path: (str) peptide to protein mapping file
    :param output_file_path: (str) file to write
    :param include_reversed: (bool) write rows for decoy proteins
    :param warning_threshold: (int) number of missing peptides always reported
    :return: (ProteinModsWriter) the writer with its counters
    :raises InvalidInputPath: if the mapping file does not exist
    """
    mappings, _ = load_peptide_to_protein_map(mapping_file_path, warning_threshold)
    writer = ProteinModsWriter(mappings, include_reversed, warning_threshold)

    with open(output_file_path, 'w') as out:
        out.write(collapse_list(PROTEIN_MODS_COLUMNS) + '\n')
        for result in results:
            for row in writer.rows(result):
                out.write(collapse_list(row) + '\n')

    writer.report()
    return writer
