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

"""Module for formatting the rows of the tab separated output files."""
from phrpcommon import const
from phrpcommon.errors import OutputCreationError
from phrpcommon.sequences import sort_modifications
from phrpcommon.string_utils import collapse_list, dbl_to_string
from phrpcommon.utils import replace_filename_suffix

COLUMN_NAME_UNIQUE_SEQ_ID = 'Unique_Seq_ID'
COLUMN_NAME_PROTEIN_NAME = 'Protein_Name'

RESULT_TO_SEQ_MAP_COLUMNS = ('Result_ID', COLUMN_NAME_UNIQUE_SEQ_ID)

SEQ_INFO_COLUMNS = (COLUMN_NAME_UNIQUE_SEQ_ID, 'Mod_Count', 'Mod_Description',
                    'Monoisotopic_Mass')

MOD_DETAILS_COLUMNS = (COLUMN_NAME_UNIQUE_SEQ_ID, 'Mass_Correction_Tag', 'Position')

SEQ_TO_PROTEIN_MAP_COLUMNS = (COLUMN_NAME_UNIQUE_SEQ_ID, 'Cleavage_State', 'Terminus_State',
                              COLUMN_NAME_PROTEIN_NAME, 'Protein_Expectation_Value_Log(e)',
                              'Protein_Intensity_Log(I)')

PROTEIN_MODS_COLUMNS = ('ResultID', 'Peptide', COLUMN_NAME_UNIQUE_SEQ_ID,
                        COLUMN_NAME_PROTEIN_NAME, 'Residue', 'Protein_Residue_Num', 'Mod_Name',
                        'Peptide_Residue_Num', 'MSGF_SpecProb')

MOD_SUMMARY_COLUMNS = ('Modification_Symbol', 'Modification_Mass', 'Target_Residues',
                       'Modification_Type', 'Mass_Correction_Tag', 'Occurrence_Count')


def create_seq_info_row(seq_id, result):
    """
    Create the _SeqInfo.txt row of a unique sequence.

    :param seq_id: (int) unique sequence ID
    :param result: (SearchResult) result carrying the modifications and mass
    :return: (list) field values
    """
    return [seq_id, result.mod_count, result.mod_description,
            dbl_to_string(result.monoisotopic_mass, 5, 0.000001)]


def create_mod_details_rows(seq_id, result):
    """
    Create the _ModDetails.txt rows of a unique sequence.

    Rows are ordered by residue position and mass correction tag; isotopic modifications come
    first with position 0.

    :param seq_id: (int) unique sequence ID
    :param result: (SearchResult) result carrying the modifications
    :return: (list of list) field values per modification
    """
    return [[seq_id, mod.mass_correction_tag, mod.residue_loc_in_peptide]
            for mod in sort_modifications(result.modifications)]


def create_seq_to_protein_row(seq_id, result):
    """Create the _SeqToProteinMap.txt row of a unique sequence and protein."""
    return [seq_id, int(result.cleavage_state), int(result.terminus_state), result.protein_name,
            result.protein_expectation_value, result.protein_intensity]


def create_mod_summary_rows(registry):
    """
    Create the _ModSummary.txt rows.

    :param registry: (ModificationRegistry) modifications of the run
    :return: (list of list) field values per modification definition
    """
    return [[d.symbol, dbl_to_string(d.mass, 6), d.target_residues, d.type_symbol,
             d.mass_correction_tag, d.occurrence_count]
            for d in registry.summary_rows()]


def write_mod_summary_file(file_path, registry):
    """
    Write the _ModSummary.txt file.

    :param file_path: (str) output path
    :param registry: (ModificationRegistry) modifications of the run
    :raises OutputCreationError: if the file cannot be written
    """
    try:
        with open(file_path, 'w') as out:
            out.write(collapse_list(MOD_SUMMARY_COLUMNS) + '\n')
            for row in create_mod_summary_rows(registry):
                out.write(collapse_list(row) + '\n')
    except OSError as e:
        raise OutputCreationError("Error creating modification summary file %s: %s" % (
            file_path, e)) from e


class SequenceOutputFiles:
    """
    Writer of the _ResultToSeqMap, _SeqInfo, _ModDetails and _SeqToProteinMap files.

    The unique sequence registry and the sequence to protein map of the context are cleared
    when the files are opened. Use it as context manager so the files are always closed::

        with SequenceOutputFiles('/out/Dataset_syn.txt', context) as writer:
            for result in results:
                writer.write_result(result)
    """

    def __init__(self, base_output_path, context):
        """
        Initialise the SequenceOutputFiles.

        :param base_output_path: (str) path of the main output file; the file names are
            derived from it by replacing its suffix
        :param context: (ProcessingContext) context holding the registries
        """
        self.context = context
        self.result_to_seq_map_path = replace_filename_suffix(
            base_output_path, const.FILENAME_SUFFIX_RESULT_TO_SEQ_MAP)
        self.seq_info_path = replace_filename_suffix(base_output_path,
                                                     const.FILENAME_SUFFIX_SEQ_INFO)
        self.mod_details_path = replace_filename_suffix(base_output_path,
                                                        const.FILENAME_SUFFIX_MOD_DETAILS)
        self.seq_to_protein_map_path = replace_filename_suffix(
            base_output_path, const.FILENAME_SUFFIX_SEQ_TO_PROTEIN_MAP)
        self._files = None

    def open(self):
        """Create the files and write their header lines."""
        self.context.unique_sequences.clear(self.context.config.initial_unique_seq_id)
        self.context.seq_to_protein.clear()

        headers = [
            (self.result_to_seq_map_path, RESULT_TO_SEQ_MAP_COLUMNS),
            (self.seq_info_path, SEQ_INFO_COLUMNS),
            (self.mod_details_path, MOD_DETAILS_COLUMNS),
            (self.seq_to_protein_map_path, SEQ_TO_PROTEIN_MAP_COLUMNS),
        ]
        self._files = []
        try:
            for path, columns in headers:
                f = open(path, 'w')
                self._files.append(f)
                f.write(collapse_list(columns) + '\n')
        except OSError as e:
            self.close()
            raise OutputCreationError("Error creating sequence output files: %s" % e) from e
        return self

    def close(self):
        if self._files is None:
            return
        for f in self._files:
            f.close()
        self._files = None

    def __enter__(self):
        if self._files is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False

    def write_result(self, result, update_result_to_seq_map=True):
        """
        Append the entries of one result.

        The result is assigned its unique sequence ID. SeqInfo and ModDetails rows are only
        written on the first sighting of a sequence, SeqToProteinMap rows once per sequence and
        protein.

        :param result: (SearchResult) result with mod description and mass computed
        :param update_result_to_seq_map: (bool) False for further proteins of a result that was
            already written
        :return: (int) the unique sequence ID
        """
        if self._files is None:
            raise OutputCreationError("Sequence output files are not open")
        result_to_seq_map, seq_info, mod_details, seq_to_protein_map = self._files

        seq_id, existing = self.context.unique_sequences.get_or_create(
            result.clean_sequence, result.mod_description)
        result.unique_seq_id = seq_id

        if update_result_to_seq_map:
            result_to_seq_map.write(collapse_list([result.result_id, seq_id]) + '\n')
            if not existing:
                seq_info.write(collapse_list(create_seq_info_row(seq_id, result)) + '\n')
                for row in create_mod_details_rows(seq_id, result):
                    mod_details.write(collapse_list(row) + '\n')

        if not self.context.seq_to_protein.check_defined(seq_id, result.protein_name):
            seq_to_protein_map.write(collapse_list(create_seq_to_protein_row(seq_id, result)) +
                                     '\n')
        return seq_id
