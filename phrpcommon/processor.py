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

"""Runs the results of one search tool file through the normalization steps."""
import os
from phrpcommon import const
from phrpcommon.context import ProcessingContext
from phrpcommon.dataset_names import get_dataset_name_map, get_base_name_for_output_files
from phrpcommon.errors import PHRPError, OutputCreationError
from phrpcommon import fdr
from phrpcommon.output_format import SequenceOutputFiles, write_mod_summary_file
from phrpcommon.phrp_logging import log, log_warning, log_error, log_timestamp_reset, \
    ProgressBar
from phrpcommon.protein_mapping import validate_mapping_file, validate_mapping_error_rate, \
    merge_pep_to_protein_map_files, pep_to_protein_map_file_path
from phrpcommon.protein_mods import create_protein_mod_details_file
from phrpcommon.utils import clean_up_file_paths, replace_filename_suffix


class ResultsProcessor:
    """
    Creates the normalized output files of a search result file.

    Results are read from a SearchResultSource; the state of the run lives in the
    ProcessingContext, which also receives the error of a failed run.
    """

    def __init__(self, source, context=None):
        """
        Initialise the ResultsProcessor.

        :param source: (SearchResultSource) reader of the tool's results
        :param context: (ProcessingContext) state of the run; a default one if None
        """
        self.source = source
        self.context = context if context is not None else ProcessingContext()
        self.results = []
        self.base_output_path = ''

    @property
    def config(self):
        return self.context.config

    def base_output_name(self, input_file_path):
        """
        Base name of the output files of an input file.

        Files holding several datasets get a name combined from the abbreviated dataset names.
        """
        names_config = self.config.dataset_names
        name_map, longest_common = get_dataset_name_map(
            input_file_path, self.source.dataset_names(input_file_path),
            self.source.result_file_suffix, names_config.min_length, names_config.max_length)
        return get_base_name_for_output_files(name_map, self.source.tool_abbreviation,
                                              longest_common,
                                              names_config.output_file_base_name)

    def process_file(self, input_file_path, output_directory_path=None, mapping_file_path=None,
                     compute_q_values=False):
        """
        Process one result file.

        :param input_file_path: (str) result file of the search tool
        :param output_directory_path: (str) output directory; the input file's if None
        :param mapping_file_path: (str or list of str) peptide to protein mapping file; a list
            of files is merged first
        :param compute_q_values: (bool) compute FDR and Q-values of the results
        :return: (bool) True if successful; otherwise the error is in the context

        Rejected mapping files skip the ProteinMods file and record their error in the context
        without failing the run.
        """
        log_timestamp_reset()
        self.context.reset()
        try:
            input_file_path, output_directory_path = clean_up_file_paths(
                input_file_path, output_directory_path)

            self.base_output_path = os.path.join(
                output_directory_path, self.base_output_name(input_file_path) + '.txt')
            self.results = []

            if not self._write_sequence_files(input_file_path):
                return False

            if compute_q_values:
                self._compute_q_values()

            write_mod_summary_file(
                replace_filename_suffix(self.base_output_path, const.FILENAME_SUFFIX_MOD_SUMMARY),
                self.context.modifications)

            if mapping_file_path and not isinstance(mapping_file_path, str):
                mapping_file_path = self._merge_mapping_files(
                    input_file_path, output_directory_path, mapping_file_path)

        except PHRPError as e:
            log_error(str(e))
            self.context.set_error(e)
            return False

        if self.config.create_protein_mods_file and mapping_file_path:
            self._create_protein_mods_file(mapping_file_path)
        return True

    def _prepare_result(self, result, first_row=True):
        """Complete a result; later protein rows of a result leave the mod counts unchanged."""
        registry = self.context.modifications
        result.ensure_protein_location()
        result.compute_cleavage_state(self.context.calculator)
        result.add_static_terminus_mods(registry, update_occurrence_count=first_row)
        if not any(m.definition.type == 'isotopic' for m in result.modifications):
            result.add_isotopic_modifications(registry, update_occurrence_count=first_row)
        result.update_mod_description()
        result.compute_monoisotopic_mass()

    def _write_sequence_files(self, input_file_path):
        previous_result_id = None
        total = self.source.result_count(input_file_path) or 0
        with SequenceOutputFiles(self.base_output_path, self.context) as writer, \
                ProgressBar("Creating the sequence info files", total) as bar:
            for result in self.source.iter_results(input_file_path):
                if self.context.abort_requested:
                    log_warning("Processing aborted")
                    return False
                # later rows of a result list its further proteins
                first_row = result.result_id != previous_result_id
                self._prepare_result(result, first_row)
                writer.write_result(result, first_row)
                previous_result_id = result.result_id
                self.results.append(result)
                bar.next()
        log("Wrote %s results with %s unique sequences" % (
            format(len(self.results), ','), format(len(self.context.unique_sequences), ',')))
        return True

    def primary_results(self):
        """The first row of each result, i.e. one per PSM."""
        seen = set()
        primary = []
        for result in self.results:
            if result.result_id not in seen:
                seen.add(result.result_id)
                primary.append(result)
        return primary

    def _compute_q_values(self):
        primary = sorted(self.primary_results(), key=lambda r: r.expectation_value)
        fdr.compute_q_values(primary)

        by_id = {r.result_id: r for r in primary}
        for result in self.results:
            best = by_id[result.result_id]
            result.fdr = best.fdr
            result.q_value = best.q_value

    def _merge_mapping_files(self, input_file_path, output_directory_path, mapping_file_paths):
        """Merge the mapping files of the input; None if any of them was rejected."""
        validation = self.config.mapping_validation
        merged = pep_to_protein_map_file_path(
            self.base_output_path, output_directory_path, mts=True,
            use_existing=self.config.use_existing_pep_to_protein_map)
        if not merge_pep_to_protein_map_files(mapping_file_paths, merged,
                                              validation.ignore_errors,
                                              validation.max_error_percent,
                                              validation.warn_percent,
                                              self.config.use_existing_pep_to_protein_map,
                                              self.context):
            message = "Not all peptide to protein mapping files of %s were accepted" % \
                os.path.basename(input_file_path)
            if not self.context.has_error:
                self.context.set_error(OutputCreationError(message))
            log_warning("%s; Skipping creation of the ProteinMods file" % message)
            return None
        return merged

    def _create_protein_mods_file(self, mapping_file_path):
        """Create the _ProteinMods.txt file; failures only give a warning."""
        skip_message = "Skipping creation of the ProteinMods file"
        if not os.path.isfile(mapping_file_path):
            log_warning("Peptide to protein mapping file not found: %s; %s" % (
                mapping_file_path, skip_message))
            return False

        validation = self.config.mapping_validation
        if self.config.use_existing_pep_to_protein_map:
            valid = validate_mapping_error_rate(mapping_file_path, validation.max_error_percent)
        else:
            valid = validate_mapping_file(mapping_file_path, validation.ignore_errors,
                                          validation.max_error_percent,
                                          validation.warn_percent)
        if not valid:
            log_warning(skip_message)
            return False

        output_file_path = replace_filename_suffix(self.base_output_path,
                                                   const.FILENAME_SUFFIX_PROTEIN_MODS)
        try:
            create_protein_mod_details_file(self.primary_results(), mapping_file_path,
                                            output_file_path,
                                            self.config.protein_mods_include_reversed,
                                            self.config.periodic_warning_threshold)
        except (PHRPError, OSError) as e:
            log_warning("Error creating the ProteinMods file: %s; %s" % (e, skip_message))
            return False
        return True
