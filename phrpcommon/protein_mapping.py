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
Peptide to protein mapping.

The mapping file is created by an external mapper that searches the peptides of a result
file in a FASTA file. It is tab separated with the columns Peptide, Protein, Residue_Start and
Residue_End. Peptides without a protein are listed with the protein __NoMatch__.
"""
from enum import Enum
from functools import lru_cache
import os
from phrpcommon import const
from phrpcommon.errors import InvalidInputPath, MappingFileEmpty, MappingErrorRateExceeded, \
    OutputCreationError
from phrpcommon.phrp_logging import log, log_warning, log_error, show_periodic_warning

DEFAULT_HEADER_COLUMNS = ('Peptide', 'Protein')
RESIDUE_HEADER_COLUMNS = ('Residue_Start', 'Residue_End')


class ProteinClassification(Enum):
    NORMAL = 'normal'
    NO_MATCH = 'no_match'
    DECOY = 'decoy'


def is_reversed_protein(protein_name):
    """
    Check if a protein is a decoy (reversed or scrambled) protein.

    The naming conventions of the different search tools are recognised, ignoring case.
    """
    name = (protein_name or '').lower()
    if name.startswith(tuple(p.lower() for p in const.REVERSED_PROTEIN_PREFIXES)):
        return True
    return name.endswith(tuple(s.lower() for s in const.REVERSED_PROTEIN_SUFFIXES))


@lru_cache(maxsize=None)
def classify_protein(protein_name):
    """Classify a protein name as normal, no-match sentinel or decoy."""
    if protein_name == const.PROTEIN_NAME_NO_MATCH:
        return ProteinClassification.NO_MATCH
    if is_reversed_protein(protein_name):
        return ProteinClassification.DECOY
    return ProteinClassification.NORMAL


class PepToProteinMapping:
    """One peptide to protein entry of a mapping file."""

    __slots__ = ('peptide', 'protein', 'residue_start', 'residue_end')

    def __init__(self, peptide, protein, residue_start=0, residue_end=0):
        self.peptide = peptide
        self.protein = protein
        self.residue_start = residue_start
        self.residue_end = residue_end

    @property
    def classification(self):
        return classify_protein(self.protein)

    def __eq__(self, other):
        if type(other) is not type(self):
            return False
        return (self.peptide, self.protein, self.residue_start, self.residue_end) == \
            (other.peptide, other.protein, other.residue_start, other.residue_end)

    def __repr__(self):
        return "PepToProteinMapping(%r, %r, %d, %d)" % (self.peptide, self.protein,
                                                        self.residue_start, self.residue_end)


def _parse_int(text):
    try:
        return int(text)
    except ValueError:
        return None


def load_peptide_to_protein_map(file_path, warning_threshold=10):
    """
    Read a peptide to protein mapping file.

    Lines with fewer than four columns are skipped with a warning. The first line is taken as
    header if it starts with the Peptide and Protein columns or its third column is not an
    integer.

    :param file_path: (str) path of the mapping file
    :param warning_threshold: (int) number of skipped lines that are always reported
    :return: (tuple) (list of PepToProteinMapping, header line or '')
    :raises InvalidInputPath: if the file does not exist
    """
    if not file_path:
        raise InvalidInputPath("PepToProteinMap file is not defined")
    if not os.path.isfile(file_path):
        raise InvalidInputPath("PepToProteinMap file does not exist: %s" % file_path)

    mappings = []
    header = ''
    lines_read = 0
    skipped = 0
    with open(file_path) as f:
        for line_number, line in enumerate(f, start=1):
            data_line = line.strip()
            if not data_line:
                continue
            lines_read += 1

            fields = data_line.split('\t')
            if lines_read == 1 and tuple(fields[:2]) == DEFAULT_HEADER_COLUMNS:
                header = data_line
                continue
            if len(fields) < 4:
                skipped += 1
                show_periodic_warning(skipped, warning_threshold,
                                      "Skipping line %d of %s with fewer than 4 columns: %s" % (
                                          line_number, os.path.basename(file_path), data_line))
                continue
            if lines_read == 1 and _parse_int(fields[2]) is None:
                header = data_line
                continue
            mappings.append(PepToProteinMapping(fields[0], fields[1],
                                                _parse_int(fields[2]) or 0,
                                                _parse_int(fields[3]) or 0))

    if skipped > 0:
        log_warning("Skipped %s malformed lines in peptide to protein mapping file %s" % (
            format(skipped, ','), os.path.basename(file_path)))
    return mappings, header


def sort_mappings(mappings):
    """Sort mappings in place by peptide, then protein (ordinal string order)."""
    mappings.sort(key=lambda m: (m.peptide, m.protein))
    return mappings


def find_first_match(mappings, peptide):
    """
    Find the first entry of a peptide in mappings sorted by peptide.

    :param mappings: (list of PepToProteinMapping) sorted mappings
    :param peptide: (str) peptide to look for
    :return: (int) index of the first entry of the peptide; if the peptide is not present the
        bitwise complement of its insertion point (always negative)
    """
    low = 0
    high = len(mappings) - 1
    index = None
    while low <= high:
        middle = (low + high) // 2
        current = mappings[middle].peptide
        if current == peptide:
            index = middle
            break
        if current < peptide:
            low = middle + 1
        else:
            high = middle - 1

    if index is None:
        return ~low
    if index <= 0:
        return index

    # the search may land anywhere inside the run of entries for the peptide
    while index > 0 and mappings[index - 1].peptide == peptide:
        index -= 1
    return index


def iter_matches(mappings, peptide):
    """Yield the indices of all entries of a peptide in sorted mappings."""
    index = find_first_match(mappings, peptide)
    if index < 0:
        return
    while index < len(mappings) and mappings[index].peptide == peptide:
        yield index
        index += 1


def update_mapping_peptide(mappings, index, peptide):
    """Replace the peptide of one entry."""
    if 0 <= index < len(mappings):
        mappings[index].peptide = peptide


def count_mapping_file_peptides(file_path):
    """
    Count the peptides of a mapping file.

    The header line is skipped. Peptides are counted by changes of the first column, so the
    file has to be sorted by peptide.

    :return: (tuple) (number of peptides, number of lines with the no-match protein)
    """
    peptide_count = 0
    no_match_count = 0
    last_peptide = None
    with open(file_path) as f:
        for line_number, line in enumerate(f, start=1):
            line = line.rstrip('\r\n')
            if line_number <= 1 or not line:
                continue
            peptide = line.split('\t', 1)[0]
            if peptide != last_peptide:
                peptide_count += 1
                last_peptide = peptide
            if const.PROTEIN_NAME_NO_MATCH in line:
                no_match_count += 1
    return peptide_count, no_match_count


def _no_match_message(error_percent, no_match_count, peptide_count, file_path):
    return "%.2f%% of the entries (%s / %s) in the peptide to protein map file (%s) did not " \
        "match to a protein in the FASTA file" % (error_percent, format(no_match_count, ','),
                                                   format(peptide_count, ','),
                                                   os.path.basename(file_path))


def check_mapping_error_rate(file_path, ignore_errors=False, max_error_percent=0.1,
                             warn_percent=0.0):
    """
    Check the fraction of peptides without protein match in a mapping file.

    Files are accepted if errors are ignored or the percentage of unmatched peptides is below
    max_error_percent. Accepted files with unmatched peptides are reported as warning once the
    percentage reaches warn_percent.

    :return: (float) the percentage of unmatched peptides
    :raises MappingFileEmpty: if the file lists no peptides
    :raises MappingErrorRateExceeded: if the file is rejected
    """
    peptide_count, no_match_count = count_mapping_file_peptides(file_path)
    if peptide_count == 0:
        raise MappingFileEmpty("Peptide to protein mapping file is empty: %s" % file_path)
    if no_match_count == 0:
        return 0.0

    error_percent = no_match_count / peptide_count * 100.0
    message = _no_match_message(error_percent, no_match_count, peptide_count, file_path)

    if ignore_errors or error_percent < max_error_percent:
        if error_percent >= warn_percent:
            log_warning(message)
        else:
            log(message)
        return error_percent

    raise MappingErrorRateExceeded(message, error_percent)


def validate_mapping_file(file_path, ignore_errors=False, max_error_percent=0.1,
                          warn_percent=0.0, context=None):
    """
    Decide whether a mapping file can be used.

    :param file_path: (str) path of the mapping file
    :param ignore_errors: (bool) accept the file regardless of unmatched peptides
    :param max_error_percent: (float) percentage of unmatched peptides (0 - 100) at which the
        file is rejected
    :param warn_percent: (float) percentage from which accepted files are reported as warning
    :param context: (ProcessingContext) optional context receiving the error of rejected files
    :return: (bool) True if the file is accepted
    """
    try:
        check_mapping_error_rate(file_path, ignore_errors, max_error_percent, warn_percent)
    except (MappingFileEmpty, MappingErrorRateExceeded) as e:
        log_error(str(e))
        if context is not None:
            context.set_error(e)
        return False
    return True


def validate_mapping_error_rate(file_path, max_error_percent=0.1, context=None):
    """
    Validate a mapping file with a fixed policy, used for mapping files that are reused.

    Unlike validate_mapping_file there is neither an ignore flag nor a warning threshold:
    accepted files are reported as status message only.
    """
    peptide_count, no_match_count = count_mapping_file_peptides(file_path)
    if peptide_count == 0:
        error = MappingFileEmpty("Peptide to protein mapping file is empty: %s" % file_path)
    elif no_match_count == 0:
        return True
    else:
        error_percent = no_match_count / peptide_count * 100.0
        message = _no_match_message(error_percent, no_match_count, peptide_count, file_path)
        if error_percent < max_error_percent:
            log(message)
            return True
        error = MappingErrorRateExceeded(message, error_percent)

    log_error(str(error))
    if context is not None:
        context.set_error(error)
    return False


def pep_to_protein_map_file_path(input_file_path, output_directory=None, mts=True,
                                 use_existing=False):
    """
    Construct the path of the mapping file belonging to a result file.

    The file is placed in output_directory if given. When an existing file may be reused and
    only the copy next to the input file exists (or it is the newer one) that copy is
    returned.

    :param input_file_path: (str) result file
    :param output_directory: (str) output directory
    :param mts: (bool) name the file ``_PepToProtMapMTS.txt`` instead of ``_PepToProtMap.txt``
    :param use_existing: (bool) prefer an existing file next to the input file
    """
    base_name = os.path.splitext(os.path.basename(input_file_path))[0]
    file_name = base_name + const.FILENAME_SUFFIX_PEP_TO_PROTEIN_MAPPING + \
        ("MTS.txt" if mts else ".txt")
    input_copy = os.path.abspath(os.path.join(os.path.dirname(input_file_path), file_name))

    if not output_directory:
        return input_copy

    output_copy = os.path.abspath(os.path.join(output_directory, file_name))
    if not use_existing:
        return output_copy

    input_exists = os.path.isfile(input_copy)
    output_exists = os.path.isfile(output_copy)
    if input_exists and not output_exists:
        return input_copy
    if input_exists and output_exists and \
            os.path.getmtime(input_copy) > os.path.getmtime(output_copy):
        return input_copy
    return output_copy


def merge_pep_to_protein_map_files(mapping_file_paths, merged_file_path, ignore_errors=False,
                                   max_error_percent=0.1, warn_percent=0.0,
                                   use_existing=False, context=None):
    """
    Merge the mapping files of several result files into one.

    Every input file is validated first. The header is written once; inputs without the
    expected header get the default one. Peptide and protein pairs are only written once.

    :param mapping_file_paths: (list of str) mapping files created by the external mapper
    :param merged_file_path: (str) merged output file
    :param ignore_errors: (bool) accept files regardless of unmatched peptides
    :param max_error_percent: (float) percentage of unmatched peptides rejecting a file
    :param warn_percent: (float) percentage from which accepted files give a warning
    :param use_existing: (bool) keep an already existing merged file
    :param context: (ProcessingContext) optional context receiving errors
    :return: (bool) True if all inputs were accepted
    """
    if not merged_file_path:
        raise OutputCreationError("Cannot create the PepToProtein map file because the output "
                                  "path is empty")

    if use_existing and os.path.isfile(merged_file_path):
        log("Using existing peptide to protein map file: %s" % merged_file_path)
        return True

    success = True
    written = set()
    header_written = False
    try:
        with open(merged_file_path, 'w') as out:
            for file_path in mapping_file_paths:
                if not os.path.isfile(file_path):
                    error = OutputCreationError(
                        "Peptide to protein mapping file was not created for %s" % file_path)
                    log_error(str(error))
                    if context is not None:
                        context.set_error(error)
                    success = False
                    break

                if not validate_mapping_file(file_path, ignore_errors, max_error_percent,
                                             warn_percent, context):
                    success = False

                lines_read = 0
                with open(file_path) as f:
                    for line in f:
                        line = line.rstrip('\r\n')
                        if not line.strip():
                            continue
                        lines_read += 1

                        fields = line.split('\t', 2)
                        if len(fields) < 2:
                            continue

                        if lines_read == 1:
                            if tuple(fields[:2]) == DEFAULT_HEADER_COLUMNS:
                                if not header_written:
                                    out.write(line + '\n')
                                    header_written = True
                                continue
                            if not header_written:
                                columns = DEFAULT_HEADER_COLUMNS
                                if len(fields) > 2:
                                    columns += RESIDUE_HEADER_COLUMNS
                                header = '\t'.join(columns)
                                log_warning("Input file %s does not have the expected header "
                                            "line; using the default: %s" % (file_path, header))
                                out.write(header + '\n')
                                header_written = True

                        key = fields[0] + const.KEY_SEPARATOR + fields[1]
                        if key not in written:
                            written.add(key)
                            out.write(line + '\n')
    except OSError as e:
        raise OutputCreationError("Error creating %s: %s" % (merged_file_path, e)) from e

    return success
