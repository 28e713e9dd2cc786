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

"""Module containing file path utility functions."""
import os
from pathlib import Path
from phrpcommon.errors import InvalidInputPath, InvalidOutputPath
from phrpcommon.phrp_logging import log_warning
from phrpcommon.string_utils import cdbl_safe


def replace_filename_suffix(file_path, new_suffix):
    """
    Replace the extension of a file name by a suffix.

    If new_suffix has no extension of its own the original extension is kept, e.g.
    ``Dataset_syn.txt`` with ``_ModSummary`` gives ``Dataset_syn_ModSummary.txt``.

    :param file_path: (str) original path
    :param new_suffix: (str) suffix to append to the file name without extension
    :return: (str) the new path, in the directory of the original one
    """
    new_suffix = new_suffix or ''
    directory, file_name = os.path.split(file_path)
    base_name, extension = os.path.splitext(file_name)
    if os.path.splitext(new_suffix)[1]:
        new_file_name = base_name + new_suffix
    else:
        new_file_name = base_name + new_suffix + extension
    if not directory.strip():
        return new_file_name
    return os.path.join(directory, new_file_name)


def validate_file_has_data(file_path, description, numeric_col_index=0):
    """
    Check that a file exists and has at least one tab separated row with a number.

    :param file_path: (str) path to the file
    :param description: (str) file description for the message, e.g. 'Synopsis'
    :param numeric_col_index: (int) column that has to hold a number; -1 accepts any
        non-empty line
    :return: (tuple) (bool data found, error message or '')
    """
    if not os.path.isfile(file_path):
        return False, "%s file not found: %s" % (description, os.path.basename(file_path))
    if os.path.getsize(file_path) == 0:
        return False, "%s file is empty (zero-bytes)" % description

    with open(file_path) as f:
        for line in f:
            line = line.rstrip('\r\n')
            if not line:
                continue
            if numeric_col_index < 0:
                return True, ''
            fields = line.split('\t')
            if len(fields) <= numeric_col_index:
                continue
            if cdbl_safe(fields[numeric_col_index], None) is not None:
                return True, ''
    return False, "%s is empty (no data)" % description


def clean_up_file_paths(input_file_path, output_directory_path=None):
    """
    Validate the input file and the output directory.

    The output directory defaults to the directory of the input file and is created if it
    does not exist.

    :param input_file_path: (str) result file to process
    :param output_directory_path: (str) output directory
    :return: (tuple of str) absolute input file path and output directory path
    :raises InvalidInputPath: if the input file does not exist
    :raises InvalidOutputPath: if the output directory cannot be created
    """
    if not input_file_path or not os.path.isfile(input_file_path):
        if input_file_path and '..' in input_file_path:
            log_warning("Absolute path: %s" % os.path.dirname(os.path.abspath(input_file_path)))
        raise InvalidInputPath("Input file not found: %s" % input_file_path)

    input_file_path = os.path.abspath(input_file_path)
    if not output_directory_path or not output_directory_path.strip():
        output_directory_path = os.path.dirname(input_file_path)

    try:
        Path(output_directory_path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InvalidOutputPath("Invalid output directory: %s" % output_directory_path) from e
    return input_file_path, os.path.abspath(output_directory_path)
