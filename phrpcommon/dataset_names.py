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
Abbreviation of dataset names for results combining several datasets.

Dataset names are split into parts at underscores and hyphens, e.g. ``LiverA_Frac1_f`` into
``LiverA``, ``_Frac1`` and ``_f``. Every dataset gets the shortest leading part combination
that keeps all abbreviated names distinct.
"""
import os
from phrpcommon import const
from phrpcommon.phrp_logging import log_warning
from phrpcommon.string_utils import longest_common_string_from_start


def split_dataset_name(dataset_name):
    """
    Split a dataset name before each underscore and hyphen.

    A delimiter at the very start of the name does not split it.

    :param dataset_name: (str) the name
    :return: (list of str) name parts; joined they give the name again
    """
    parts = []
    start = 0
    while start < len(dataset_name):
        match = const.DATASET_NAME_SPLIT_PATTERN.search(dataset_name, start + 1)
        if match is None:
            parts.append(dataset_name[start:])
            break
        parts.append(dataset_name[start:match.start()])
        start = match.start()
    return parts


def combine_dataset_name_parts(dataset_name, parts, part_count, min_length=0, max_length=0):
    """
    Join the leading parts of a dataset name.

    Beyond part_count, more parts are added while the name is shorter than min_length, unless
    the next part would make a long enough name longer than max_length.

    :param dataset_name: (str) the full name
    :param parts: (list of str) parts of the name
    :param part_count: (int) number of parts to use at least
    :param min_length: (int) minimum length of the combined name (0 for none)
    :param max_length: (int) maximum length of the combined name (0 for none)
    :return: (str) the combined name
    """
    if part_count >= len(parts):
        return dataset_name

    combined = ''
    for index, part in enumerate(parts):
        if index >= part_count:
            if max_length == 0 and min_length == 0:
                break
            too_short = min_length > 0 and len(combined) < min_length
            if max_length > 0 and not too_short and len(combined) + len(part) > max_length:
                break
            if not too_short:
                break
        combined += part
    return combined


def _clean_common_base_name(name):
    name = name.rstrip('_-')
    if len(name) > 7 and (name.endswith('_0') or name.endswith('_f')):
        name = name[:-2]
    return name


def build_dataset_name_map(dataset_names, min_length=12, max_length=25):
    """
    Abbreviate dataset names.

    The smallest number of leading name parts that gives distinct names for all datasets is
    used, extended to at least min_length characters where possible. If no number of parts
    gives distinct names, the full names are used. A single dataset keeps its full name.

    :param dataset_names: (iterable of str) distinct dataset names
    :param min_length: (int) names are extended with further parts up to this length
    :param max_length: (int) parts are not added beyond part count once a name would exceed
        this length
    :return: (tuple) (dict full name -> abbreviated name, longest common base name,
        list of warnings)
    """
    names = sorted(set(dataset_names))
    warnings = []
    if len(names) == 0:
        return {}, '', warnings
    if len(names) == 1:
        return {names[0]: names[0]}, _clean_common_base_name(names[0]), warnings

    name_parts = {name: split_dataset_name(name) for name in names}
    max_part_count = max(len(parts) for parts in name_parts.values())

    part_count = 1
    distinct = False
    while part_count <= max_part_count:
        candidates = set()
        for name in names:
            candidate = combine_dataset_name_parts(name, name_parts[name], part_count)
            if candidate in candidates:
                break
            candidates.add(candidate)
        if len(candidates) == len(names):
            distinct = True
            break
        part_count += 1

    name_map = {}
    if distinct:
        base_names = set()
        for name in names:
            base_name = combine_dataset_name_parts(name, name_parts[name], part_count,
                                                   min_length, max_length)
            name_map[name] = base_name
            if base_name in base_names:
                warnings.append("Abbreviated name %s is used more than once; logic error for "
                                "dataset %s" % (base_name, name))
                continue
            base_names.add(base_name)
    else:
        # names are too similar to be shortened
        name_map = {name: name for name in names}

    longest_common = longest_common_string_from_start(name_map.values(), case_sensitive=False)
    return name_map, _clean_common_base_name(longest_common), warnings


def get_dataset_name_map(input_file_name, dataset_names, suffix_to_remove='', min_length=12,
                         max_length=25):
    """
    Abbreviate the dataset names of a result file.

    Without dataset names the base name of the input file stands in for the only dataset;
    a trailing suffix_to_remove (e.g. '_psm') is cut off that base name.

    :return: (tuple) (dict full name -> abbreviated name, longest common base name)
    """
    dataset_names = set(dataset_names)
    if len(dataset_names) == 0:
        base_name = os.path.splitext(os.path.basename(input_file_name))[0]
        suffix = os.path.splitext(suffix_to_remove)[0] if suffix_to_remove else ''
        if suffix.strip() and base_name.lower().endswith(suffix.lower()) and \
                len(base_name) > len(suffix):
            base_name = base_name[:-len(suffix)]
        dataset_names.add(base_name)

    name_map, longest_common, warnings = build_dataset_name_map(dataset_names, min_length,
                                                                max_length)
    for warning in warnings:
        log_warning(warning)
    return name_map, longest_common


def get_base_name_for_output_files(name_map, tool_abbreviation, longest_common_base_name='',
                                   output_file_base_name=''):
    """
    Base name of the combined output files, e.g. ``Liver_msfragger``.

    :param name_map: (dict) dataset name map
    :param tool_abbreviation: (str) short name of the search tool
    :param longest_common_base_name: (str) longest common base name of the datasets
    :param output_file_base_name: (str) explicitly configured base name
    """
    if len(name_map) == 0 or (len(name_map) > 1 and not output_file_base_name.strip()
                              and not longest_common_base_name.strip()):
        return "Dataset_%s" % tool_abbreviation
    if len(name_map) == 1:
        return "%s_%s" % (next(iter(name_map)), tool_abbreviation)
    return "%s_%s" % (output_file_base_name.strip() or longest_common_base_name,
                      tool_abbreviation)
