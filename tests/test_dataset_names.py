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


import pytest
from phrpcommon.dataset_names import split_dataset_name, combine_dataset_name_parts, \
    build_dataset_name_map, get_dataset_name_map, get_base_name_for_output_files

LIVER_DATASETS = ["LiverA_Frac1_f", "LiverA_Frac2_f", "LiverB_Frac1_f"]


@pytest.mark.parametrize("name,parts", [
    ("LiverA_Frac1_f", ["LiverA", "_Frac1", "_f"]),
    ("QC-Shew_20", ["QC", "-Shew", "_20"]),
    ("_Lead_tail", ["_Lead", "_tail"]),
    ("Plain", ["Plain"]),
    ("", []),
])
def test_split_dataset_name(name, parts):
    assert split_dataset_name(name) == parts
    assert ''.join(parts) == name


def test_combine_dataset_name_parts():
    parts = split_dataset_name("LiverA_Frac1_f")
    assert combine_dataset_name_parts("LiverA_Frac1_f", parts, 1) == "LiverA"
    assert combine_dataset_name_parts("LiverA_Frac1_f", parts, 2) == "LiverA_Frac1"
    assert combine_dataset_name_parts("LiverA_Frac1_f", parts, 3) == "LiverA_Frac1_f"
    # short names are extended up to the minimum length
    assert combine_dataset_name_parts("LiverA_Frac1_f", parts, 1, min_length=8) == \
        "LiverA_Frac1"
    assert combine_dataset_name_parts("LiverA_Frac1_f", parts, 1, min_length=13) == \
        "LiverA_Frac1_f"


def test_build_dataset_name_map():
    name_map, longest_common, warnings = build_dataset_name_map(LIVER_DATASETS)
    assert name_map == {"LiverA_Frac1_f": "LiverA_Frac1",
                        "LiverA_Frac2_f": "LiverA_Frac2",
                        "LiverB_Frac1_f": "LiverB_Frac1"}
    assert longest_common == "Liver"
    assert warnings == []


def test_build_dataset_name_map_unique_first_parts():
    name_map, longest_common, _ = build_dataset_name_map(["Heart_1", "Brain_1"], min_length=0)
    assert name_map == {"Heart_1": "Heart", "Brain_1": "Brain"}
    assert longest_common == ""


def test_single_dataset_keeps_its_name():
    name_map, longest_common, _ = build_dataset_name_map(["QC_Shew_Run_0"])
    assert name_map == {"QC_Shew_Run_0": "QC_Shew_Run_0"}
    assert longest_common == "QC_Shew_Run"
    assert build_dataset_name_map([]) == ({}, '', [])


def test_get_dataset_name_map_uses_the_input_file_name():
    name_map, longest_common = get_dataset_name_map("/data/QC_Shew_psm.tsv", [], "_psm.tsv")
    assert name_map == {"QC_Shew": "QC_Shew"}
    assert longest_common == "QC_Shew"

    name_map, _ = get_dataset_name_map("/data/QC_Shew_psm.tsv", [])
    assert name_map == {"QC_Shew_psm": "QC_Shew_psm"}

    name_map, _ = get_dataset_name_map("/data/Combined.tsv", LIVER_DATASETS)
    assert len(name_map) == 3


def test_get_base_name_for_output_files():
    assert get_base_name_for_output_files({}, "msgfplus") == "Dataset_msgfplus"
    assert get_base_name_for_output_files({"QC_Shew": "QC_Shew"}, "msgfplus") == \
        "QC_Shew_msgfplus"

    name_map, longest_common, _ = build_dataset_name_map(LIVER_DATASETS)
    assert get_base_name_for_output_files(name_map, "msgfplus", longest_common) == \
        "Liver_msgfplus"
    assert get_base_name_for_output_files(name_map, "msgfplus", longest_common, "Combined") == \
        "Combined_msgfplus"
    assert get_base_name_for_output_files(name_map, "msgfplus") == "Dataset_msgfplus"
