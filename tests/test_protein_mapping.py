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


import os
import pytest
from phrpcommon.context import ProcessingContext
from phrpcommon.phrp_logging import log_enable
from phrpcommon.errors import InvalidInputPath, MappingFileEmpty, MappingErrorRateExceeded, \
    OutputCreationError, PHRPErrorCode
from phrpcommon.protein_mapping import PepToProteinMapping, ProteinClassification, \
    is_reversed_protein, classify_protein, load_peptide_to_protein_map, sort_mappings, \
    find_first_match, iter_matches, update_mapping_peptide, count_mapping_file_peptides, \
    check_mapping_error_rate, validate_mapping_file, validate_mapping_error_rate, \
    pep_to_protein_map_file_path, merge_pep_to_protein_map_files


@pytest.mark.parametrize("name", [
    "reversed_ProtA", "REV_ProtA", "rev_prota", "scrambled_ProtA", "xxx_ProtA", "XXX.ProtA",
    "REV__ProtA", "ProtA:reversed", "ProtA:REVERSED"])
def test_is_reversed_protein(name):
    assert is_reversed_protein(name)


def test_is_not_reversed_protein():
    assert not is_reversed_protein("ProtA")
    assert not is_reversed_protein("ProtA_REV")
    assert not is_reversed_protein("")
    assert not is_reversed_protein(None)


def test_classify_protein():
    assert classify_protein("ProtA") == ProteinClassification.NORMAL
    assert classify_protein("__NoMatch__") == ProteinClassification.NO_MATCH
    assert classify_protein("XXX_ProtA") == ProteinClassification.DECOY
    assert PepToProteinMapping("PEPTIDE", "REV_ProtA").classification == \
        ProteinClassification.DECOY


def make_mappings(peptides):
    return sort_mappings([PepToProteinMapping(p, "Prot%d" % i) for i, p in enumerate(peptides)])


def test_find_first_match_walks_back_to_first_entry():
    mappings = make_mappings(["AAA", "BBB", "CCC", "DDD", "EEE", "FFF", "FFF", "FFF", "GGG"])
    assert [m.peptide for m in mappings[5:8]] == ["FFF"] * 3
    assert find_first_match(mappings, "FFF") == 5
    assert find_first_match(mappings, "AAA") == 0
    assert find_first_match(mappings, "GGG") == 8
    assert list(iter_matches(mappings, "FFF")) == [5, 6, 7]


def test_find_first_match_not_found():
    mappings = make_mappings(["BBB", "DDD", "FFF"])
    assert find_first_match(mappings, "CCC") == ~1
    assert find_first_match(mappings, "AAA") == ~0
    assert find_first_match(mappings, "GGG") == ~3
    assert find_first_match([], "AAA") < 0
    assert list(iter_matches(mappings, "CCC")) == []


def test_find_first_match_long_run():
    mappings = make_mappings(["KING"] * 20 + ["LACK"])
    assert find_first_match(mappings, "KING") == 0
    assert find_first_match(mappings, "LACK") == 20


def test_sort_mappings_uses_ordinal_order():
    mappings = sort_mappings([PepToProteinMapping("pep", "B"), PepToProteinMapping("PEP", "B"),
                              PepToProteinMapping("PEP", "A")])
    assert [(m.peptide, m.protein) for m in mappings] == [("PEP", "A"), ("PEP", "B"),
                                                          ("pep", "B")]


def test_update_mapping_peptide():
    mappings = make_mappings(["AAA", "BBB"])
    update_mapping_peptide(mappings, 1, "BBC")
    assert mappings[1].peptide == "BBC"
    # out of range indices are ignored
    update_mapping_peptide(mappings, 5, "XXX")


def test_load_peptide_to_protein_map(mapping_file):
    path = mapping_file([("PEPTIDEK", "ProtB", 10, 17), ("PEPTIDEK", "ProtA", 5, 12),
                         ("KING", "__NoMatch__", 0, 0), ("SHORT", "ProtC")])
    mappings, header = load_peptide_to_protein_map(path)
    assert header == "Peptide\tProtein\tResidue_Start\tResidue_End"
    assert mappings == [PepToProteinMapping("PEPTIDEK", "ProtB", 10, 17),
                        PepToProteinMapping("PEPTIDEK", "ProtA", 5, 12),
                        PepToProteinMapping("KING", "__NoMatch__", 0, 0)]


def test_load_peptide_to_protein_map_reports_malformed_lines(mapping_file, capsys):
    rows = [("PEPTIDEK", "ProtA", 5, 12)] + [("SHORT%d" % i, "ProtC") for i in range(12)]
    path = mapping_file(rows)
    log_enable(True)
    mappings, _ = load_peptide_to_protein_map(path, warning_threshold=3)
    captured = capsys.readouterr()
    log_enable(False)

    assert mappings == [PepToProteinMapping("PEPTIDEK", "ProtA", 5, 12)]
    # only the first lines are reported one by one
    assert captured.out.count("with fewer than 4 columns") == 3
    assert "Skipped 12 malformed lines" in captured.out


def test_load_peptide_to_protein_map_short_header(tmpdir):
    path = tmpdir.join("Dataset_PepToProtMap.txt")
    path.write("Peptide\tProtein\nPEPTIDEK\tProtA\t5\t12\n")
    mappings, header = load_peptide_to_protein_map(str(path))
    assert header == "Peptide\tProtein"
    assert len(mappings) == 1


def test_load_peptide_to_protein_map_without_header(mapping_file):
    path = mapping_file([("PEPTIDEK", "ProtA", 5, 12)], header=False)
    mappings, header = load_peptide_to_protein_map(path)
    assert header == ""
    assert mappings[0].residue_start == 5


def test_load_missing_map(tmpdir):
    with pytest.raises(InvalidInputPath):
        load_peptide_to_protein_map(str(tmpdir.join("missing.txt")))
    with pytest.raises(InvalidInputPath):
        load_peptide_to_protein_map("")


def test_count_mapping_file_peptides(mapping_file):
    path = mapping_file([("AAA", "P1", 1, 3), ("AAA", "P2", 1, 3), ("BBB", "__NoMatch__", 0, 0),
                         ("CCC", "P1", 5, 7)])
    assert count_mapping_file_peptides(path) == (3, 1)


def mapping_rows(peptide_count, no_match_count):
    rows = []
    for i in range(peptide_count):
        protein = "__NoMatch__" if i < no_match_count else "Prot1"
        rows.append(("PEP%05d" % i, protein, 1, 8))
    return rows


def test_error_rate_at_limit_is_rejected(mapping_file):
    # 1 of 4 peptides = 25 %, which is not below a maximum of 25 %
    path = mapping_file(mapping_rows(4, 1))
    with pytest.raises(MappingErrorRateExceeded) as e:
        check_mapping_error_rate(path, max_error_percent=25)
    assert e.value.error_percent == 25.0
    assert not validate_mapping_file(path)
    assert not validate_mapping_file(path, max_error_percent=25)
    assert validate_mapping_file(path, ignore_errors=True)
    assert validate_mapping_file(path, max_error_percent=30)


def test_error_rate_at_default_limit(mapping_file):
    # 1 of 1000 peptides is exactly the default maximum of 0.1 %
    assert not validate_mapping_file(mapping_file(mapping_rows(1000, 1)), max_error_percent=0.1)
    assert validate_mapping_file(mapping_file(mapping_rows(1011, 1)), max_error_percent=0.1)


def test_error_rate_below_limit_is_accepted(mapping_file, capsys):
    path = mapping_file(mapping_rows(2000, 1))
    log_enable(True)
    assert check_mapping_error_rate(path) == pytest.approx(0.05)
    assert validate_mapping_file(path, warn_percent=0.01)
    assert validate_mapping_file(path, warn_percent=1)
    captured = capsys.readouterr()
    log_enable(False)
    # above the warning threshold the message is a warning, below it a status message
    lines = [line for line in captured.out.splitlines() if "did not match" in line]
    assert len(lines) == 3
    assert "Warning: " in lines[1]
    assert "Warning: " not in lines[2]


def test_perfect_and_empty_mapping_files(mapping_file, tmpdir):
    assert check_mapping_error_rate(mapping_file(mapping_rows(10, 0))) == 0.0

    empty = mapping_file([])
    with pytest.raises(MappingFileEmpty):
        check_mapping_error_rate(empty)
    # even with errors ignored
    assert not validate_mapping_file(empty, ignore_errors=True)


def test_validate_mapping_file_records_error_on_context(mapping_file):
    context = ProcessingContext()
    assert not validate_mapping_file(mapping_file(mapping_rows(10, 5)), context=context)
    assert context.error_code == PHRPErrorCode.ErrorCreatingOutputFiles
    assert "did not match" in context.error_message


def test_validate_mapping_error_rate(mapping_file):
    assert validate_mapping_error_rate(mapping_file(mapping_rows(2000, 1)))
    assert not validate_mapping_error_rate(mapping_file(mapping_rows(4, 1)))
    assert validate_mapping_error_rate(mapping_file(mapping_rows(4, 1)), max_error_percent=30)
    context = ProcessingContext()
    assert not validate_mapping_error_rate(mapping_file([]), context=context)
    assert context.error_code == PHRPErrorCode.ErrorCreatingOutputFiles


def test_pep_to_protein_map_file_path(tmpdir):
    input_dir = tmpdir.mkdir("in")
    output_dir = tmpdir.mkdir("out")
    input_file = str(input_dir.join("Dataset_syn.txt"))

    assert pep_to_protein_map_file_path(input_file) == \
        os.path.abspath(str(input_dir.join("Dataset_syn_PepToProtMapMTS.txt")))
    assert pep_to_protein_map_file_path(input_file, mts=False).endswith(
        "Dataset_syn_PepToProtMap.txt")

    output_copy = os.path.abspath(str(output_dir.join("Dataset_syn_PepToProtMapMTS.txt")))
    assert pep_to_protein_map_file_path(input_file, str(output_dir)) == output_copy

    # an existing map next to the input file is reused
    input_dir.join("Dataset_syn_PepToProtMapMTS.txt").write("Peptide\tProtein\n")
    assert pep_to_protein_map_file_path(input_file, str(output_dir), use_existing=True) == \
        os.path.abspath(str(input_dir.join("Dataset_syn_PepToProtMapMTS.txt")))
    assert pep_to_protein_map_file_path(input_file, str(output_dir)) == output_copy


def test_merge_pep_to_protein_map_files(tmpdir):
    file1 = tmpdir.join("a_PepToProtMap.txt")
    file1.write("Peptide\tProtein\tResidue_Start\tResidue_End\n"
                "AAA\tP1\t1\t3\n"
                "BBB\tP1\t5\t7\n")
    file2 = tmpdir.join("b_PepToProtMap.txt")
    file2.write("AAA\tP1\t1\t3\n"
                "CCC\tP2\t2\t4\n")
    merged = str(tmpdir.join("merged.txt"))

    assert merge_pep_to_protein_map_files([str(file1), str(file2)], merged)
    with open(merged) as f:
        lines = f.read().splitlines()
    assert lines == ["Peptide\tProtein\tResidue_Start\tResidue_End",
                     "AAA\tP1\t1\t3", "BBB\tP1\t5\t7", "CCC\tP2\t2\t4"]


def test_merge_adds_default_header(tmpdir):
    file1 = tmpdir.join("a_PepToProtMap.txt")
    file1.write("AAA\tP1\t1\t3\n"
                "BBB\tP2\t2\t4\n")
    merged = str(tmpdir.join("merged.txt"))
    assert merge_pep_to_protein_map_files([str(file1)], merged)
    with open(merged) as f:
        lines = f.read().splitlines()
    assert lines[0] == "Peptide\tProtein\tResidue_Start\tResidue_End"
    assert lines[1:] == ["AAA\tP1\t1\t3", "BBB\tP2\t2\t4"]


def test_merge_reuses_existing_file_and_reports_missing_inputs(tmpdir):
    merged = tmpdir.join("merged.txt")
    merged.write("existing\n")
    assert merge_pep_to_protein_map_files([str(tmpdir.join("missing.txt"))], str(merged),
                                          use_existing=True)
    assert merged.read() == "existing\n"

    context = ProcessingContext()
    assert not merge_pep_to_protein_map_files([str(tmpdir.join("missing.txt"))], str(merged),
                                              context=context)
    assert context.error_code == PHRPErrorCode.ErrorCreatingOutputFiles

    with pytest.raises(OutputCreationError):
        merge_pep_to_protein_map_files([], "")
