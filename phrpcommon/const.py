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

"""Module providing constants and regular expressions."""
import re
import sys


class _const:
    VERSION = "1.0.0"

    # protein name written by the peptide to protein mapper when a peptide matched no protein
    PROTEIN_NAME_NO_MATCH = "__NoMatch__"

    # name prefixes (and one suffix) used by the different search tools for decoy proteins
    REVERSED_PROTEIN_PREFIXES = ("reversed_", "REV_", "scrambled_", "xxx_", "REV__", "xxx.")
    REVERSED_PROTEIN_SUFFIXES = (":reversed",)

    # symbols marking a protein terminus in prefix/suffix residues
    TERMINUS_SYMBOL_SEQUEST = "-"
    TERMINUS_SYMBOL_XTANDEM_NTERMINUS = "["
    TERMINUS_SYMBOL_XTANDEM_CTERMINUS = "]"
    TERMINUS_SYMBOLS = frozenset("-[]")

    # symbols used as target residues of terminal modifications
    N_TERMINAL_PEPTIDE_SYMBOL = "<"
    C_TERMINAL_PEPTIDE_SYMBOL = ">"
    N_TERMINAL_PROTEIN_SYMBOL = "["
    C_TERMINAL_PROTEIN_SYMBOL = "]"

    GENERIC_RESIDUE_SYMBOL = "X"
    NO_AFFECTED_ATOM_SYMBOL = "-"

    # modification symbols handed out to auto-defined modifications (in that order)
    DEFAULT_MODIFICATION_SYMBOLS = "*#@$&!%~^`+="
    LAST_RESORT_MODIFICATION_SYMBOL = "_"
    NO_SYMBOL_MODIFICATION_SYMBOL = "-"
    UNKNOWN_MASS_CORRECTION_TAG = "UnkMod00"

    # digits used when comparing modification masses
    MASS_DIGITS_OF_PRECISION = 3

    # arbitrary protein length assumed when a tool does not report protein coordinates
    PSEUDO_PROTEIN_END = 10000

    # output file suffixes
    FILENAME_SUFFIX_RESULT_TO_SEQ_MAP = "_ResultToSeqMap.txt"
    FILENAME_SUFFIX_SEQ_TO_PROTEIN_MAP = "_SeqToProteinMap.txt"
    FILENAME_SUFFIX_SEQ_INFO = "_SeqInfo.txt"
    FILENAME_SUFFIX_MOD_DETAILS = "_ModDetails.txt"
    FILENAME_SUFFIX_MOD_SUMMARY = "_ModSummary.txt"
    FILENAME_SUFFIX_PEP_TO_PROTEIN_MAPPING = "_PepToProtMap"
    FILENAME_SUFFIX_PROTEIN_MODS = "_ProteinMods.txt"

    # separator used for keys built from two values
    KEY_SEPARATOR = "_"

    # characters splitting a dataset name into parts
    DATASET_NAME_SPLIT_PATTERN = re.compile(r"[_-]")

    # anything that is not a letter (used to get the clean sequence of a peptide)
    NOT_LETTER_PATTERN = re.compile(r"[^A-Za-z]")

    # as const is overwriten by _const the module __file__ variable would disapear.
    # so it is also saved into the class _const
    __file__ = __file__

    class ConstError(TypeError):
        pass

    # overwrite the __setattr__ method to raise an error if a variable is overwritten
    def __setattr__(self, name, value):
        if name in self.__dict__ or name in self.__class__.__dict__:
            raise self.ConstError("Can't rebind const(%s)" % name)
        self.__dict__[name] = value


# overwrite the module const with the class _const so that we can actually protect attributes
# from being changed
sys.modules[__name__] = _const()
