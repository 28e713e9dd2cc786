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

"""Interface between search tool specific readers and the results processor."""
from abc import ABC, abstractmethod


class SearchResultSource(ABC):
    """
    Reader of the results of one search tool.

    Implementations parse their tool's files and yield one SearchResult per PSM and protein,
    best result first. Modifications are attached by the reader, usually through the
    modification registry of the ProcessingContext it was created with; the processor
    computes everything else.
    """

    #: short tool name used in combined output file names, e.g. 'msgfplus'
    tool_abbreviation = ''

    #: suffix of the tool's result files cut off to get a dataset name, e.g. '_psm'
    result_file_suffix = ''

    @abstractmethod
    def iter_results(self, input_file):
        """
        Yield the search results of a file.

        :param input_file: (str) result file of the tool
        """

    def dataset_names(self, input_file):
        """Names of the datasets in a file; empty if the file holds a single one."""
        return []

    def result_count(self, input_file):
        """Number of results in a file if known without reading it; otherwise None."""
        return None


class ListResultSource(SearchResultSource):
    """Source serving results that are already in memory, regardless of the input file."""

    def __init__(self, results, tool_abbreviation='list', dataset_names=()):
        self.results = list(results)
        self.tool_abbreviation = tool_abbreviation
        self._dataset_names = list(dataset_names)

    def iter_results(self, input_file):
        return iter(self.results)

    def result_count(self, input_file):
        return len(self.results)

    def dataset_names(self, input_file):
        return self._dataset_names
