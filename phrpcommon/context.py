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
Processing context owning the state of one results processing run.

This module provides ProcessingContext, which holds the modification registry, the unique
sequence registry, the sequence to protein map and the cleavage state calculator of a run,
together with the terminal error code and the abort flag. Everything is reset at the start
of each processed file.
"""
from phrpcommon.cleavage import CleavageStateCalculator
from phrpcommon.config import Config
from phrpcommon.errors import PHRPError, PHRPErrorCode
from phrpcommon.modifications import ModificationRegistry
from phrpcommon.sequences import UniqueSequenceRegistry, SeqToProteinMap


class ProcessingContext:
    """
    State of a results processing run.

    The context is created by the caller and handed to the components that need it; abort
    requests are polled between records.
    """

    def __init__(self, config=None):
        """
        Initialize ProcessingContext with configuration.

        :param config: (Config) processing configuration; the defaults if None
        """
        if config is None:
            config = Config()
        self.config = config
        self.calculator = CleavageStateCalculator(config.cleavage_rule)
        self.modifications = ModificationRegistry.from_config(config)
        self.unique_sequences = UniqueSequenceRegistry(config.initial_unique_seq_id)
        self.seq_to_protein = SeqToProteinMap()
        self.error_code = PHRPErrorCode.NoError
        self.error_message = ''
        self._abort_requested = False

    def reset(self):
        """Clear the registries, the error and the abort flag for a new file."""
        self.modifications.reset_counts()
        self.unique_sequences.clear(self.config.initial_unique_seq_id)
        self.seq_to_protein.clear()
        self.error_code = PHRPErrorCode.NoError
        self.error_message = ''
        self._abort_requested = False

    def abort_processing(self):
        """Request processing to stop at the next record."""
        self._abort_requested = True

    @property
    def abort_requested(self):
        return self._abort_requested

    def set_error(self, error, message=None, leave_existing_code=False):
        """
        Record the terminal error of the run.

        :param error: (PHRPError or PHRPErrorCode) the error; an exception supplies both its
            code and its message
        :param message: (str) error message; overrides the message of an exception
        :param leave_existing_code: (bool) keep an error code that was set before
        """
        if isinstance(error, PHRPError):
            code = error.error_code
            if message is None:
                message = str(error)
        else:
            code = PHRPErrorCode(error)

        if not (leave_existing_code and self.error_code != PHRPErrorCode.NoError):
            self.error_code = code
        if message is not None:
            self.error_message = message

    @property
    def has_error(self):
        return self.error_code != PHRPErrorCode.NoError
