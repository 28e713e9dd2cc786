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

"""Error codes and exceptions raised while processing peptide hit results."""
from enum import IntEnum


class PHRPErrorCode(IntEnum):
    """Terminal error code of a processing run."""
    NoError = 0
    InvalidInputFilePath = 1
    InvalidOutputDirectoryPath = 2
    ParameterFileNotFound = 3
    MassCorrectionTagsFileNotFound = 4
    ModificationDefinitionFileNotFound = 5
    ErrorReadingInputFile = 6
    ErrorCreatingOutputFiles = 7
    ErrorReadingParameterFile = 8
    ErrorReadingMassCorrectionTagsFile = 9
    ErrorReadingModificationDefinitionsFile = 10
    FilePathError = 11
    UnspecifiedError = -1


class PHRPError(Exception):
    """Base class for run-level errors; carries the matching error code."""
    error_code = PHRPErrorCode.UnspecifiedError


class InvalidInputPath(PHRPError):
    error_code = PHRPErrorCode.InvalidInputFilePath


class InvalidOutputPath(PHRPError):
    error_code = PHRPErrorCode.InvalidOutputDirectoryPath


class MappingFileEmpty(PHRPError):
    error_code = PHRPErrorCode.ErrorCreatingOutputFiles


class MappingErrorRateExceeded(PHRPError):
    """Too many peptides in a mapping file did not match a protein."""
    error_code = PHRPErrorCode.ErrorCreatingOutputFiles

    def __init__(self, message, error_percent=None):
        super().__init__(message)
        self.error_percent = error_percent


class OutputCreationError(PHRPError):
    error_code = PHRPErrorCode.ErrorCreatingOutputFiles


class ParameterFileError(PHRPError):
    error_code = PHRPErrorCode.ErrorReadingParameterFile
