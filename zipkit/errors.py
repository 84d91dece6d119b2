"""
Copyright 2025 DNAi inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

"""
Custom exception classes for zipkit.

Failures of the underlying archive (zipfile.BadZipFile) or of the filesystem
(OSError) are not wrapped; these classes cover the conditions zipkit itself
checks for.
"""


class ArchiveError(Exception):
    """Base exception class for all errors raised by zipkit."""

    pass


class EntryNameError(ArchiveError):
    """Raised when an entry name cannot be written or extracted safely.

    This exception is raised when:
    - The name is empty or contains null bytes
    - The encoded name does not fit the ZIP name length field
    - Extracting the name would place a file outside the output directory
    """

    pass


class DuplicateEntryError(ArchiveError):
    """Raised when a merge under the "error" policy finds repeated names."""

    def __init__(self, names: list[str]):
        self.names = names
        super().__init__(f"Duplicate entry names: {', '.join(repr(n) for n in names)}")


class UnsupportedCompressionError(ArchiveError):
    """Raised when an unknown compression method name is requested."""

    pass
