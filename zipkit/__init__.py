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
ZIPKIT - helpers for reading, writing and transforming ZIP archives.

This library wraps the standard library zipfile module with small
functions that extract entries, list entries by pattern, run a function
over every entry (sequentially or in parallel), check archive integrity,
and pack directories or named streams into new archives.
"""

import logging

from .batch import each_entry, pprocess_entries, process_entries, shutdown_pool
from .errors import ArchiveError, DuplicateEntryError, EntryNameError, UnsupportedCompressionError
from .reader import extract_entry, extract_entry_to_file, get_entries, is_broken, iter_entries, open_archive
from .utils import name_only
from .writer import ArchiveWriter, copy_into_zip, copy_to_zip, merge_zip_files, write_into_zip

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ArchiveError",
    "ArchiveWriter",
    "DuplicateEntryError",
    "EntryNameError",
    "UnsupportedCompressionError",
    "copy_into_zip",
    "copy_to_zip",
    "each_entry",
    "extract_entry",
    "extract_entry_to_file",
    "get_entries",
    "is_broken",
    "iter_entries",
    "merge_zip_files",
    "name_only",
    "open_archive",
    "pprocess_entries",
    "process_entries",
    "shutdown_pool",
    "write_into_zip",
]

__version__ = "0.1.0"
