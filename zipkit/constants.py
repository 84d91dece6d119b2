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
Default values shared by the reader, batch and writer modules.
"""

import re
import zipfile

# Pattern matching every entry name (DOTALL so names with newlines match too)
MATCH_ALL = re.compile(r".*", re.DOTALL)

# Compression method names (for API)
COMPRESSION_STORED = "stored"
COMPRESSION_DEFLATE = "deflate"
COMPRESSION_BZIP2 = "bzip2"
COMPRESSION_LZMA = "lzma"

DEFAULT_COMPRESSION = COMPRESSION_DEFLATE

# Compression method mapping
COMPRESSION_METHODS = {
    COMPRESSION_STORED: zipfile.ZIP_STORED,
    COMPRESSION_DEFLATE: zipfile.ZIP_DEFLATED,
    COMPRESSION_BZIP2: zipfile.ZIP_BZIP2,
    COMPRESSION_LZMA: zipfile.ZIP_LZMA,
}

# Chunk size used when streaming payloads between files and archives
COPY_BUFFER_SIZE = 64 * 1024

# Duplicate entry name policies for merge_zip_files
DUPLICATES_KEEP = "keep"  # Write every occurrence
DUPLICATES_FIRST = "first"  # First occurrence wins
DUPLICATES_LAST = "last"  # Last occurrence wins
DUPLICATES_ERROR = "error"  # Refuse to merge

DUPLICATE_POLICIES = (DUPLICATES_KEEP, DUPLICATES_FIRST, DUPLICATES_LAST, DUPLICATES_ERROR)

# DOS date/time range representable in a ZIP entry
MIN_DATE_TIME = (1980, 1, 1, 0, 0, 0)
MAX_DATE_TIME = (2107, 12, 31, 23, 59, 58)

# Entry name length is stored in a 16-bit field
MAX_NAME_LENGTH = 0xFFFF
