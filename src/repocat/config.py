# src/repocat/config.py
import os

# Version-control metadata directories, pruned unless --no-default-ignores
DEFAULT_IGNORE_PATTERNS = [
    "# Default ignore patterns",
    ".git/",
    ".hg/",
    ".svn/",
    ".bzr/",
    "CVS/",
    "_darcs/",
    ".jj/",
    ".pijul/",
    ".fslckout",
    "_FOSSIL_",
]

# NUL bytes inside this prefix mark a file as binary
BINARY_SNIFF_BYTES = 8192

DEFAULT_WORKERS = min(32, (os.cpu_count() or 1) + 4)

FILE_MARKER = "--- File: {path} ---"
SUMMARY_TEMPLATE = "[{lines} lines]"
BINARY_PLACEHOLDER = "[binary file omitted: {size} bytes]"

# Prefix of the scratch file written next to the destination before os.replace
TEMP_PREFIX = ".repocat-"
