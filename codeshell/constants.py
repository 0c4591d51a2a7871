"""
Centralized constants for Codeshell.

This module contains hardcoded strings and magic numbers that are used
across the codebase. Centralizing them here makes them easier to find
and modify.
"""

# Key under which the whole store snapshot is persisted
STORAGE_KEY = "codeEditor_data"

# Prefix for generated entity ids (item_<counter>_<millis>)
ID_PREFIX = "item"

# Extensions accepted when creating a file from the shell
VALID_FILE_EXTENSIONS = (".html", ".css", ".js", ".txt", ".json", ".md")

# Histogram bucket for files without an extension
UNKNOWN_EXTENSION = "unknown"

# Tab title suffix for files with unsaved edits
MODIFIED_MARKER = " ●"

# Sidebar width bounds (pixels)
SIDEBAR_MIN_WIDTH = 200
SIDEBAR_MAX_WIDTH = 400
