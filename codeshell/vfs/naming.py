"""
Naming policy: collision-free names and name validation.

Uniqueness is advisory. The store never refuses a duplicate name; callers
that want a guaranteed-unique sibling name resolve it here first.
"""

import re
from collections.abc import Callable

from codeshell.constants import VALID_FILE_EXTENSIONS
from codeshell.vfs.paths import PATH_SEPARATOR

FOLDER_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def numbered_name(base: str, counter: int, keep_extension: bool) -> str:
    """Build the ``counter``-th alternative for ``base``.

    With ``keep_extension`` the counter goes before the final extension:
    "report.txt" -> "report (1).txt". Otherwise it is appended.
    """
    if keep_extension and "." in base:
        stem, ext = base.rsplit(".", 1)
        return f"{stem} ({counter}).{ext}"
    return f"{base} ({counter})"


def unique_name(base: str, exists: Callable[[str], bool], keep_extension: bool) -> str:
    """Return ``base`` if free, else the first free numbered alternative"""
    name = base
    counter = 1
    while exists(name):
        name = numbered_name(base, counter, keep_extension)
        counter += 1
    return name


def is_valid_file_name(name: str) -> bool:
    """Check the name ends with one of the editable extensions.

    Separators are refused so a file name never splits into path segments.
    """
    if PATH_SEPARATOR in name:
        return False
    lowered = name.lower()
    return any(lowered.endswith(ext) for ext in VALID_FILE_EXTENSIONS)


def is_valid_folder_name(name: str) -> bool:
    """Folder names are limited to letters, digits, dash and underscore"""
    return bool(FOLDER_NAME_RE.match(name))
