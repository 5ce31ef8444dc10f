"""Template reference resolution.

A template reference names a disk and a dotted template path:

    "<disk>::<dotted.template.path>[.edge]"

The disk defaults to ``default`` and the extension to ``edge``.
"""

from __future__ import annotations

import os

DISK_SEPARATOR = "::"
EXTENSION_MARKER = ".edge"
DEFAULT_DISK = "default"
DEFAULT_EXTENSION = "edge"


def extract_disk_and_template_name(reference: str) -> tuple[str, str]:
    """Split a template reference into its disk name and relative file path.

    Only the first dot of the template path is turned into a path
    separator (``users.list`` → ``users/list``).

    Example:
        >>> extract_disk_and_template_name("users::list")
        ('users', 'list.edge')
        >>> extract_disk_and_template_name("list")
        ('default', 'list.edge')
        >>> extract_disk_and_template_name("admin::users.list.edge")
        ('admin', 'users/list.edge')
    """
    disk, separator, template = reference.partition(DISK_SEPARATOR)
    if not separator:
        disk, template = DEFAULT_DISK, reference

    path, _, extension = template.partition(EXTENSION_MARKER)
    extension = extension.lstrip(".") or DEFAULT_EXTENSION
    return disk, f"{path.replace('.', os.sep, 1)}.{extension}"
