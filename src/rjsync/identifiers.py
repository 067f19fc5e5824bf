"""Work identifier parsing.

Folder names carry the work code as ``RJ`` followed by six digits, e.g.
``[Circle] Some Title (RJ123456)``. The numeric part is the catalog key;
the zero-padded form is used for display and cover file names.
"""

from __future__ import annotations

import re

from rjsync.exceptions import IdentifierError

# Matches: RJ123456 anywhere in a name
RJCODE_PATTERN = re.compile(r"RJ(\d{6})")

RJCODE_WIDTH = 6


def has_work_code(name: str) -> bool:
    """Return True if ``name`` contains at least one RJ code."""
    return RJCODE_PATTERN.search(name) is not None


def parse_work_id(name: str) -> int:
    """
    Extract the work id from a folder name.

    Args:
        name: Folder name (last path component)

    Returns:
        Integer work id (e.g. 123456 for "RJ123456")

    Raises:
        IdentifierError: If the name has no RJ code, or two different ones.
    """
    codes = set(RJCODE_PATTERN.findall(name))
    if not codes:
        raise IdentifierError(f"No RJ code found in folder name: {name!r}", name=name)
    if len(codes) > 1:
        raise IdentifierError(
            f"Ambiguous folder name {name!r}: multiple RJ codes {sorted(codes)}",
            name=name,
        )
    return int(codes.pop())


def format_rjcode(work_id: int) -> str:
    """Zero-pad a work id to six digits ("000001")."""
    return f"{work_id:0{RJCODE_WIDTH}d}"


def format_work_code(work_id: int) -> str:
    """Render a work id as its display code ("RJ000001")."""
    return f"RJ{format_rjcode(work_id)}"
