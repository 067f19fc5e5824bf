"""
Work folder discovery under the content root.

Layout examples (root_dir = /media/voice):
    /media/voice/RJ123456/
    /media/voice/[Circle] Title (RJ234567)/
    /media/voice/Some Circle/RJ345678 Title/

A directory whose name carries an RJ code is a work folder and is not
descended into. Other directories are descended into until ``max_depth``;
those at the limit without a code (scans, extras) are not work folders
and are left out.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from pathlib import Path, PurePosixPath

from rjsync.exceptions import DiscoveryError
from rjsync.identifiers import has_work_code

logger = logging.getLogger(__name__)


def _list_subdirs(path: Path) -> list[str]:
    """Names of visible subdirectories, sorted for stable scan order."""
    with os.scandir(path) as entries:
        return sorted(
            entry.name
            for entry in entries
            if entry.is_dir(follow_symlinks=True) and not entry.name.startswith(".")
        )


async def iter_work_folders(
    root_dir: Path,
    *,
    max_depth: int = 2,
    ignore: tuple[str, ...] = ("Images",),
) -> AsyncIterator[str]:
    """
    Yield candidate work folders, relative to ``root_dir`` (POSIX separators).

    Args:
        root_dir: Content root
        max_depth: How many directory levels to search (1 = direct children only)
        ignore: Top-level directory names to skip (the cover directory)

    Raises:
        DiscoveryError: If any directory can't be listed
    """

    async def walk(relative: PurePosixPath, depth: int) -> AsyncIterator[str]:
        current = root_dir / relative
        try:
            names = await asyncio.to_thread(_list_subdirs, current)
        except OSError as e:
            raise DiscoveryError(
                f"Cannot list folder {current}: {e}", root_dir=root_dir
            ) from e

        for name in names:
            if depth == 0 and name in ignore:
                continue
            child = relative / name
            if has_work_code(name):
                yield child.as_posix()
            elif depth + 1 < max_depth:
                async for found in walk(child, depth + 1):
                    yield found
            else:
                logger.debug("No RJ code in %s, not a work folder", child)

    async for folder in walk(PurePosixPath(), 0):
        yield folder
