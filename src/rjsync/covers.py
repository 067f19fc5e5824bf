"""
Cover image download and storage.

Covers live in one flat directory under the content root, named
``RJ<rjcode>.jpg``. Downloads are best effort: a non-success response is
logged and dropped, never surfaced to the caller as an error.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx

from rjsync.exceptions import AssetError, CoverFetchError

logger = logging.getLogger(__name__)

DEFAULT_COVER_URL = "https://hvdb.me/WorkImages/RJ{rjcode}.jpg"


class CoverStore:
    """Downloads covers from a URL template and keeps them on disk.

    Args:
        cover_dir: Directory holding the images
        url_template: Cover URL with an ``{rjcode}`` placeholder
        client: Shared HTTP client (one is created and owned if omitted)
        timeout: Request timeout for an owned client
    """

    def __init__(
        self,
        cover_dir: Path,
        url_template: str = DEFAULT_COVER_URL,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.cover_dir = cover_dir
        self.url_template = url_template
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, pool=None), follow_redirects=True
        )

    def ensure_root(self) -> Path:
        """Create the cover directory if missing.

        Raises:
            AssetError: If the directory can't be created (an existing
                directory is fine)
        """
        try:
            self.cover_dir.mkdir()
        except FileExistsError:
            if not self.cover_dir.is_dir():
                raise AssetError(
                    f"Cover path exists and is not a directory: {self.cover_dir}",
                    path=self.cover_dir,
                ) from None
        except OSError as e:
            raise AssetError(
                f"Cannot create cover directory {self.cover_dir}: {e}", path=self.cover_dir
            ) from e
        return self.cover_dir

    def path_for(self, rjcode: str) -> Path:
        """File path for a cover."""
        return self.cover_dir / f"RJ{rjcode}.jpg"

    def url_for(self, rjcode: str) -> str:
        """Source URL for a cover."""
        return self.url_template.format(rjcode=rjcode, id=rjcode)

    async def download(self, rjcode: str) -> bool:
        """
        Fetch a cover and write it to disk.

        Args:
            rjcode: Zero-padded six digit code

        Returns:
            True if the cover was saved, False if the server had no image

        Raises:
            CoverFetchError: On transport errors
            AssetError: If the image can't be written
        """
        url = self.url_for(rjcode)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise CoverFetchError(
                f"Failed to download cover for RJ{rjcode}: {e}", rjcode=rjcode, url=url
            ) from e

        if response.status_code != 200:
            logger.warning(
                "No cover for RJ%s (HTTP %d from %s)", rjcode, response.status_code, url
            )
            return False

        await asyncio.to_thread(self._write, rjcode, response.content)
        return True

    def _write(self, rjcode: str, data: bytes) -> None:
        target = self.path_for(rjcode)
        partial = target.with_suffix(".jpg.part")
        try:
            partial.write_bytes(data)
            partial.replace(target)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise AssetError(f"Failed to write cover {target}: {e}", path=target) from e
        logger.debug("Saved cover %s (%d bytes)", target, len(data))

    async def delete(self, rjcode: str) -> bool:
        """
        Remove a cover from disk.

        Returns:
            True if a file was removed, False if there was none

        Raises:
            AssetError: If the file exists but can't be removed
        """
        return await asyncio.to_thread(self._unlink, rjcode)

    def _unlink(self, rjcode: str) -> bool:
        target = self.path_for(rjcode)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug("No cover to delete at %s", target)
            return False
        except OSError as e:
            raise AssetError(f"Failed to delete cover {target}: {e}", path=target) from e
        return True

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
