"""
HVDB scraper for work metadata.

HVDB serves no JSON API; the work details page is an edit form whose fields
hold the metadata:

- input#Name        - work title
- input#EngName     - English title (optional, kept in ``extra``)
- input#Circle      - circle name
- input#SFW         - checkbox, checked when the work is safe-for-work
- textarea#Tags     - comma separated tags
- textarea#CVs      - comma separated voice actors

Tag, voice actor and circle ids are derived from their names so the same
name always maps to the same row in the catalog.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any

import httpx
from bs4 import BeautifulSoup
from pydantic import ValidationError as PydanticValidationError

from rjsync.exceptions import MetadataSourceError
from rjsync.identifiers import format_rjcode
from rjsync.schemas.work import WorkMetadata

logger = logging.getLogger(__name__)

DEFAULT_METADATA_URL = "https://hvdb.me/Dashboard/WorkDetails/{id}"

USER_AGENT = "rjsync/0.1"


def name_to_id(name: str) -> int:
    """Stable positive 31-bit id for a tag/voice actor/circle name."""
    digest = hashlib.md5(name.strip().encode("utf-8"), usedforsecurity=False).hexdigest()
    return int(digest[:8], 16) & 0x7FFFFFFF or 1


def _split_names(raw: str) -> list[str]:
    """Split a comma separated field, dropping blanks and duplicates (order kept)."""
    seen: dict[str, None] = {}
    for part in raw.split(","):
        name = part.strip()
        if name:
            seen.setdefault(name, None)
    return list(seen)


def _field_value(soup: BeautifulSoup, element_id: str) -> str | None:
    """Value of an input or text of a textarea, None if the element is absent."""
    el = soup.find(id=element_id)
    if el is None:
        return None
    if el.name == "textarea":
        return el.get_text()
    value = el.get("value")
    return str(value) if value is not None else ""


def parse_work_details(html: str, work_id: int) -> dict[str, Any]:
    """
    Parse a work details page into a raw metadata payload.

    Args:
        html: Page body
        work_id: Numeric work id the page was requested for

    Returns:
        Payload dict suitable for WorkMetadata.from_payload()

    Raises:
        MetadataSourceError: If the page has no title field (unknown work or
            layout change)
    """
    soup = BeautifulSoup(html, "html.parser")

    title = _field_value(soup, "Name")
    if not title or not title.strip():
        raise MetadataSourceError(
            f"No work title found on details page for RJ{format_rjcode(work_id)}",
            work_id=work_id,
        )

    payload: dict[str, Any] = {"id": work_id, "title": title.strip()}

    circle = (_field_value(soup, "Circle") or "").strip()
    if circle:
        payload["circle"] = {"id": name_to_id(circle), "name": circle}

    # Unchecked or missing SFW box means the work is NSFW
    sfw = soup.find(id="SFW")
    payload["nsfw"] = not (sfw is not None and sfw.has_attr("checked"))

    payload["tags"] = [
        {"id": name_to_id(n), "name": n} for n in _split_names(_field_value(soup, "Tags") or "")
    ]
    payload["vas"] = [
        {"id": name_to_id(n), "name": n} for n in _split_names(_field_value(soup, "CVs") or "")
    ]

    eng_name = (_field_value(soup, "EngName") or "").strip()
    if eng_name:
        payload["eng_name"] = eng_name

    return payload


class HvdbClient:
    """Metadata source backed by HVDB work details pages.

    Can share an ``httpx.AsyncClient`` with the cover downloader; a client
    created here is closed by ``aclose()``.

    Example:
        async with HvdbClient() as hvdb:
            work = await hvdb.fetch(123456)
    """

    def __init__(
        self,
        url_template: str = DEFAULT_METADATA_URL,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.url_template = url_template
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, pool=None),
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    def url_for(self, work_id: int) -> str:
        """Details page URL for a work (``{id}`` and ``{rjcode}`` are zero-padded)."""
        rjcode = format_rjcode(work_id)
        return self.url_template.format(id=rjcode, rjcode=rjcode)

    async def fetch(self, work_id: int) -> WorkMetadata:
        """
        Fetch and parse metadata for one work.

        Args:
            work_id: Numeric work id

        Returns:
            WorkMetadata without ``dir`` set

        Raises:
            MetadataSourceError: On transport errors, non-200 responses, or
                unparseable pages
        """
        url = self.url_for(work_id)
        logger.debug("Fetching work details: %s", url)

        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise MetadataSourceError(
                f"Timeout fetching metadata for RJ{format_rjcode(work_id)}",
                work_id=work_id,
                url=url,
            ) from e
        except httpx.HTTPError as e:
            raise MetadataSourceError(
                f"HTTP error fetching metadata for RJ{format_rjcode(work_id)}: {e}",
                work_id=work_id,
                url=url,
            ) from e

        if response.status_code != 200:
            raise MetadataSourceError(
                f"HVDB returned {response.status_code} for RJ{format_rjcode(work_id)}",
                work_id=work_id,
                url=url,
                status_code=response.status_code,
            )

        payload = parse_work_details(response.text, work_id)
        try:
            return WorkMetadata.from_payload(payload)
        except PydanticValidationError as e:
            raise MetadataSourceError(
                f"Invalid metadata for RJ{format_rjcode(work_id)}: {e}",
                work_id=work_id,
                url=url,
            ) from None

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HvdbClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
