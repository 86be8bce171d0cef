"""
Remote CSV source.

Google Sheets share links are rewritten to their CSV export URL before
fetching. Candidate URLs (direct, then any configured proxy templates) are
tried once each, in order; the first non-empty successful body wins.
"""

from __future__ import annotations

import re
from urllib.parse import quote

import requests

from salesboard import config
from salesboard.errors import FetchError
from salesboard.logger import get_logger

logger = get_logger(__name__)

_SHEETS_URL = re.compile(r"https://docs\.google\.com/spreadsheets/d/([a-zA-Z0-9_-]+)")
_GID = re.compile(r"[#&?]gid=([0-9]+)")


def to_csv_export_url(url: str) -> str:
    """
    Rewrite a Google Sheets share URL to its CSV export URL.

    "https://docs.google.com/spreadsheets/d/{id}/edit#gid=123" becomes
    "https://docs.google.com/spreadsheets/d/{id}/export?format=csv&gid=123";
    gid defaults to 0. Other URLs are returned unchanged.
    """
    match = _SHEETS_URL.search(url)
    if not match:
        return url
    gid_match = _GID.search(url)
    gid = gid_match.group(1) if gid_match else "0"
    return f"https://docs.google.com/spreadsheets/d/{match.group(1)}/export?format=csv&gid={gid}"


def candidate_urls(url: str, templates: list[str] | None = None) -> list[str]:
    csv_url = to_csv_export_url(url)
    quoted = quote(csv_url, safe="")
    candidates = []
    for template in templates or config.FETCH_PROXY_TEMPLATES:
        candidate = template.format(url=csv_url, quoted_url=quoted)
        if candidate not in candidates:
            candidates.append(candidate)
    return candidates


def fetch_text(url: str, timeout: float | None = None) -> str:
    """
    Fetch CSV text from a URL.

    Args:
        url: Share or download URL.
        timeout: Per-request timeout in seconds. If None, uses the configured default.

    Returns:
        Response body as text.

    Raises:
        FetchError: If every candidate URL fails or returns an empty body.
    """
    attempts: list[str] = []
    for candidate in candidate_urls(url):
        try:
            response = requests.get(
                candidate,
                timeout=timeout or config.FETCH_TIMEOUT_SECONDS,
                headers={"Accept": "text/csv,text/plain,*/*"},
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning(f"Fetch failed for {candidate}: {exc}")
            attempts.append(f"{candidate}: {exc}")
            continue

        if response.encoding is None or response.encoding.lower() == "iso-8859-1":
            # CSV exports are UTF-8 but often arrive without a charset
            response.encoding = "utf-8"
        text = response.text
        if not text.strip():
            logger.warning(f"Empty response from {candidate}")
            attempts.append(f"{candidate}: empty response")
            continue

        logger.info(f"Fetched {len(text)} characters from {candidate}")
        return text

    raise FetchError(
        "Could not fetch data from the URL. Check that the link is correct "
        "and the sheet is shared publicly.",
        attempts=attempts,
    )
