"""
web.py

Title / thumbnail / duration lookup for an arbitrary web page, used to
pre-fill manual entries.

Only public http(s) hosts are fetched: localhost, *.local and private or
loopback IPv4 literals are refused before any request is made.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

import requests

from scenevault.errors import NetworkError, ValidationError
from scenevault.logger import get_logger

logger = get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120 Safari/537.36"
)
ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

_IPV4 = re.compile(r"^\d+\.\d+\.\d+\.\d+$")
_TITLE_TAG = re.compile(r"<title[^>]*>([^<]*)</title>", re.IGNORECASE)


@dataclass(frozen=True)
class UrlMetadata:
    title: str
    image: str
    duration_seconds: Optional[int]
    final_url: str


def is_safe_hostname(hostname: str) -> bool:
    h = (hostname or "").lower()
    if not h or h == "localhost" or h.endswith(".local"):
        return False

    if _IPV4.match(h):
        parts = [int(p) for p in h.split(".")]
        if any(n > 255 for n in parts):
            return False
        a, b = parts[0], parts[1]
        if a in (0, 10, 127):
            return False
        if a == 192 and b == 168:
            return False
        if a == 172 and 16 <= b <= 31:
            return False

    return True


def pick_meta(page: str, prop: str) -> str:
    pattern = re.compile(
        r"<meta[^>]+(?:property|name)=[\"']"
        + re.escape(prop)
        + r"[\"'][^>]+content=[\"']([^\"']+)[\"'][^>]*>",
        re.IGNORECASE,
    )
    m = pattern.search(page)
    return html.unescape(m.group(1).strip()) if m else ""


def pick_title_tag(page: str) -> str:
    m = _TITLE_TAG.search(page)
    return html.unescape(m.group(1).strip()) if m else ""


def parse_metadata(page: str, final_url: str) -> UrlMetadata:
    title = (
        pick_meta(page, "og:title")
        or pick_meta(page, "twitter:title")
        or pick_title_tag(page)
    )
    image = pick_meta(page, "og:image") or pick_meta(page, "twitter:image")

    raw_duration = pick_meta(page, "og:video:duration") or pick_meta(
        page, "music:duration"
    )
    duration = int(raw_duration) if raw_duration.isdigit() else None

    return UrlMetadata(
        title=title, image=image, duration_seconds=duration, final_url=final_url
    )


def fetch_url_metadata(
    url: str,
    *,
    timeout: int = 30,
    session: Optional[requests.Session] = None,
) -> UrlMetadata:
    if not url or not url.strip():
        raise ValidationError("Missing required parameter: url")

    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https"):
        raise ValidationError("Only http/https URLs are allowed", detail=url)
    if not is_safe_hostname(parts.hostname or ""):
        raise ValidationError("Blocked hostname", detail=url)

    http = session or requests.Session()
    try:
        resp = http.get(
            url.strip(),
            headers={"User-Agent": USER_AGENT, "Accept": ACCEPT},
            timeout=timeout,
            allow_redirects=True,
        )
    except requests.RequestException as e:
        raise NetworkError("Failed to fetch page.", detail=str(e)) from e

    if not resp.ok:
        raise NetworkError(f"Fetch failed ({resp.status_code})", detail=url)

    content_type = (resp.headers.get("content-type") or "").lower()
    if "text/html" not in content_type:
        raise ValidationError("Unsupported content type", detail=content_type)

    meta = parse_metadata(resp.text, resp.url or url)
    logger.debug(f"Metadata for {url}: title={meta.title!r}")
    return meta
