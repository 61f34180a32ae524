# aria_scout/crawler/link_extractor.py
"""
Link extraction, URL normalization and frontier filtering for the crawler.
"""
from __future__ import annotations

import re
from typing import Collection, Iterable, List
from urllib.parse import urljoin, urlparse, urlunparse

from bs4.element import Tag

from aria_scout.parser import PageSnapshot

__all__ = ["normalize_url", "extract_links", "is_crawlable", "filter_links", "SKIPPED_EXTENSIONS"]

SKIPPED_EXTENSIONS = ("pdf", "zip", "png", "jpg", "jpeg", "gif", "svg", "mp4", "mp3", "doc", "xls", "ppt")
_SKIPPED_RE = re.compile(r"\.(%s)$" % "|".join(SKIPPED_EXTENSIONS), re.IGNORECASE)


def normalize_url(url: str) -> str:
    """
    Normalize URL by lowercasing scheme and netloc, dropping the fragment and
    stripping a trailing slash.  Path and query are kept as they are.
    """
    parsed = urlparse(url.strip())
    path = parsed.path.rstrip("/")
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, ""))


def extract_links(snapshot: PageSnapshot) -> List[str]:
    """
    Absolute, normalized targets of every ``<a href>`` on the page, in
    document order.  Relative links resolve against ``<base href>`` when the
    page declares one.
    """
    base = snapshot.url
    base_tag = snapshot.soup.find("base", href=True)
    if isinstance(base_tag, Tag):
        base = urljoin(snapshot.url, str(base_tag["href"]).strip())

    links: List[str] = []
    for tag in snapshot.soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw:
            continue
        try:
            links.append(normalize_url(urljoin(base, raw)))
        except ValueError:
            # malformed, e.g. an unbalanced IPv6 bracket in the host
            continue
    return links


def is_crawlable(
    url: str,
    *,
    base_host: str,
    same_domain: bool = True,
    exclude_patterns: Collection[str] = (),
) -> bool:
    """Whether a normalized *url* may enter the frontier."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return False
    if same_domain and parsed.netloc != base_host.lower():
        return False
    if any(pattern in url for pattern in exclude_patterns):
        return False
    if _SKIPPED_RE.search(parsed.path):
        return False
    return True


def filter_links(
    links: Iterable[str],
    *,
    base_host: str,
    same_domain: bool = True,
    exclude_patterns: Collection[str] = (),
    seen: Collection[str] = (),
) -> List[str]:
    """Crawlable links not in *seen*, deduplicated, first occurrence kept."""
    out: List[str] = []
    taken = set(seen)
    for link in links:
        if link in taken:
            continue
        if not is_crawlable(link, base_host=base_host, same_domain=same_domain, exclude_patterns=exclude_patterns):
            continue
        taken.add(link)
        out.append(link)
    return out
