"""HTML to text conversion and link extraction.

The text keeps heading markers (``# ``, ``## ``, ...) on their own lines and a
blank line between paragraphs so the chunker can split on them.
"""

import logging
import re
from urllib.parse import urljoin, urldefrag, urlparse

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
PARAGRAPH_TAGS = ["p", "li", "blockquote", "pre", "table"]
BLOCK_TAGS = ["div", "section", "article", "header", "footer", "main", "aside", "nav", "ul", "ol", "tr"]

DESCRIPTION_META = [
    {"name": "description"},
    {"property": "og:description"},
    {"name": "twitter:description"},
]


def html_to_text(html: str) -> str:
    """Convert HTML into heading-annotated plain text.

    Script and style content is dropped. Attribute text that often carries the
    only readable label on portfolio-style pages (image alt text, aria-label,
    data-name/data-title, empty-anchor titles, OpenGraph title/description) is
    surfaced into the text.

    Args:
        html: Raw HTML

    Returns:
        Plain text with markdown-style heading lines and blank-line paragraph breaks
    """
    soup = BeautifulSoup(html, "html.parser")

    for element in soup(["script", "style", "noscript", "template"]):
        element.decompose()

    preamble = []
    og_title = soup.find("meta", attrs={"property": "og:title"})
    if og_title and og_title.get("content"):
        preamble.append(f"# {og_title['content'].strip()}")
    og_description = soup.find("meta", attrs={"property": "og:description"})
    if og_description and og_description.get("content"):
        preamble.append(og_description["content"].strip())

    # Surface attribute labels before flattening
    for img in soup.find_all("img"):
        alt = (img.get("alt") or "").strip()
        img.replace_with(f" {alt} " if alt else " ")
    for tag in soup.find_all(attrs={"aria-label": True}):
        tag.insert(0, f" {tag['aria-label']} ")
    for attr in ("data-name", "data-title"):
        for tag in soup.find_all(attrs={attr: True}):
            tag.insert(0, f" {tag[attr]} ")
    for anchor in soup.find_all("a", title=True):
        if not anchor.get_text(strip=True):
            anchor.append(f" {anchor['title']} ")

    for tag_name in HEADING_TAGS:
        level = int(tag_name[1])
        for heading in soup.find_all(tag_name):
            title = " ".join(heading.get_text(" ", strip=True).split())
            heading.replace_with(f"\n\n{'#' * level} {title}\n\n" if title else "\n")

    for br in soup.find_all(["br", "hr"]):
        br.replace_with("\n")
    for tag in soup.find_all(PARAGRAPH_TAGS):
        tag.append("\n\n")
    for tag in soup.find_all(BLOCK_TAGS):
        tag.append("\n")

    raw = soup.get_text()
    if preamble:
        raw = "\n\n".join(preamble) + "\n\n" + raw
    return _normalize_whitespace(raw)


def _normalize_whitespace(text: str) -> str:
    """Collapse runs of spaces per line and runs of blank lines to a single blank line."""
    lines = [" ".join(line.split()) for line in text.splitlines()]
    out: list[str] = []
    for line in lines:
        if not line and (not out or not out[-1]):
            continue
        out.append(line)
    return "\n".join(out).strip()


def extract_links(html: str, base_url: str) -> list[str]:
    """Extract absolute http(s) links from anchors, in document order, without fragments.

    Args:
        html: Raw HTML
        base_url: URL the HTML was fetched from (for resolving relative links)

    Returns:
        Unique absolute URLs
    """
    soup = BeautifulSoup(html, "html.parser")
    seen: set[str] = set()
    links: list[str] = []

    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()

        # Skip non-http links
        if not href or href.startswith(("mailto:", "tel:", "#", "javascript:")):
            continue

        try:
            absolute, _fragment = urldefrag(urljoin(base_url, href))
        except ValueError:
            logger.debug(f"[EXTRACT] Ignoring invalid link: {href}")
            continue

        if urlparse(absolute).scheme not in ("http", "https"):
            continue
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)

    return links


def extract_description(html: str, max_chars: int = 300) -> str | None:
    """Best-effort short description of a page.

    Tries the description meta tags first, then the first substantial line of
    page text. Never raises: a page without usable text yields None.

    Args:
        html: Raw HTML
        max_chars: Maximum length of the returned description

    Returns:
        Description text or None
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
        for attrs in DESCRIPTION_META:
            meta = soup.find("meta", attrs=attrs)
            if meta and meta.get("content", "").strip():
                return _trim(meta["content"], max_chars)

        for line in html_to_text(html).splitlines():
            line = line.strip()
            if len(line) > 60 and not line.startswith("#"):
                return _trim(line, max_chars)
    except Exception as e:
        logger.debug(f"[EXTRACT] Description extraction failed: {e}")
    return None


def _trim(text: str, max_chars: int) -> str:
    text = re.sub(r"\s+", " ", text).strip()
    if len(text) > max_chars:
        return text[: max_chars - 1].rstrip() + "…"
    return text
