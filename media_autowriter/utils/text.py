"""Text helpers for assembling article records."""

import html
import re
import time
from typing import Dict, List

_HEADING_RE = re.compile(r"<(h[23])[^>]*>(.*?)</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

ELLIPSIS = "..."
CHARS_PER_MINUTE = 500


def truncate_with_ellipsis(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, ending in ``...`` when cut."""
    text = text.strip()
    if len(text) <= max_length:
        return text
    return text[: max_length - len(ELLIPSIS)] + ELLIPSIS


def strip_tags(content: str) -> str:
    """Remove HTML tags and collapse whitespace."""
    text = html.unescape(_TAG_RE.sub(" ", content or ""))
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_single_line(text: str) -> str:
    """First non-empty line of a model answer without wrapping quotes or brackets."""
    for line in (text or "").splitlines():
        line = line.strip()
        if line:
            return line.strip("\"'`「」『』【】 ").strip()
    return ""


def slugify(value: str, max_length: int = 60) -> str:
    """Lowercase ASCII slug: ``[a-z0-9]`` runs joined by single hyphens."""
    slug = re.sub(r"[^a-z0-9-]+", "-", (value or "").lower())
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug[:max_length].rstrip("-")


def fallback_slug(value: str) -> str:
    """Local slug of ``value``, or a timestamped one when nothing ASCII is left."""
    return slugify(value, max_length=30) or f"article-{int(time.time() * 1000)}"


def build_table_of_contents(content: str) -> List[Dict[str, object]]:
    """Extract ``h2``/``h3`` headings in document order."""
    toc: List[Dict[str, object]] = []
    for index, match in enumerate(_HEADING_RE.finditer(content or "")):
        toc.append(
            {
                "id": f"heading-{index}",
                "level": int(match.group(1)[1]),
                "text": strip_tags(match.group(2)),
            }
        )
    return toc


def calculate_reading_time(content: str) -> int:
    """Reading time in minutes at 500 characters per minute, minimum one."""
    char_count = len(_TAG_RE.sub("", content or ""))
    return max(1, -(-char_count // CHARS_PER_MINUTE))
