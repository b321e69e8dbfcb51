"""Text helpers shared by source adapters and the career page crawler."""

import html
import re

from bs4 import BeautifulSoup

# Location phrases that mark a posting as remote
REMOTE_PHRASES = ("remote", "work from home", "wfh", "anywhere", "distributed")

_WS_RE = re.compile(r"\s+")


def strip_html(content: str) -> str:
    """Reduce an HTML fragment to its visible text.

    Greenhouse returns entity-escaped HTML, so entities are unescaped before
    parsing. Script and style bodies are dropped.
    """
    soup = BeautifulSoup(html.unescape(content), "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return normalize_whitespace(soup.get_text(" ", strip=True))


def is_remote_location(location: str | None) -> bool:
    if not location:
        return False
    lowered = location.lower()
    return any(phrase in lowered for phrase in REMOTE_PHRASES)


def normalize_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()
