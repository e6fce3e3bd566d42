"""Basic HTML text extraction."""

from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup

# Elements whose text never belongs in the extracted content.
NON_CONTENT_TAGS = ("script", "style", "noscript", "template")


class HTMLExtractor:
    """Turns an HTML document into plain text, title first."""

    def __init__(self, *, max_chars: Optional[int] = None) -> None:
        self.max_chars = max_chars

    def extract(self, data: bytes) -> str:
        soup = BeautifulSoup(data, "html.parser")
        for tag in soup.find_all(list(NON_CONTENT_TAGS)):
            tag.decompose()

        parts: List[str] = []
        title = soup.title.string.strip() if soup.title and soup.title.string else ""
        if title:
            parts.append(title)
            soup.title.decompose()

        body = soup.body or soup
        text = body.get_text(separator="\n", strip=True)
        if text:
            parts.append(text)

        content = "\n".join(parts)
        if self.max_chars is not None:
            content = content[: self.max_chars]
        return content


__all__ = ["HTMLExtractor", "NON_CONTENT_TAGS"]
