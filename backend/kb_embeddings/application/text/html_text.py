"""HTML → plain text conversion used for chunking and full-document embeddings."""

import re

from bs4 import BeautifulSoup, NavigableString

from kb_embeddings.application.text.normalizer import normalize

_HTML_TAG = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)
_H1 = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)
_LINE_INDENT = re.compile(r"\n[^\S\n]+")

_SKIPPED_TAGS = ("script", "style", "img", "noscript")

# Blocks that start a new paragraph (blank line) vs. a new line.
_PARAGRAPH_TAGS = (
    "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "blockquote", "pre", "table",
    "section", "article", "header", "footer", "figure",
)
_LINE_TAGS = ("div", "li", "tr", "dt", "dd")


def is_html(content: str) -> bool:
    """True when the content contains at least one HTML tag."""
    return bool(_HTML_TAG.search(content))


def html_to_plain_text(html: str) -> str:
    """Convert markup to normalized plain text.

    Script, style and image elements are dropped entirely. Link text is kept;
    the URL is appended in brackets unless it merely repeats the visible text.
    Headings are kept as their own plain lines (no case changes).
    """
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup.find_all(_SKIPPED_TAGS):
        tag.decompose()

    for link in soup.find_all("a"):
        text = link.get_text()
        href = (link.get("href") or "").strip()
        if href and href != text.strip() and not href.startswith("#"):
            link.replace_with(NavigableString(f"{text} [{href}]"))
        else:
            link.replace_with(NavigableString(text))

    for br in soup.find_all("br"):
        br.replace_with(NavigableString("\n"))

    for tag in soup.find_all(_PARAGRAPH_TAGS):
        tag.insert_before(NavigableString("\n\n"))
        tag.insert_after(NavigableString("\n\n"))

    for tag in soup.find_all(_LINE_TAGS):
        tag.insert_before(NavigableString("\n"))
        tag.insert_after(NavigableString("\n"))

    text = soup.get_text()
    text = _LINE_INDENT.sub("\n", text)
    return normalize(text)


def extract_title_from_html(html: str) -> str | None:
    """Return the text of the first ``<h1>``, if any."""
    match = _H1.search(html)
    if match and match.group(1):
        title = html_to_plain_text(match.group(1))
        return title or None
    return None
