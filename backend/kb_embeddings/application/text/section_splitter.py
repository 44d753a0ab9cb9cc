"""Heading-aware sectioning of HTML documents.

Only ``<h2>`` and ``<h3>`` delimit sections; ``<h1>`` is the document title
and stays inside whatever section it falls in.
"""

import re
from dataclasses import dataclass

from kb_embeddings.application.text.html_text import html_to_plain_text

_SECTION_HEADING = re.compile(r"<h([23])[^>]*>([\s\S]*?)</h\1>", re.IGNORECASE)


@dataclass(frozen=True)
class Section:
    """A heading-delimited slice of a document.

    ``html_slice`` starts at the heading tag (when there is one) and runs up to
    the next section heading or the end of the document.
    """

    heading_level: int | None
    heading_text: str | None
    html_slice: str


def split_sections(html: str) -> list[Section]:
    """Partition ``html`` into ordered sections.

    Concatenating the ``html_slice`` of every returned section reproduces the
    input exactly.
    """
    matches = list(_SECTION_HEADING.finditer(html))
    if not matches:
        return [Section(heading_level=None, heading_text=None, html_slice=html)]

    sections: list[Section] = []
    if matches[0].start() > 0:
        sections.append(
            Section(heading_level=None, heading_text=None, html_slice=html[: matches[0].start()])
        )

    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(html)
        sections.append(
            Section(
                heading_level=int(match.group(1)),
                heading_text=html_to_plain_text(match.group(2)),
                html_slice=html[match.start() : end],
            )
        )
    return sections
