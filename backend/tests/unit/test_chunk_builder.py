"""Unit tests for chunk packing and document-level chunking."""

import pytest

from kb_embeddings.application.text import build_chunks, chunk_content, html_to_plain_text


def _letters(n: int) -> str:
    return "".join(chr(ord("a") + i % 26) for i in range(n))


def test_empty_text_yields_no_chunks():
    assert build_chunks("", None, 50, 10) == []
    assert build_chunks("   \n ", "Heading", 50, 10) == []


def test_text_within_budget_is_one_chunk():
    assert build_chunks("short text", "Heading", 50, 10) == ["short text"]


def test_two_paragraphs_over_budget_split_in_two():
    text = "A" * 40 + "\n\n" + "B" * 40
    assert build_chunks(text, None, 50, 10) == ["A" * 40, "B" * 40]


def test_long_paragraph_is_windowed_with_overlap():
    text = _letters(120)
    chunks = build_chunks(text, None, 50, 10)

    assert len(chunks) == 3
    assert all(len(c) <= 50 for c in chunks)
    for left, right in zip(chunks, chunks[1:]):
        assert left[-10:] == right[:10]
    assert chunks[0] + chunks[1][10:] + chunks[2][10:] == text


def test_heading_is_prefixed_to_every_chunk_and_not_duplicated():
    text = "Intro\n\n" + "x" * 30 + "\n\n" + "y" * 30
    chunks = build_chunks(text, "Intro", 45, 10)

    assert chunks == ["Intro\n\n" + "x" * 30, "Intro\n\n" + "y" * 30]
    assert all(len(c) <= 45 for c in chunks)


def test_buffered_paragraphs_survive_an_oversize_paragraph():
    text = "short\n\n" + "z" * 100
    chunks = build_chunks(text, None, 50, 10)

    assert chunks[0] == "short"
    assert chunks[1:] == ["z" * 50, "z" * 50, "z" * 20]


def test_heading_longer_than_budget_is_not_prefixed():
    heading = "H" * 60
    text = heading + "\n\n" + "p" * 40 + "\n\n" + "q" * 40
    chunks = build_chunks(text, heading, 50, 10)
    assert chunks == ["p" * 40, "q" * 40]


def test_overlap_not_smaller_than_budget_still_terminates():
    chunks = build_chunks("w" * 30, None, 10, 10)
    assert all(len(c) <= 10 for c in chunks)
    assert len(chunks) == 21


def test_chunk_content_html_follows_sections_in_order():
    html = "<h2>Alpha</h2><p>one</p><h2>Beta</h2><p>two</p>"
    assert chunk_content(html, 4500, 680) == ["Alpha\n\none", "Beta\n\ntwo"]


def test_chunk_content_html_prefixes_section_heading_on_split():
    html = "<h2>Alpha</h2><p>" + "a" * 40 + "</p><p>" + "b" * 40 + "</p>"
    chunks = chunk_content(html, 60, 10)
    assert chunks == ["Alpha\n\n" + "a" * 40, "Alpha\n\n" + "b" * 40]


def test_chunk_content_plain_transcript_is_normalized():
    assert chunk_content("hello world  \n\n\n\nbye", 4500, 680) == ["hello world\n\nbye"]


def test_chunk_content_empty_document():
    assert chunk_content("", 4500, 680) == []


# ── Budget and coverage over varied sections ──


def _paragraph(tag: str, length: int) -> str:
    """Hyphen-joined numbered tokens; any 10-character slice occurs once."""
    return "-".join(f"{tag}{i:04d}" for i in range(length // 6 + 2))[:length]


def _bodies(chunks: list[str], heading: str | None, max_chars: int) -> list[str]:
    prefix = f"{heading}\n\n" if heading and len(heading) + 2 < max_chars else ""
    return [c[len(prefix):] if prefix and c.startswith(prefix) else c for c in chunks]


PACKING_CASES = [
    # max_chars, overlap_chars, heading, paragraph lengths
    (50, 10, None, [40, 40, 40]),
    (80, 15, "Setup", [10, 20, 30, 200, 5]),
    (60, 10, "Intro", [300]),
    (45, 44, None, [100, 3, 3]),
    (120, 30, "A long section heading", [90, 90, 10, 10, 10, 500]),
    (30, 10, "H" * 40, [25, 70]),
    (4500, 680, "Overview", [1200, 1200, 1200, 9000]),
]


@pytest.mark.parametrize(("max_chars", "overlap", "heading", "lengths"), PACKING_CASES)
def test_chunks_stay_within_budget_and_cover_every_paragraph_in_order(
    max_chars, overlap, heading, lengths
):
    paragraphs = [_paragraph(chr(ord("a") + i), n) for i, n in enumerate(lengths)]
    text = "\n\n".join([heading, *paragraphs] if heading else paragraphs)

    chunks = build_chunks(text, heading, max_chars, overlap)

    assert all(len(c) <= max_chars for c in chunks)
    bodies = _bodies(chunks, heading, max_chars)
    first_chunk = []
    for paragraph in paragraphs:
        covered: set[int] = set()
        holders: list[int] = []
        for position, body in enumerate(bodies):
            for piece in body.split("\n\n"):
                start = paragraph.find(piece) if piece else -1
                if start >= 0:
                    covered.update(range(start, start + len(piece)))
                    holders.append(position)
        assert covered == set(range(len(paragraph)))
        first_chunk.append(min(holders))
    assert first_chunk == sorted(first_chunk)


HTML_DOCUMENTS = [
    "<h1>Guide</h1><p>intro <a href='https://example.com/a'>link</a></p><h2>Setup</h2><p>steps</p>",
    "<h2>Alpha</h2><p>" + "alpha words " * 30 + "</p><h3>Beta</h3><ul><li>x</li><li>y</li></ul>",
    "<p>" + "preface " * 20 + "</p><h2>Only</h2><p>" + "body " * 50 + "</p>",
]


@pytest.mark.parametrize("html", HTML_DOCUMENTS)
@pytest.mark.parametrize("max_chars", [40, 120, 4500])
def test_chunk_content_respects_budget_for_html(html: str, max_chars: int):
    chunks = chunk_content(html, max_chars, 10)
    assert chunks
    assert all(0 < len(c) <= max_chars for c in chunks)


@pytest.mark.parametrize("html", HTML_DOCUMENTS)
def test_chunk_content_keeps_document_order_when_sections_fit(html: str):
    chunks = chunk_content(html, 4500, 680)
    words = [word for chunk in chunks for word in chunk.split()]
    assert words == html_to_plain_text(html).split()
