from .normalizer import normalize
from .html_text import extract_title_from_html, html_to_plain_text, is_html
from .section_splitter import Section, split_sections
from .chunk_builder import build_chunks, chunk_content

__all__ = [
    "normalize",
    "extract_title_from_html",
    "html_to_plain_text",
    "is_html",
    "Section",
    "split_sections",
    "build_chunks",
    "chunk_content",
]
