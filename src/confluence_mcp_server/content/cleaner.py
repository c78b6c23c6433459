"""
Content Cleaning

Plain-text helpers applied to wiki bodies before they reach the LLM.

- ``extract_text_content`` turns storage-format markup into flat text.
- ``storage_format_to_markdown`` is a best-effort, line-level rendering of
  already-stripped text. It cannot recover the original markup structure.
- ``optimize_for_ai`` tidies and bounds text for list-style tool results.
"""

from __future__ import annotations

import re
from typing import Final

OPTIMIZED_MAX_CHARS: Final[int] = 2000
TRUNCATION_MARKER: Final[str] = " ... [truncated]"

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_INLINE_BULLET_RE = re.compile(r"\s*[•·◦▪]\s+")
_LINE_BULLET_RE = re.compile(r"^\s*[*•·◦▪]\s+")
_PAREN_NUMBER_RE = re.compile(r"^(\s*)(\d+)\)\s+")
_BARE_URL_RE = re.compile(r"(?<![<(\[])\b(https?://[^\s<>()\]]+[^\s<>()\].,;:!?])")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_SPACE_RUN_RE = re.compile(r"[ \t]{2,}")


def extract_text_content(content: str) -> str:
    """
    Strip every tag and collapse whitespace.

    Each tag becomes a single space so adjacent block elements do not glue
    words together.
    """
    if not content:
        return ""
    text = _TAG_RE.sub(" ", content)
    return _WHITESPACE_RE.sub(" ", text).strip()


def storage_format_to_markdown(text: str) -> str:
    """
    Render tag-stripped text as lightweight Markdown.

    Parameters
    ----------
    text : str
        Plain text as produced by ``extract_text_content``.

    Returns
    -------
    str
        Text with list markers, numbered items and bare URLs rewritten.
    """
    if not text:
        return ""

    # Flattened bodies keep bullet glyphs inline; give each item its own line.
    text = _INLINE_BULLET_RE.sub("\n• ", text)

    lines = []
    for line in text.replace("\r\n", "\n").split("\n"):
        line = _LINE_BULLET_RE.sub("- ", line)
        line = _PAREN_NUMBER_RE.sub(r"\1\2. ", line)
        line = _BARE_URL_RE.sub(r"<\1>", line)
        lines.append(line.rstrip())

    markdown = "\n".join(lines).strip("\n")
    return _BLANK_RUN_RE.sub("\n\n", markdown)


def optimize_for_ai(text: str, max_chars: int = OPTIMIZED_MAX_CHARS) -> str:
    """
    Tidy whitespace and bound the length of text handed to the LLM.

    Truncation happens on a word boundary and appends ``TRUNCATION_MARKER``.
    """
    if not text:
        return ""

    lines = [_SPACE_RUN_RE.sub(" ", line).rstrip() for line in text.split("\n")]
    cleaned = _BLANK_RUN_RE.sub("\n\n", "\n".join(lines)).strip()

    if len(cleaned) <= max_chars:
        return cleaned

    cut = cleaned[:max_chars]
    boundary = cut.rfind(" ")
    if boundary > max_chars // 2:
        cut = cut[:boundary]
    return cut.rstrip() + TRUNCATION_MARKER
