"""Pure text cleaning and normalization functions."""

from __future__ import annotations

import re
from typing import Final


MAX_CONTENT_LENGTH: Final[int] = 1500
ELLIPSIS: Final[str] = "..."

SENTENCE_TERMINATORS: Final[str] = "。.！!？?"

_LINE_ENDING_RE = re.compile(r"\r\n?")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0e-\x1f\x7f-\x9f]")
_HORIZONTAL_WS_RE = re.compile(r"[^\S\n]+")
_EXCESS_BLANK_LINES_RE = re.compile(r"\n{3,}")

# PDF extraction noise, applied line by line
_NOISE_LINE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d+$"),
    re.compile(r"^(?:第\s*\d+\s*页|page\s*\d+)$", re.I),
    re.compile(r"^[.,;:!?。，；：！？]$"),
)
_REPEATED_SYMBOL_RE = re.compile(r"([^\w\s])\1{3,}")

_LATIN_SENTENCE_GAP_RE = re.compile(r"([.!?])([A-Z])")
_CJK_PARAGRAPH_BREAK_RE = re.compile(r"([。！？])\s*([A-Z一-鿿])")
_BULLET_RE = re.compile(r"^[-•](?!\d)[ \t]*", re.M)
_NUMBERED_ITEM_RE = re.compile(r"^(\d+)\.(?!\d)[ \t]*(?=\S)", re.M)

# (pattern, replacement): CJK punctuation takes no trailing space, Latin takes one
_PUNCTUATION_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"([，。！？；：])[ \t]+"), r"\1"),
    (re.compile(r"[ \t]+([,.!?;:])"), r"\1"),
    (re.compile(r",(?!\d)[ \t]*(?=\w)"), ", "),
    (re.compile(r"\.[ \t]+"), ". "),
    (re.compile(r"([!?;])[ \t]*(?=\w)"), r"\1 "),
    (re.compile(r":(?!\d)[ \t]*(?=\w)"), ": "),
)


def clean_text(text: object) -> str:
    """
    Canonicalize raw extracted text.

    Unifies line endings, strips control characters, collapses runs of
    horizontal whitespace to one space, trims every line and keeps at
    most one blank line between paragraphs. Idempotent.
    """
    if not isinstance(text, str) or not text:
        return ""
    s = _LINE_ENDING_RE.sub("\n", text)
    s = _CONTROL_CHARS_RE.sub("", s)
    s = _HORIZONTAL_WS_RE.sub(" ", s)
    s = "\n".join(line.strip() for line in s.split("\n"))
    s = _EXCESS_BLANK_LINES_RE.sub("\n\n", s)
    return s.strip()


def _is_noise_line(line: str) -> bool:
    if len(line) <= 3:
        return True
    return any(p.match(line) for p in _NOISE_LINE_PATTERNS)


def remove_common_noise(text: str) -> str:
    """Drop page numbers, running headers/footers and other short debris lines."""
    kept: list[str] = []
    for ln in text.split("\n"):
        raw = ln.strip()
        if not raw:
            kept.append("")
            continue
        if _is_noise_line(raw):
            continue
        kept.append(_REPEATED_SYMBOL_RE.sub(r"\1", raw))
    return _EXCESS_BLANK_LINES_RE.sub("\n\n", "\n".join(kept)).strip()


def normalize_paragraphs(text: str) -> str:
    """Space out run-together sentences, unify list markers and break CJK paragraphs."""
    s = _LATIN_SENTENCE_GAP_RE.sub(r"\1 \2", text)
    s = _BULLET_RE.sub("• ", s)
    s = _NUMBERED_ITEM_RE.sub(r"\1. ", s)
    return _CJK_PARAGRAPH_BREAK_RE.sub(r"\1\n\n\2", s)


def normalize_punctuation(text: str) -> str:
    s = text
    for pattern, repl in _PUNCTUATION_RULES:
        s = pattern.sub(repl, s)
    return s


def _last_index_of_any(s: str, chars: str) -> int:
    return max(s.rfind(ch) for ch in chars)


def truncate_content(text: str, max_length: int = MAX_CONTENT_LENGTH) -> str:
    """
    Cut text to max_length, preferring a sentence boundary.

    A sentence end past 80% of the limit is used as is; otherwise a comma or
    space past 90% of the limit, else a hard cut. Anything but a sentence
    boundary gets an ellipsis appended.
    """
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    sentence_end = _last_index_of_any(truncated, SENTENCE_TERMINATORS)
    if sentence_end > max_length * 0.8:
        return truncated[: sentence_end + 1]

    cut_point = _last_index_of_any(truncated, "，, ")
    if cut_point > max_length * 0.9:
        return truncated[:cut_point].rstrip() + ELLIPSIS
    return truncated + ELLIPSIS


def format_content(text: object) -> str:
    """
    Format a chunk of paper text for display.

    Pure function: clean -> strip noise -> paragraphs -> punctuation -> truncate.
    """
    formatted = clean_text(text)
    if not formatted:
        return ""
    formatted = remove_common_noise(formatted)
    formatted = normalize_paragraphs(formatted)
    formatted = normalize_punctuation(formatted).strip()
    return truncate_content(formatted, MAX_CONTENT_LENGTH)
