"""Abstract extraction: heading patterns first, paragraph heuristics as fallback."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Final, Iterator, Optional

from loguru import logger

from paperseg.models import AbstractCandidate
from paperseg.text_analysis import assess_text_quality, split_sentences
from paperseg.text_clean import ELLIPSIS, clean_text, format_content

# Library modules stay quiet unless the CLI enables them
logger.disable("paperseg")


NO_ABSTRACT_FOUND: Final[str] = "No abstract could be identified in this document."

MIN_ABSTRACT_LENGTH: Final[int] = 50
MAX_ABSTRACT_LENGTH: Final[int] = 2000

ABSTRACT_VOCABULARY: Final[tuple[str, ...]] = (
    "research", "study", "analysis", "method", "result", "conclusion",
    "研究", "分析", "方法", "结果", "结论", "目的", "基于", "提出",
)

# Numbered section start such as "1." or "12." but not "1.5"
_NUMBERED_SECTION: Final[str] = r"\d+\.(?!\d)"


@dataclass(frozen=True)
class AbstractPattern:
    """One row of the heading table: where an abstract starts and what ends it."""
    name: str
    heading: str
    stops: tuple[str, ...]


ABSTRACT_PATTERNS: Final[tuple[AbstractPattern, ...]] = (
    AbstractPattern(
        "english",
        r"abstract\s*[:：]",
        (r"keywords?", "introduction", "§", _NUMBERED_SECTION),
    ),
    AbstractPattern(
        "english-cjk-stops",
        r"abstract\s*[:：]",
        (r"key\s*words?", "引言", "绪论", "前言", "§", _NUMBERED_SECTION),
    ),
    AbstractPattern(
        "chinese",
        r"摘\s*要\s*[:：]",
        ("关键词", "引言", "绪论", "前言", "§", _NUMBERED_SECTION),
    ),
    AbstractPattern(
        "chinese-bracketed",
        r"【摘要】",
        ("【关键词】", "引言", "绪论", "前言", "§", _NUMBERED_SECTION),
    ),
    AbstractPattern(
        "generic",
        r"(?:abstract|摘要)\s*[:：]",
        ("关键词", r"keywords?", "引言", "introduction", "§", _NUMBERED_SECTION),
    ),
    AbstractPattern(
        "standalone-heading",
        r"(?:^|\n)[ \t]*abstract[ \t]*\n",
        (r"keywords?", "index terms", "ccs concepts", "introduction", "§", _NUMBERED_SECTION),
    ),
)

_TRAILING_KEYWORDS_RE = re.compile(
    r"(?:\n\s*(?:key\s*words?|关键词|【关键词】)|\s*(?:\bkey\s*words?|关键词)\s*[:：]|\s*【关键词】).*$",
    re.I | re.S,
)
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")


def _compile_pattern(pattern: AbstractPattern) -> re.Pattern[str]:
    stops = "|".join(pattern.stops)
    return re.compile(pattern.heading + r"\s*(.*?)(?=\n\s*(?:" + stops + r")|$)", re.I | re.S)


_COMPILED_PATTERNS: Final[tuple[tuple[str, re.Pattern[str]], ...]] = tuple(
    (p.name, _compile_pattern(p)) for p in ABSTRACT_PATTERNS
)


def _strip_trailing_keywords(body: str) -> str:
    return _TRAILING_KEYWORDS_RE.sub("", body).strip()


def validate_abstract(text: object) -> bool:
    """
    Check that text looks like a research abstract.

    Requires 50-2000 characters, at least two real sentences and a term
    from ABSTRACT_VOCABULARY.
    """
    if not isinstance(text, str):
        return False
    trimmed = text.strip()
    if not MIN_ABSTRACT_LENGTH <= len(trimmed) <= MAX_ABSTRACT_LENGTH:
        return False
    if len(split_sentences(trimmed)) < 2:
        return False
    lowered = trimmed.lower()
    return any(term in lowered for term in ABSTRACT_VOCABULARY)


def find_abstract_candidates(text: str) -> Iterator[AbstractCandidate]:
    """Yield every heading match in table order, then match order."""
    for name, regex in _COMPILED_PATTERNS:
        for m in regex.finditer(text):
            body = _strip_trailing_keywords(m.group(1))
            yield AbstractCandidate(
                text=body,
                source=name,
                is_valid=validate_abstract(body),
                quality_score=assess_text_quality(body).score,
            )


def _paragraphs(text: str, min_length: int = 100) -> list[str]:
    return [p.strip() for p in _PARAGRAPH_SPLIT_RE.split(text) if len(p.strip()) > min_length]


def _abstract_from_headings(text: str) -> Optional[str]:
    for candidate in find_abstract_candidates(text):
        if candidate.is_valid:
            logger.debug(
                f"Abstract matched by '{candidate.source}' pattern (quality={candidate.quality_score})"
            )
            return format_content(candidate.text)
    return None


def _abstract_from_paragraphs(text: str) -> Optional[str]:
    """Abstracts usually sit among the first few paragraphs."""
    for paragraph in _paragraphs(text)[:5]:
        if validate_abstract(paragraph):
            logger.debug("Abstract taken from a leading paragraph")
            return format_content(paragraph)
    return None


def _abstract_from_long_paragraph(text: str) -> Optional[str]:
    for paragraph in _paragraphs(text):
        if 200 < len(paragraph) < 1000:
            logger.debug("Abstract approximated by the first long paragraph")
            return format_content(paragraph[:500] + ELLIPSIS)
    return None


_ABSTRACT_STRATEGIES: Final[tuple[Callable[[str], Optional[str]], ...]] = (
    _abstract_from_headings,
    _abstract_from_paragraphs,
    _abstract_from_long_paragraph,
)


def extract_abstract(full_text: object) -> str:
    """
    Locate and format the abstract of a paper.

    Strategies are tried in order: heading patterns, validated leading
    paragraphs, then the first long paragraph cut to 500 chars. Never
    returns an empty string; NO_ABSTRACT_FOUND signals total failure.
    """
    text = clean_text(full_text)
    if not text:
        return NO_ABSTRACT_FOUND

    for strategy in _ABSTRACT_STRATEGIES:
        result = strategy(text)
        if result:
            return result

    logger.debug("No abstract found")
    return NO_ABSTRACT_FOUND
