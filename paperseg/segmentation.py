"""Split paper text into exactly eight ordered, length-capped segments."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from loguru import logger

from paperseg.content_analysis import NO_ABSTRACT_FOUND, extract_abstract
from paperseg.models import Paper, SegmentedPaper
from paperseg.text_analysis import assess_text_quality, extract_keywords
from paperseg.text_clean import (
    ELLIPSIS,
    MAX_CONTENT_LENGTH,
    SENTENCE_TERMINATORS,
    clean_text,
    format_content,
    truncate_content,
)

# Library modules stay quiet unless the CLI enables them
logger.disable("paperseg")


SEGMENT_COUNT: Final[int] = 8
ABSTRACT_PREFIX_LENGTH: Final[int] = 100
MIN_SPAN_LENGTH: Final[int] = 100
MIN_PARAGRAPH_LENGTH: Final[int] = 50
MIN_SPLITTABLE_LENGTH: Final[int] = 200
MIN_STRUCTURED_SEGMENTS: Final[int] = 3
MIN_NORMALIZABLE_SEGMENTS: Final[int] = 4
SENTENCE_CUT_RATIO: Final[float] = 0.7


@dataclass(frozen=True)
class SectionHeading:
    """Ways a canonical section can be introduced at the start of a line."""
    name: str
    ordinals: tuple[str, ...]
    titles: tuple[str, ...]


SECTION_HEADINGS: Final[tuple[SectionHeading, ...]] = (
    SectionHeading("introduction", ("1.", "一、", "I."), ("Introduction", "引言", "绪论", "前言")),
    SectionHeading("method", ("2.", "二、", "II."), ("Methodology", "Method", "研究方法", "方法")),
    SectionHeading("results", ("3.", "三、", "III."), ("Results", "Result", "实验结果", "结果")),
    SectionHeading("discussion", ("4.", "四、", "IV."), ("Discussion", "讨论", "分析")),
    SectionHeading("conclusion", ("5.", "五、", "V."), ("Conclusion", "结论", "总结")),
    SectionHeading("references", ("6.", "六、", "VI."), ("References", "Reference", "参考文献")),
)

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")


def _ordinal_regex(ordinal: str) -> str:
    escaped = re.escape(ordinal)
    if ordinal[0].isdigit():
        return escaped + r"(?!\d)"
    return escaped


def _compile_heading(heading: SectionHeading) -> re.Pattern[str]:
    ordinals = "|".join(_ordinal_regex(o) for o in heading.ordinals)
    titles = "|".join(re.escape(t) for t in heading.titles)
    return re.compile(r"^[ \t]*(?:" + ordinals + r"|(?i:" + titles + r"))", re.M)


_HEADING_REGEXES: Final[tuple[tuple[str, re.Pattern[str]], ...]] = tuple(
    (h.name, _compile_heading(h)) for h in SECTION_HEADINGS
)


def _find_section_starts(text: str) -> list[int]:
    """First line-start position of each canonical section, sorted."""
    positions: list[int] = []
    for name, regex in _HEADING_REGEXES:
        m = regex.search(text)
        if m:
            logger.debug(f"Section '{name}' found at offset {m.start()}")
            positions.append(m.start())
    return sorted(positions)


def _whitespace_blind_regex(text: str) -> re.Pattern[str] | None:
    chars = [re.escape(ch) for ch in text if not ch.isspace()]
    if not chars:
        return None
    return re.compile(r"\s*".join(chars), re.I)


def remove_abstract(full_text: str, abstract: str) -> str:
    """
    Cut the abstract out of the full text.

    The first 100 chars of the abstract are located case-insensitively and
    len(abstract) chars are removed from the hit. When formatting changed
    the abstract's whitespace, the whole abstract is matched ignoring
    whitespace instead and exactly the matched region is removed.
    """
    if not abstract or abstract == NO_ABSTRACT_FOUND:
        return full_text

    prefix = abstract[:ABSTRACT_PREFIX_LENGTH].lower()
    start = full_text.lower().find(prefix)
    if start != -1:
        return full_text[:start] + full_text[start + len(abstract):]

    whole = _whitespace_blind_regex(abstract.removesuffix(ELLIPSIS))
    m = whole.search(full_text) if whole else None
    if m:
        return full_text[:m.start()] + full_text[m.end():]

    logger.debug("Abstract not located in full text; keeping text unmodified")
    return full_text


def segment_by_structure(text: str) -> list[str]:
    """
    Cut text at canonical section headings.

    Falls back to paragraph packing when fewer than three spans of useful
    length come out.
    """
    starts = _find_section_starts(text)
    segments: list[str] = []
    for i, pos in enumerate(starts):
        start = 0 if i == 0 else pos
        end = starts[i + 1] if i + 1 < len(starts) else len(text)
        span = text[start:end].strip()
        if len(span) > MIN_SPAN_LENGTH:
            segments.append(format_content(span))

    if len(segments) < MIN_STRUCTURED_SEGMENTS:
        return segment_by_paragraphs(text)
    return segments


def segment_by_paragraphs(text: str) -> list[str]:
    """
    Greedily pack consecutive paragraphs into segments of about len(text)/8.

    Preserves paragraph boundaries to avoid breaking mid-thought.
    """
    paras = [p.strip() for p in _PARAGRAPH_SPLIT_RE.split(text)]
    paras = [p for p in paras if len(p) >= MIN_PARAGRAPH_LENGTH]
    target_length = len(text) // SEGMENT_COUNT

    segments: list[str] = []
    cur = ""
    for p in paras:
        if len(cur) + len(p) > target_length and len(cur) > MIN_SPAN_LENGTH:
            segments.append(format_content(cur.strip()))
            cur = p
        else:
            cur = f"{cur}\n\n{p}" if cur else p

    if len(cur.strip()) > MIN_SPAN_LENGTH:
        segments.append(format_content(cur.strip()))
    return segments


def _split_point(segment: str) -> int:
    """First CJK full stop, else Latin period, at or after the midpoint."""
    mid = len(segment) // 2
    for terminator in ("。", "."):
        idx = segment.find(terminator, mid)
        if idx != -1:
            return idx + 1
    return mid


def normalize_segments(segments: list[str], target_count: int = SEGMENT_COUNT) -> list[str]:
    """
    Merge or split segments until there are exactly target_count.

    Extra segments are folded into the last one; missing ones come from
    halving the longest segment, or empty placeholders once nothing is
    longer than 200 chars.
    """
    if len(segments) == target_count:
        return list(segments)

    if len(segments) > target_count:
        result = list(segments[: target_count - 1])
        tail = "\n\n".join(segments[target_count - 1:])
        result.append(truncate_content(tail, MAX_CONTENT_LENGTH))
        return result

    result = list(segments)
    while len(result) < target_count:
        longest_index = max(range(len(result)), key=lambda i: len(result[i]), default=-1)
        if longest_index == -1 or len(result[longest_index]) <= MIN_SPLITTABLE_LENGTH:
            result.append("")
            continue
        long_segment = result[longest_index]
        cut = _split_point(long_segment)
        result[longest_index] = long_segment[:cut].strip()
        result.append(long_segment[cut:].strip())
    return result[:target_count]


def segment_evenly(text: str, parts: int = SEGMENT_COUNT) -> list[str]:
    """
    Slice text into `parts` roughly equal pieces, ending early on a sentence.

    A slice ends at its last sentence terminator when that falls past 70% of
    the nominal length; the next slice resumes right after it, so nothing is
    dropped between slices. Always returns exactly `parts` items.
    """
    cleaned = clean_text(text)
    segment_length = len(cleaned) // parts
    segments: list[str] = []
    cursor = 0

    for i in range(parts):
        end = len(cleaned) if i == parts - 1 else max(cursor, (i + 1) * segment_length)
        piece = cleaned[cursor:end]
        if i < parts - 1 and piece:
            last_end = max(piece.rfind(ch) for ch in SENTENCE_TERMINATORS)
            if last_end >= segment_length * SENTENCE_CUT_RATIO:
                piece = piece[: last_end + 1]
        cursor += len(piece)

        piece = piece.strip()
        if piece:
            segments.append(format_content(piece))

    while len(segments) < parts:
        segments.append("")
    return segments


def segment_content(full_text: object, abstract_content: object = None) -> list[str]:
    """
    Split a paper minus its abstract into exactly SEGMENT_COUNT segments.

    Section headings are tried first, then paragraph packing; with fewer
    than four pieces from those, the text is sliced evenly instead.
    """
    if not isinstance(full_text, str) or not full_text:
        return [""] * SEGMENT_COUNT

    abstract = abstract_content if isinstance(abstract_content, str) else ""
    remaining = remove_abstract(full_text, abstract)

    structured = segment_by_structure(remaining)
    if len(structured) >= MIN_NORMALIZABLE_SEGMENTS:
        logger.debug(f"Normalizing {len(structured)} structural segments to {SEGMENT_COUNT}")
        return normalize_segments(structured, SEGMENT_COUNT)

    logger.debug("Too little structure; slicing text evenly")
    return segment_evenly(remaining, SEGMENT_COUNT)


def analyze_paper(paper: Paper, keyword_count: int = 5) -> SegmentedPaper:
    """
    Run the full pipeline over one paper's canonical text.

    Returns: SegmentedPaper with abstract, eight segments, keywords and quality.
    """
    abstract = extract_abstract(paper.text)
    segments = segment_content(paper.text, abstract)
    return SegmentedPaper(
        paper=paper,
        abstract=abstract,
        segments=segments,
        keywords=extract_keywords(paper.text, keyword_count),
        quality=assess_text_quality(paper.text),
    )
