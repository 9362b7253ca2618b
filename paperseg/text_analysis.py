"""Lightweight lexical analysis: keywords, similarity and text quality."""

from __future__ import annotations

import re
from collections import Counter
from typing import Final

from paperseg.models import QualityReport


# Single letters are already dropped by the length filter, so they are not listed.
STOP_WORDS: Final[frozenset[str]] = frozenset({
    # English
    "the", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were", "be", "been", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should",
    "may", "might", "must", "can", "this", "that", "these", "those",
    # Chinese
    "的", "了", "在", "是", "我", "有", "和", "就", "不", "人", "都", "一",
    "一个", "上", "也", "很", "到", "说", "要", "去", "你", "会", "着", "没有",
    "看", "好", "自己", "这", "那", "他", "她", "它", "们", "这个", "那个",
    "什么", "怎么", "为什么", "因为", "所以", "但是", "如果", "虽然", "然而",
})

_NON_WORD_RE = re.compile(r"[^\w\s一-鿿]")
_DIGITS_RE = re.compile(r"^\d+$")
_SENTENCE_SPLIT_RE = re.compile(r"[。.!?！？]")
_CHINESE_CHAR_RE = re.compile(r"[一-鿿]")
_ENGLISH_CHAR_RE = re.compile(r"[a-zA-Z]")
_WHITESPACE_RE = re.compile(r"\s")

MIN_TEXT_LENGTH: Final[int] = 50
MAX_TEXT_LENGTH: Final[int] = 5000
MIN_SENTENCE_LENGTH: Final[int] = 10


def is_stop_word(word: str) -> bool:
    return word.lower() in STOP_WORDS


def _tokenize(text: str) -> list[str]:
    return _NON_WORD_RE.sub(" ", text.lower()).split()


def extract_words(text: str, min_length: int = 2) -> list[str]:
    """Lower-cased tokens of at least min_length chars, stop words removed."""
    return [w for w in _tokenize(text) if len(w) >= min_length and not is_stop_word(w)]


def split_sentences(text: str) -> list[str]:
    """Sentence fragments longer than MIN_SENTENCE_LENGTH after trimming."""
    return [s for s in _SENTENCE_SPLIT_RE.split(text) if len(s.strip()) > MIN_SENTENCE_LENGTH]


def extract_keywords(text: object, count: int = 5) -> list[str]:
    """
    Return the `count` most frequent content words, most frequent first.

    Ties keep first-seen order.
    """
    if not isinstance(text, str) or not text:
        return []
    words = [w for w in extract_words(text) if not _DIGITS_RE.match(w)]
    return [w for w, _ in Counter(words).most_common(count)]


def calculate_similarity(text1: object, text2: object) -> float:
    """Jaccard similarity of the non-stop-word token sets of two texts."""
    if not isinstance(text1, str) or not isinstance(text2, str) or not text1 or not text2:
        return 0.0
    words1 = set(extract_words(text1, min_length=1))
    words2 = set(extract_words(text2, min_length=1))
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def assess_text_quality(text: object) -> QualityReport:
    """
    Score text usability from 100 down, recording one issue per defect.

    Penalties: too short (-30) or too long (-10), fewer than two sentences
    (-20), too few CJK/Latin characters (-25), heavy word repetition (-20).
    """
    if not isinstance(text, str) or not text:
        return QualityReport(score=0, issues=["text is empty or invalid"])

    issues: list[str] = []
    score = 100

    if len(text) < MIN_TEXT_LENGTH:
        issues.append("text is too short")
        score -= 30
    elif len(text) > MAX_TEXT_LENGTH:
        issues.append("text is too long")
        score -= 10

    sentences = split_sentences(text)
    if len(sentences) < 2:
        issues.append("too few sentences")
        score -= 20

    chinese_chars = len(_CHINESE_CHAR_RE.findall(text))
    english_chars = len(_ENGLISH_CHAR_RE.findall(text))
    total_chars = len(_WHITESPACE_RE.sub("", text))
    chinese_ratio = chinese_chars / total_chars if total_chars else 0.0
    english_ratio = english_chars / total_chars if total_chars else 0.0

    if total_chars and chinese_ratio < 0.1 and english_ratio < 0.3:
        issues.append("too few meaningful characters")
        score -= 25

    words = extract_words(text)
    unique_words = set(words)
    if words and 1 - len(unique_words) / len(words) > 0.7:
        issues.append("too much repeated content")
        score -= 20

    return QualityReport(
        score=max(0, score),
        issues=issues,
        word_count=len(words),
        unique_word_count=len(unique_words),
        sentence_count=len(sentences),
        chinese_ratio=chinese_ratio,
        english_ratio=english_ratio,
    )
