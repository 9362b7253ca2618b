"""Data models for paperseg."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Paper:
    """A PDF with its canonical extracted text."""
    pdf_path: Path
    title: str
    text: str


@dataclass(frozen=True)
class AbstractCandidate:
    """A possible abstract found by one heading pattern."""
    text: str
    source: str
    is_valid: bool
    quality_score: int


@dataclass(frozen=True)
class QualityReport:
    """Heuristic usability rating of a piece of text (0-100)."""
    score: int
    issues: list[str] = field(default_factory=list)
    word_count: int = 0
    unique_word_count: int = 0
    sentence_count: int = 0
    chinese_ratio: float = 0.0
    english_ratio: float = 0.0


@dataclass(frozen=True)
class SegmentedPaper:
    """Abstract plus the eight ordered content segments of one paper."""
    paper: Paper
    abstract: str
    segments: list[str]
    keywords: list[str]
    quality: QualityReport
