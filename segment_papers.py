#!/usr/bin/env python3
"""
Extract the abstract of each PDF in /papers and split the rest into eight parts.

Behavior:
- Extracts title + canonical text from each PDF (pdfminer.six).
- Finds the abstract, then segments the remaining text into 8 ordered parts.
- Adds keywords and a text quality score per paper.
- Caches extracted text in .paperseg/ to skip re-extraction of unchanged PDFs.

Usage:
  python segment_papers.py [--papers-dir papers] [--out output/PAPERS_SEGMENTS.md]
  python segment_papers.py --format json --out output/segments.json
  python segment_papers.py --no-cache  # Force re-extraction of all papers

Optional env vars:
  PAPERSEG_DEBUG_TRACE    -> print full tracebacks for failures
  PAPERSEG_LOG_LEVEL      -> loguru level for library diagnostics (default: WARNING)

Optional settings file (paperseg.json): keyword_count, max_pages, cache_file
"""

from __future__ import annotations

import argparse
import json
import os
import re
import traceback
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger
from tqdm import tqdm

from paperseg.cache import PaperCache, compute_pdf_hash
from paperseg.models import Paper, SegmentedPaper
from paperseg.pdf_extract import extract_paper_from_pdf
from paperseg.segmentation import analyze_paper
from paperseg.settings import load_settings

# Load environment variables from root .env if it exists
load_dotenv(Path(__file__).parent / ".env")


def _truthy_env(name: str) -> bool:
    v = os.environ.get(name, "").strip().lower()
    return v not in {"", "0", "false", "no", "off"}


def _configure_logging() -> None:
    """Route loguru through tqdm so messages don't tear progress bars."""
    logger.remove()
    logger.enable("paperseg")
    logger.add(
        lambda msg: tqdm.write(msg, end=""),
        level=os.environ.get("PAPERSEG_LOG_LEVEL", "WARNING").upper(),
        format="[{level}] {name}: {message}",
    )


def _format_exc(e: Exception) -> str:
    msg = str(e).strip()
    if msg:
        return f"{type(e).__name__}: {msg}"
    return type(e).__name__


def _report_error(stage: str, pdf: Path, e: Exception) -> None:
    tqdm.write(f"[ERROR] {stage} failed for {pdf.name}: {_format_exc(e)}")
    if _truthy_env("PAPERSEG_DEBUG_TRACE"):
        tqdm.write(traceback.format_exc())


def load_papers(
    papers_dir: Path,
    max_pages: int | None = None,
    cache: PaperCache | None = None
) -> list[Paper]:
    """
    Extract title + text from all PDFs in directory.
    Uses cache to avoid re-extracting unchanged PDFs.

    Returns: list of Paper objects with canonical text
    """
    pdfs = sorted(papers_dir.glob("*.pdf"))
    papers: list[Paper] = []
    failures = 0
    cached_count = 0
    new_extractions = 0

    for pdf in tqdm(pdfs, desc="Extracting PDFs"):
        pdf_hash = compute_pdf_hash(pdf) if cache else None
        if cache:
            cached_paper = cache.get_cached(pdf, pdf_hash, max_pages)
            if cached_paper:
                papers.append(cached_paper)
                cached_count += 1
                continue

        try:
            paper = extract_paper_from_pdf(pdf, max_pages=max_pages)
        except Exception as e:
            failures += 1
            _report_error("extract", pdf, e)
            continue

        if cache:
            cache.store(paper, pdf_hash, max_pages)
            new_extractions += 1

        if len(paper.text) < 500:
            tqdm.write(
                f"[WARN] Very little text extracted for {pdf.name} "
                f"(chars={len(paper.text)}). It may be scanned or protected."
            )
        papers.append(paper)

    if cache and new_extractions:
        cache.save()
        tqdm.write(f"[INFO] Cached text for {new_extractions} newly extracted papers")

    if cached_count:
        tqdm.write(f"[INFO] Using cached text for {cached_count} unchanged papers")
    if failures:
        tqdm.write(f"[WARN] Extraction failures: {failures}/{len(pdfs)} PDFs")

    return papers


def analyze_papers(papers: list[Paper], keyword_count: int = 5) -> list[SegmentedPaper]:
    """Find abstract and segments for every paper."""
    results: list[SegmentedPaper] = []
    failures = 0

    for paper in tqdm(papers, desc="Segmenting"):
        try:
            results.append(analyze_paper(paper, keyword_count=keyword_count))
        except Exception as e:
            failures += 1
            _report_error("segment", paper.pdf_path, e)

    if failures:
        tqdm.write(f"[WARN] Segmentation failures: {failures}/{len(papers)} PDFs")

    return results


def _anchor(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def build_markdown(results: list[SegmentedPaper]) -> str:
    """Build final markdown document from segmented papers."""
    now = datetime.now().strftime("%Y-%m-%d %H:%M")
    lines: list[str] = []

    lines.append("# Paper Segments")
    lines.append("")
    lines.append(f"_Generated: {now}_")
    lines.append("")

    # Index
    lines.append("## Index")
    lines.append("")
    for r in results:
        lines.append(f"- [{r.paper.title}](#{_anchor(r.paper.title)})")
    lines.append("")

    lines.append("---")
    lines.append("")
    for r in results:
        lines.append(f"## {r.paper.title}")
        lines.append("")
        lines.append(f"- **Source PDF**: `{r.paper.pdf_path.as_posix()}`")
        if r.keywords:
            lines.append(f"- **Keywords**: {', '.join(r.keywords)}")
        lines.append(f"- **Text quality**: {r.quality.score}/100")
        if r.quality.issues:
            lines.append(f"- **Issues**: {'; '.join(r.quality.issues)}")
        lines.append("")

        lines.append("### Abstract")
        lines.append("")
        lines.append(r.abstract)
        lines.append("")

        for idx, segment in enumerate(r.segments, start=1):
            lines.append(f"### Part {idx}")
            lines.append("")
            lines.append(segment or "_(empty)_")
            lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def build_json(results: list[SegmentedPaper]) -> str:
    """Serialize segmented papers as a JSON list."""
    payload = [
        {
            "title": r.paper.title,
            "source": r.paper.pdf_path.as_posix(),
            "abstract": r.abstract,
            "segments": r.segments,
            "keywords": r.keywords,
            "quality": {"score": r.quality.score, "issues": r.quality.issues},
        }
        for r in results
    ]
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    settings = load_settings()

    ap = argparse.ArgumentParser()
    ap.add_argument("--papers-dir", default="papers", help="Directory containing PDFs (default: papers)")
    ap.add_argument(
        "--out",
        default=None,
        help="Output path (default: output/PAPERS_SEGMENTS.md or .json)",
    )
    ap.add_argument("--format", choices=("md", "json"), default="md", help="Report format (default: md)")
    ap.add_argument(
        "--max-pages",
        type=int,
        default=settings["max_pages"],
        help="Limit pages per PDF (0 = all pages)",
    )
    ap.add_argument(
        "--keywords",
        type=int,
        default=settings["keyword_count"],
        help="Keywords to list per paper",
    )
    ap.add_argument(
        "--no-cache",
        action="store_true",
        help="Disable caching, re-extract text from all PDFs"
    )
    ap.add_argument(
        "--clear-cache",
        action="store_true",
        help="Clear cache before running"
    )
    args = ap.parse_args(argv)

    _configure_logging()

    papers_dir = Path(args.papers_dir)
    suffix = "json" if args.format == "json" else "md"
    out_path = Path(args.out) if args.out else Path(f"output/PAPERS_SEGMENTS.{suffix}")
    max_pages = None if args.max_pages == 0 else args.max_pages

    if not papers_dir.exists():
        raise SystemExit(f"papers dir not found: {papers_dir}")

    cache = None if args.no_cache else PaperCache(settings["cache_file"])
    if cache and args.clear_cache:
        cache.clear()
        cache.save()
        print("[INFO] Cache cleared")

    # Pipeline: load → segment → write
    papers = load_papers(papers_dir, max_pages=max_pages, cache=cache)
    results = analyze_papers(papers, keyword_count=args.keywords)

    report = build_json(results) if args.format == "json" else build_markdown(results)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(report, encoding="utf-8")
    print(f"Wrote: {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
