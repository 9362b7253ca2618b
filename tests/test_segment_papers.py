import json
from pathlib import Path

import pytest
from loguru import logger

import segment_papers
from paperseg.cache import PaperCache
from paperseg.models import Paper, QualityReport, SegmentedPaper
from paperseg.segmentation import segment_content
from paperseg.settings import clear_settings_cache


def _result() -> SegmentedPaper:
    return SegmentedPaper(
        paper=Paper(pdf_path=Path("papers/demo.pdf"), title="Demo Paper", text="..."),
        abstract="The abstract.",
        segments=[f"Segment {i}" for i in range(1, 8)] + [""],
        keywords=["segment", "paper"],
        quality=QualityReport(score=80, issues=["too few sentences"]),
    )


def test_build_markdown():
    md = segment_papers.build_markdown([_result()])
    assert "## Demo Paper" in md
    assert "- [Demo Paper](#demo-paper)" in md
    assert "- **Keywords**: segment, paper" in md
    assert "### Abstract\n\nThe abstract." in md
    assert "### Part 8\n\n_(empty)_" in md
    assert md.endswith("\n")


def test_build_json():
    data = json.loads(segment_papers.build_json([_result()]))
    assert data[0]["title"] == "Demo Paper"
    assert len(data[0]["segments"]) == 8
    assert data[0]["quality"] == {"score": 80, "issues": ["too few sentences"]}


def test_load_papers_reports_failures(tmp_path, capsys):
    (tmp_path / "broken.pdf").write_bytes(b"not a pdf")
    papers = segment_papers.load_papers(tmp_path)
    assert papers == []
    assert "[ERROR] extract failed for broken.pdf" in capsys.readouterr().out


def test_main_writes_report(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    (tmp_path / "papers").mkdir()
    out = tmp_path / "report.json"
    assert segment_papers.main(["--no-cache", "--format", "json", "--out", str(out)]) == 0
    assert json.loads(out.read_text(encoding="utf-8")) == []


def test_main_requires_papers_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    with pytest.raises(SystemExit):
        segment_papers.main(["--papers-dir", str(tmp_path / "missing")])


def test_page_cap_change_forces_reextraction(tmp_path, monkeypatch):
    (tmp_path / "demo.pdf").write_bytes(b"%PDF-1.4 fake")
    calls = []

    def fake_extract(pdf, max_pages=None):
        calls.append(max_pages)
        return Paper(pdf_path=pdf, title="Demo", text="x" * 600)

    monkeypatch.setattr(segment_papers, "extract_paper_from_pdf", fake_extract)
    cache = PaperCache(tmp_path / "cache.json")
    segment_papers.load_papers(tmp_path, max_pages=2, cache=cache)
    segment_papers.load_papers(tmp_path, max_pages=2, cache=cache)
    segment_papers.load_papers(tmp_path, cache=cache)
    assert calls == [2, None]


def test_configure_logging_enables_library_messages(monkeypatch):
    written = []
    monkeypatch.setattr(segment_papers.tqdm, "write", lambda s, end="\n", **kw: written.append(s))
    monkeypatch.setenv("PAPERSEG_LOG_LEVEL", "debug")
    segment_papers._configure_logging()
    try:
        segment_content("short", "")
    finally:
        logger.remove()
        logger.disable("paperseg")
    assert any(
        m.startswith("[DEBUG] paperseg.segmentation: Too little structure") for m in written
    )
