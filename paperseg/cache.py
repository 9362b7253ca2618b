"""Extracted-text cache keyed by PDF content hash and page cap."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Final

from loguru import logger

from paperseg.models import Paper

# Library modules stay quiet unless the CLI enables them
logger.disable("paperseg")


DEFAULT_CACHE_DIR: Final[str] = ".paperseg"
DEFAULT_CACHE_FILE: Final[str] = f"{DEFAULT_CACHE_DIR}/cache.json"
CACHE_VERSION: Final[int] = 1


def compute_pdf_hash(pdf_path: Path) -> str:
    """Compute SHA-256 hash of PDF file content."""
    hasher = hashlib.sha256()
    with open(pdf_path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


class PaperCache:
    """
    Canonical text of each PDF, keyed by filename and checked by content hash.

    Schema:
    {
        "version": 1,
        "papers": {
            "filename.pdf": {"hash": "sha256...", "max_pages": 0, "title": "...", "text": "..."}
        }
    }

    Only text is stored: abstracts and segments are cheap to recompute.
    max_pages records the page cap of the extraction (0 = all pages), so text
    read under one cap is never served to a run with another.
    """

    def __init__(self, cache_path: Path | str = DEFAULT_CACHE_FILE):
        self.cache_path = Path(cache_path)
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if self.cache_path.exists():
            try:
                data = json.loads(self.cache_path.read_text(encoding="utf-8"))
                if isinstance(data, dict) and data.get("version") == CACHE_VERSION:
                    return data
                logger.debug(f"Ignoring cache with unexpected schema: {self.cache_path}")
            except (json.JSONDecodeError, OSError) as e:
                logger.debug(f"Failed to load cache {self.cache_path}: {e}")
        return {"version": CACHE_VERSION, "papers": {}}

    def save(self) -> None:
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        self.cache_path.write_text(
            json.dumps(self._data, indent=2, ensure_ascii=False),
            encoding="utf-8"
        )

    def get_cached(
        self,
        pdf_path: Path,
        pdf_hash: str | None = None,
        max_pages: int | None = None
    ) -> Paper | None:
        """Return the cached Paper if the PDF and page cap are unchanged, else None."""
        entry = self._data["papers"].get(pdf_path.name)
        if not entry:
            return None
        if entry.get("max_pages", 0) != (max_pages or 0):
            logger.debug(f"Cached text of {pdf_path.name} was read with another page cap")
            return None

        if pdf_hash is None:
            pdf_hash = compute_pdf_hash(pdf_path)
        if entry.get("hash") != pdf_hash:
            return None

        text = entry.get("text")
        if text is None:  # Empty string is valid (scanned PDFs)
            return None

        return Paper(pdf_path=pdf_path, title=entry.get("title", pdf_path.stem), text=text)

    def store(self, paper: Paper, pdf_hash: str | None = None, max_pages: int | None = None) -> None:
        if pdf_hash is None:
            pdf_hash = compute_pdf_hash(paper.pdf_path)

        self._data["papers"][paper.pdf_path.name] = {
            "hash": pdf_hash,
            "max_pages": max_pages or 0,
            "title": paper.title,
            "text": paper.text
        }

    def clear(self) -> None:
        self._data["papers"] = {}

