"""Plain text out of a resume file (PDF, DOCX or TXT).

The agent only needs the text to pull a years-of-experience figure when the
profile leaves it blank, so no layout is preserved.
"""
from __future__ import annotations

import re
import zipfile
from pathlib import Path
from xml.etree import ElementTree

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from naukri_agent.log import get_logger

log = get_logger(__name__)

_WORD_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
YEARS_RE = re.compile(r"(\d+)\s*\+?\s*(?:years?|yrs?)\b", re.I)


def extract_text(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".txt":
        return path.read_text(encoding="utf-8", errors="ignore")
    if suffix == ".docx":
        return _extract_docx(path)
    if suffix == ".pdf":
        return _extract_pdf(path)
    raise ValueError(f"Unsupported resume format: {suffix}")


def _fix_spacing(text: str) -> str:
    """Re-insert spaces when PDF extraction glues words together."""
    if not text or len(text) < 50 or text.count(" ") / len(text) > 0.08:
        return text
    fixed = re.sub(r"([a-z])([A-Z])", r"\1 \2", text)
    fixed = re.sub(r"([a-zA-Z])(\d)", r"\1 \2", fixed)
    return re.sub(r"(\d)([a-zA-Z])", r"\1 \2", fixed)


def _extract_pdf(path: Path) -> str:
    reader = PdfReader(str(path))
    return "\n".join(_fix_spacing(page.extract_text() or "") for page in reader.pages)


def _extract_docx(path: Path) -> str:
    texts: list[str] = []
    with zipfile.ZipFile(path) as zf:
        with zf.open("word/document.xml") as f:
            tree = ElementTree.parse(f)
    for para in tree.iter(f"{_WORD_NS}p"):
        parts = [node.text for node in para.iter(f"{_WORD_NS}t") if node.text]
        if parts:
            texts.append("".join(parts))
    return "\n".join(texts)


def years_from_text(text: str) -> str:
    """First "N years" / "N+ yrs" figure in ``text``, or ``""``."""
    m = YEARS_RE.search(text or "")
    return m.group(1) if m else ""


def load_resume_text(path: str | Path | None) -> str:
    """Best-effort text for the configured resume; empty when unreadable."""
    if not path:
        return ""
    p = Path(path).expanduser()
    if not p.is_file():
        log.warning("Resume not found at %s", p)
        return ""
    try:
        text = extract_text(p)
    except (ValueError, OSError, zipfile.BadZipFile, KeyError, PdfReadError) as exc:
        log.warning("Could not read resume %s: %s", p.name, exc)
        return ""
    log.info("Read %d characters from resume %s", len(text), p.name)
    return text
