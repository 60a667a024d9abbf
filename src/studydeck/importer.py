"""Card import from batch text and question/answer files."""
import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from studydeck.cards import add_card, get_source_questions

logger = logging.getLogger(__name__)

STRUCTURED_SUFFIXES = (".json", ".yaml", ".yml")


def _preview(line: str) -> str:
    return line[:50] + ("..." if len(line) > 50 else "")


def parse_batch_text(text: str) -> tuple[list[tuple[str, str]], list[str]]:
    """Parse ``question:answer`` lines into card pairs.

    Blank lines are ignored and do not count toward line numbers. Only the
    first colon separates question from answer.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    pairs, errors = [], []
    for number, line in enumerate(lines, 1):
        if ":" not in line:
            errors.append(f'Line {number}: Missing colon (:) delimiter - "{_preview(line)}"')
            continue
        front, back = (part.strip() for part in line.split(":", 1))
        if not front or not back:
            errors.append(f'Line {number}: Question or answer is empty - "{_preview(line)}"')
            continue
        pairs.append((front, back))
    return pairs, errors


def parse_source_items(data) -> list[tuple[str, str]]:
    """Extract (question, answer) pairs from a list of mappings."""
    if isinstance(data, dict):
        data = data.get("flashcards", data.get("cards", []))
    pairs = []
    for item in data or []:
        if not isinstance(item, dict):
            continue
        question = str(item.get("question") or "").strip()
        answer = str(item.get("answer") or "").strip()
        if question and answer:
            pairs.append((question, answer))
    return pairs


def read_file_content(file_path: str) -> str:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md", ".json", ".yaml", ".yml"):
        return path.read_text()
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    elif suffix == ".docx":
        from docx import Document
        doc = Document(file_path)
        return "\n".join(p.text for p in doc.paragraphs)
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        html = path.read_text()
        return BeautifulSoup(html, "html.parser").get_text("\n")
    else:
        # Try reading as plain text
        return path.read_text()


def read_cards_from_file(file_path: str) -> tuple[list[tuple[str, str]], list[str]]:
    """Return (pairs, errors) for a file, choosing the parser by extension."""
    suffix = Path(file_path).suffix.lower()
    content = read_file_content(file_path)
    if suffix == ".json":
        return parse_source_items(json.loads(content)), []
    if suffix in (".yaml", ".yml"):
        import yaml
        return parse_source_items(yaml.safe_load(content)), []
    return parse_batch_text(content)


def import_pairs(db_path: str, pairs, today: Optional[date] = None) -> tuple[int, int]:
    """Add pairs as cards, skipping questions already imported. Returns (added, skipped)."""
    existing = get_source_questions(db_path)
    added = skipped = 0
    for front, back in pairs:
        if front in existing:
            skipped += 1
            continue
        add_card(db_path, front, back, today=today, source_question=front)
        existing.add(front)
        added += 1
    return added, skipped


def import_file(db_path: str, file_path: str, today: Optional[date] = None) -> dict:
    """Import cards from a file. Lines that fail to parse are reported, not raised."""
    pairs, errors = read_cards_from_file(file_path)
    added, skipped = import_pairs(db_path, pairs, today=today)
    logger.info("Imported %s: %d added, %d skipped, %d errors", file_path, added, skipped, len(errors))
    return {"filename": Path(file_path).name, "imported": added, "skipped": skipped, "errors": errors}
