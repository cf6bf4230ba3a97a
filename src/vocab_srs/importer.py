"""Bulk import of word lists into the deck, and deck export."""
import csv
import json
import logging
from pathlib import Path

from vocab_srs.models import LexicalEntry

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".json", ".yaml", ".yml")


def parse_csv(text: str) -> list[LexicalEntry]:
    """Parse a word-list CSV with columns ``id,word,pinyin,definition``.

    The first row is a header. Rows without a word or a definition are
    skipped; a definition may itself contain commas.
    """
    entries = []
    rows = csv.reader(text.strip().splitlines())
    next(rows, None)
    for row in rows:
        if len(row) < 4:
            continue
        word = row[1].strip()
        pinyin = row[2].strip()
        definition = ",".join(row[3:]).strip()
        if word and definition:
            entries.append(LexicalEntry(simplified=word, pinyin=pinyin, definitions=[definition]))
    return entries


def _entries_from_records(records) -> list[LexicalEntry]:
    if isinstance(records, dict):
        records = records.get("entries", [])
    if not isinstance(records, list):
        raise ValueError("Expected a list of entries")
    entries = []
    for record in records:
        if isinstance(record, dict) and record.get("simplified"):
            entries.append(LexicalEntry.from_dict(record))
        else:
            logger.debug("Skipping record without a headword: %r", record)
    return entries


def read_entries(file_path: str) -> list[LexicalEntry]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".csv":
        return parse_csv(path.read_text(encoding="utf-8-sig"))
    elif suffix == ".json":
        return _entries_from_records(json.loads(path.read_text(encoding="utf-8")))
    elif suffix in (".yaml", ".yml"):
        import yaml
        return _entries_from_records(yaml.safe_load(path.read_text(encoding="utf-8")) or [])
    raise ValueError(f"Unsupported file type {suffix!r}; expected one of {', '.join(SUPPORTED_SUFFIXES)}")


def import_file(store, file_path: str) -> dict:
    """Add every entry in a word-list file to the deck. Words already in the deck are skipped."""
    entries = read_entries(file_path)
    added = skipped = 0
    for entry in entries:
        if store.find_by_item(entry) is not None:
            skipped += 1
            continue
        store.add(entry)
        added += 1
    logger.info("Imported %s: %d added, %d skipped", file_path, added, skipped)
    return {"filename": Path(file_path).name, "added": added, "skipped": skipped}


def export_deck(store, file_path: str) -> int:
    """Write the deck as a JSON array of card records. Returns the card count."""
    cards = store.list()
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps([c.to_dict() for c in cards], ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return len(cards)
