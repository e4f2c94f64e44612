"""Built-in catalog plus the user's overrides.

The words a quiz runs over come from two layers: the packaged catalog and a
user-owned overlay of added words and suppressed catalog words. The overlay
lives in a key-value store under two fixed keys and every change to it bumps
:attr:`VocabularyManager.generation`, which is what the merged-list cache is
keyed on.
"""

import io
import json
import logging
import os
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .config import settings
from .errors import ImportFormatError, InvalidVocabularyEntry, UnknownHeadword
from .models import VocabularyEntry, VocabularyListing

logger = logging.getLogger(__name__)

CATALOG_PATH = os.path.join(os.path.dirname(__file__), "data", "catalog.csv")
CATALOG_SEPARATOR = "|"

_HEADER_TOKENS = ("latijn", "latin")
_IMPORT_SPLIT = re.compile(r"[,;/]")


def load_catalog(path: str = CATALOG_PATH) -> List[VocabularyEntry]:
    df = pd.read_csv(path, encoding="utf-8", dtype=str, keep_default_na=False)
    if "word" not in df.columns or "translation" not in df.columns:
        raise ValueError(f"{path} needs 'word' and 'translation' columns")

    entries = []
    for record in df.to_dict("records"):
        answers = tuple(
            t.strip() for t in record["translation"].split(CATALOG_SEPARATOR) if t.strip()
        )
        if record["word"].strip() and answers:
            entries.append(VocabularyEntry(headword=record["word"].strip(), accepted_answers=answers))
    logger.info(f"Loaded {len(entries)} catalog words from {os.path.basename(path)}")
    return entries


def merge(
    base: Sequence[VocabularyEntry],
    suppressed: Iterable[str],
    custom: Dict[str, Sequence[str]],
) -> List[VocabularyEntry]:
    """Catalog minus suppressed words, with custom words overriding or appended."""
    suppressed = set(suppressed)
    merged: Dict[str, VocabularyEntry] = {}
    for entry in base:
        if entry.headword in suppressed or entry.headword in merged:
            continue
        merged[entry.headword] = entry
    for headword, answers in custom.items():
        merged[headword] = VocabularyEntry(headword=headword, accepted_answers=tuple(answers))
    return list(merged.values())


def split_translations(text: str, pattern=",") -> List[str]:
    parts = pattern.split(text) if hasattr(pattern, "split") else text.split(pattern)
    return [p.strip() for p in parts if p.strip()]


# --- Bulk import ---
def parse_import_rows(rows: Iterable[Sequence]) -> List[VocabularyEntry]:
    """Turn ``(headword, translations)`` rows into entries.

    A first row whose first cell mentions the language name is a header and is
    skipped. Only the second column holds translations, separated by commas,
    semicolons or slashes; further columns are ignored. Blank or incomplete
    rows are ignored.
    """
    entries = []
    for index, row in enumerate(rows):
        cells = ["" if cell is None else str(cell).strip() for cell in row]
        first = cells[0] if cells else ""
        if index == 0 and any(token in first.lower() for token in _HEADER_TOKENS):
            continue
        if len(cells) < 2 or not first:
            continue
        translations = split_translations(cells[1], _IMPORT_SPLIT)
        if translations:
            entries.append(VocabularyEntry(headword=first, accepted_answers=tuple(translations)))
    return entries


def read_import_csv(data: bytes) -> List[VocabularyEntry]:
    try:
        df = pd.read_csv(
            io.BytesIO(data),
            header=None,
            dtype=str,
            keep_default_na=False,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError:
        raise ImportFormatError("Het bestand is leeg")
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read vocabulary import: {e}")
        raise ImportFormatError("Kon het bestand niet lezen. Zorg dat het formaat correct is.")

    # Rows shorter than the first one come back as NaN
    df = df.fillna("")
    entries = parse_import_rows(df.itertuples(index=False, name=None))
    if not entries:
        raise ImportFormatError("Geen geldige woorden gevonden in het bestand")
    return entries


# --- Service Layer: Vocabulary Management ---
class VocabularyManager:
    """Manages the catalog and the user's additions and removals."""

    def __init__(self, store, catalog_path: str = CATALOG_PATH):
        self.store = store
        self.catalog_path = catalog_path
        self.catalog: List[VocabularyEntry] = []
        self.generation = 0
        self._cache: Optional[Tuple[int, List[VocabularyEntry]]] = None
        self.load_all()

    def load_all(self):
        self.catalog = load_catalog(self.catalog_path)
        self._bump()

    # --- Override layer ---
    def _read_json(self, key: str, default):
        raw = self.store.get(key)
        if raw is None:
            return default
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring corrupt value stored under {key}")
            return default
        if not isinstance(value, type(default)):
            logger.warning(f"Ignoring value of unexpected type stored under {key}")
            return default
        return value

    def _custom(self) -> Dict[str, List[str]]:
        return self._read_json(settings.CUSTOM_VOCAB_KEY, {})

    def _removed(self) -> List[str]:
        return self._read_json(settings.REMOVED_VOCAB_KEY, [])

    def _save(self, custom: Dict[str, List[str]], removed: List[str]):
        self.store.set(settings.CUSTOM_VOCAB_KEY, json.dumps(custom, ensure_ascii=False))
        self.store.set(settings.REMOVED_VOCAB_KEY, json.dumps(removed, ensure_ascii=False))
        self._bump()

    def _bump(self):
        self.generation += 1

    def _is_builtin(self, headword: str) -> bool:
        return any(entry.headword == headword for entry in self.catalog)

    # --- Reads ---
    def get_active_vocabulary(self) -> List[VocabularyEntry]:
        if self._cache is None or self._cache[0] != self.generation:
            self._cache = (self.generation, merge(self.catalog, self._removed(), self._custom()))
        return list(self._cache[1])

    def get_all_vocabulary(self) -> List[VocabularyListing]:
        custom = self._custom()
        return [
            VocabularyListing(
                headword=entry.headword,
                accepted_answers=list(entry.accepted_answers),
                is_custom=entry.headword in custom,
            )
            for entry in self.get_active_vocabulary()
        ]

    def get_removed(self) -> List[str]:
        return list(self._removed())

    def search(self, term: str) -> List[VocabularyListing]:
        needle = term.strip().lower()
        listings = self.get_all_vocabulary()
        if not needle:
            return listings
        return [
            item
            for item in listings
            if needle in item.headword.lower()
            or any(needle in t.lower() for t in item.accepted_answers)
        ]

    def counts(self) -> Dict[str, int]:
        listings = self.get_all_vocabulary()
        custom = sum(1 for item in listings if item.is_custom)
        return {"standard": len(listings) - custom, "custom": custom, "total": len(listings)}

    # --- Mutations ---
    def add_entry(self, headword: str, translations: Union[str, Sequence[str]]) -> VocabularyEntry:
        headword = (headword or "").strip()
        if isinstance(translations, str):
            answers = split_translations(translations)
        else:
            answers = [t.strip() for t in translations if t and t.strip()]
        if not headword or not answers:
            raise InvalidVocabularyEntry("Vul een woord en minimaal één vertaling in")

        custom = self._custom()
        removed = [h for h in self._removed() if h != headword]
        custom[headword] = answers
        self._save(custom, removed)
        logger.info(f"Added word {headword!r} ({len(answers)} translations)")
        return VocabularyEntry(headword=headword, accepted_answers=tuple(answers))

    def remove_entry(self, headword: str):
        custom = self._custom()
        removed = self._removed()
        was_custom = custom.pop(headword, None) is not None
        builtin_active = self._is_builtin(headword) and headword not in removed

        if not was_custom and not builtin_active:
            raise UnknownHeadword(headword)
        if builtin_active:
            removed.append(headword)
        self._save(custom, removed)
        logger.info(f"Removed word {headword!r}")

    def restore_entry(self, headword: str):
        removed = self._removed()
        if headword not in removed:
            raise UnknownHeadword(headword)
        removed.remove(headword)
        self._save(self._custom(), removed)
        logger.info(f"Restored catalog word {headword!r}")

    def import_entries(self, entries: Iterable[VocabularyEntry]) -> int:
        custom = self._custom()
        removed = self._removed()
        count = 0
        for entry in entries:
            if not entry.is_quizzable:
                continue
            custom[entry.headword] = [a for a in entry.accepted_answers if a.strip()]
            if entry.headword in removed:
                removed.remove(entry.headword)
            count += 1
        if count:
            self._save(custom, removed)
        logger.info(f"Imported {count} words")
        return count
