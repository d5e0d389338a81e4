"""Read-only word catalog loaded from a vocabulary JSON file."""
import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from vocabmaster.models.quiz_models import WordPoolEntry

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when the vocabulary file is missing or malformed."""


def unit_id_from_name(name: str) -> str:
    """Derive a unit id from its display name ("Starter Chapter" -> "starter")."""
    unit_id = re.sub(r"\s+", "", name.strip().lower())
    if unit_id.endswith("chapter") and unit_id != "chapter":
        unit_id = unit_id[: -len("chapter")]
    return unit_id


class WordCatalog:
    """Immutable catalog of words grouped by unit.

    The source JSON maps unit names to lists of ``{"word": ..., "meaning": ...}``
    entries. Word ids are ``"<unit_id>-<index>"`` so they stay stable as long
    as the file keeps its order.
    """

    def __init__(self, units: Dict[str, List[WordPoolEntry]], unit_names: Optional[Dict[str, str]] = None):
        self._units = units
        self._unit_names = unit_names or {unit_id: unit_id for unit_id in units}
        self._by_id = {word.word_id: word for words in units.values() for word in words}

    @classmethod
    def from_dict(cls, data: dict) -> "WordCatalog":
        """Build a catalog from already parsed vocabulary data."""
        if not isinstance(data, dict):
            raise CatalogError("Vocabulary data must be an object keyed by unit name")

        units: Dict[str, List[WordPoolEntry]] = {}
        unit_names: Dict[str, str] = {}
        for unit_name, entries in data.items():
            if not isinstance(entries, list):
                raise CatalogError(f"Unit {unit_name!r} must contain a list of words")
            unit_id = unit_id_from_name(unit_name)
            words = []
            for index, entry in enumerate(entries):
                try:
                    term = entry["word"].strip()
                    meaning = str(entry.get("meaning", "")).strip()
                except (AttributeError, KeyError, TypeError) as e:
                    raise CatalogError(f"Invalid entry {index} in unit {unit_name!r}") from e
                words.append(WordPoolEntry(
                    word_id=f"{unit_id}-{index}",
                    term=term,
                    unit_id=unit_id,
                    definition=meaning,
                ))
            units[unit_id] = words
            unit_names[unit_id] = unit_name
        return cls(units, unit_names)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "WordCatalog":
        """Load a catalog from a JSON file."""
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise CatalogError(f"Vocabulary file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise CatalogError(f"Vocabulary file is not valid JSON: {path}") from e

        catalog = cls.from_dict(data)
        logger.info(f"Loaded {len(catalog)} words in {len(catalog.units())} units from {path}")
        return catalog

    def __len__(self) -> int:
        return len(self._by_id)

    def units(self) -> Dict[str, str]:
        """Unit ids mapped to their display names."""
        return dict(self._unit_names)

    def get_unit_words(self, unit_id: str) -> List[WordPoolEntry]:
        """Words of a unit in catalog order, empty for unknown units."""
        return list(self._units.get(unit_id, []))

    def get_word(self, word_id: str) -> Optional[WordPoolEntry]:
        """Get a word by its id."""
        return self._by_id.get(word_id)
