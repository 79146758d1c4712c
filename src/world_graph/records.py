"""Journal records consumed by the world map."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Mapping


class Category(str, Enum):
    """Emotion attached to a journal entry.

    Declaration order doubles as the tie-break order when picking a
    node's dominant category.
    """

    SERENITY = "serenity"
    MELANCHOLY = "melancholy"
    ANXIETY = "anxiety"
    HOPE = "hope"
    WHIMSY = "whimsy"

    @classmethod
    def parse(cls, raw: Any) -> "Category":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.SERENITY


@dataclass(frozen=True)
class TaggedRecord:
    theme: str | None = None
    category: Category = Category.SERENITY
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))

    @property
    def has_theme(self) -> bool:
        return bool(self.theme)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TaggedRecord":
        if not isinstance(data, Mapping):
            raise ValueError(f"record must be a mapping, got {type(data).__name__}")
        theme = data.get("theme")
        if theme is not None and not isinstance(theme, str):
            raise ValueError(f"theme must be a string or null, got {type(theme).__name__}")
        tags = data.get("tags") or ()
        if not isinstance(tags, (list, tuple, set, frozenset)):
            raise ValueError(f"tags must be a list of strings, got {type(tags).__name__}")
        if not all(isinstance(tag, str) for tag in tags):
            raise ValueError("tags must contain only strings")
        return cls(
            theme=theme,
            category=Category.parse(data.get("category", Category.SERENITY)),
            tags=frozenset(tags),
        )


def records_from_payload(payload: Any) -> List[TaggedRecord]:
    """Accept either a bare list of records or ``{"records": [...]}``."""

    if isinstance(payload, Mapping):
        if "records" not in payload:
            raise KeyError("Missing key 'records' in payload")
        payload = payload["records"]
    if not isinstance(payload, list):
        raise ValueError("records payload must be a list")
    return [TaggedRecord.from_mapping(item) for item in payload]


def load_records(path: Path | str) -> List[TaggedRecord]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return records_from_payload(data)


def count_worlds(records: Iterable[TaggedRecord]) -> int:
    return len({record.theme for record in records if record.has_theme})


def has_enough_worlds(records: Iterable[TaggedRecord], minimum: int = 2) -> bool:
    """Whether the record set can support a meaningful map.

    Callers show an empty state instead of starting a simulation when this
    returns ``False``.
    """

    return count_worlds(records) >= minimum
