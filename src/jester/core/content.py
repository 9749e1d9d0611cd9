"""Content table: trigger words, canned reactions and fallback texts.

Loaded once from YAML (``jester/data/content.yml`` unless
``content.path`` points elsewhere) and shared by the classifier and the
content services, so every trigger word and fallback lives in one place.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

import yaml

from jester.core.logging import logger

DEFAULT_CONTENT_PATH = Path(__file__).resolve().parent.parent / "data" / "content.yml"

TRIGGER_CATEGORIES = ("game", "joke", "weather", "horoscope")


class ContentError(ValueError):
    """The content table is malformed."""


@dataclass(frozen=True)
class Reaction:
    """A special keyword table mapped to one canned response."""
    key: str
    words: FrozenSet[str]
    response: str


@dataclass(frozen=True)
class ZodiacSign:
    sign: str
    api_name: str
    emoji: str
    fallback: str

    @property
    def title(self) -> str:
        return self.sign[:1].upper() + self.sign[1:]


@dataclass(frozen=True)
class ContentTable:
    """Immutable view of the content YAML."""
    triggers: Dict[str, FrozenSet[str]]
    reactions: Tuple[Reaction, ...]
    zodiac: Tuple[ZodiacSign, ...]
    fallback_jokes: Tuple[str, ...]
    ai_templates: Tuple[Tuple[str, str], ...]

    def trigger_words(self, category: str) -> FrozenSet[str]:
        return self.triggers.get(category, frozenset())

    @property
    def zodiac_signs(self) -> List[str]:
        return [z.sign for z in self.zodiac]

    def zodiac_sign(self, sign: str) -> Optional[ZodiacSign]:
        for z in self.zodiac:
            if z.sign == sign:
                return z
        return None


def _words(raw, where: str) -> FrozenSet[str]:
    if not isinstance(raw, list):
        raise ContentError(f"{where} must be a list of words")
    return frozenset(str(w).strip().lower() for w in raw if str(w).strip())


def _check_disjoint(named_sets: List[Tuple[str, FrozenSet[str]]]) -> None:
    seen: Dict[str, str] = {}
    for name, words in named_sets:
        for word in words:
            if word in seen:
                raise ContentError(f"Trigger word '{word}' is in both '{seen[word]}' and '{name}'")
            seen[word] = name


def parse_content(data: dict) -> ContentTable:
    """Build a ContentTable from already-parsed YAML data."""
    if not isinstance(data, dict):
        raise ContentError("Content table must be a mapping")

    raw_triggers = data.get("triggers") or {}
    triggers = {
        category: _words(raw_triggers.get(category, []), f"triggers.{category}")
        for category in TRIGGER_CATEGORIES
    }

    reactions = tuple(
        Reaction(
            key=str(item["key"]),
            words=_words(item.get("words", []), f"reactions.{item['key']}"),
            response=str(item["response"]),
        )
        for item in data.get("reactions") or []
    )

    zodiac = tuple(
        ZodiacSign(
            sign=str(item["sign"]).strip().lower(),
            api_name=str(item["api_name"]).strip().lower(),
            emoji=str(item.get("emoji", "⭐")),
            fallback=str(item["fallback"]),
        )
        for item in data.get("zodiac") or []
    )
    if not zodiac:
        raise ContentError("At least one zodiac sign is required")

    fallback_jokes = tuple(str(j) for j in data.get("fallback_jokes") or [])
    if not fallback_jokes:
        raise ContentError("At least one fallback joke is required")

    ai_templates = tuple(
        (str(item["phrase"]).lower(), str(item["template"]))
        for item in data.get("ai_templates") or []
    )

    named_sets = [(c, triggers[c]) for c in TRIGGER_CATEGORIES]
    named_sets.append(("zodiac", frozenset(z.sign for z in zodiac)))
    named_sets.extend((f"reaction:{r.key}", r.words) for r in reactions)
    _check_disjoint(named_sets)

    return ContentTable(
        triggers=triggers,
        reactions=reactions,
        zodiac=zodiac,
        fallback_jokes=fallback_jokes,
        ai_templates=ai_templates,
    )


def load_content(path: Optional[Path] = None) -> ContentTable:
    """Load the content table from YAML."""
    content_path = Path(path) if path else DEFAULT_CONTENT_PATH
    with open(content_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    table = parse_content(data)
    logger.info(
        f"Loaded content table from {content_path}: "
        f"{sum(len(w) for w in table.triggers.values())} triggers, "
        f"{len(table.reactions)} reactions, {len(table.zodiac)} signs"
    )
    return table
