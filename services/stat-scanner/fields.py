"""Label-anchored field extraction from recognized profile text.

Each field owns an ordered list of rules. A rule is a pure function
``(text) -> value | None`` built from one regular expression; the first
rule whose value passes the field's sanity range wins. Out-of-range
matches are dropped silently and the next rule is tried: a missing value
is preferred over a wrong one.

Trainer level is deliberately never extracted. It is curated by the user
and an OCR misread would reset it.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable

from models import ExtractedFields

logger = logging.getLogger(__name__)

MAX_COLLECTION_ENTRIES = 2000

# Integer capture that may not be the prefix of a decimal, a distance or a date
_INT = r"([\d,]+)(?![\d,])(?!\.\d)(?!\s*km)(?!\s*/)"
_DECIMAL_KM = r"([\d,]+\.?\d*)\s*km"

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs and trim."""
    return _WHITESPACE.sub(" ", text or "").strip()


def parse_int(captured: str) -> int | None:
    digits = captured.replace(",", "")
    if not digits.isdecimal():
        return None
    try:
        return int(digits)
    except ValueError:
        return None


def parse_decimal(captured: str) -> float | None:
    cleaned = captured.replace(",", "").rstrip(".")
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_literal(captured: str) -> str | None:
    return captured or None


@dataclass(frozen=True)
class FieldRule:
    """One label-anchored pattern for a field."""

    name: str
    pattern: re.Pattern
    parse: Callable[[str], object]

    def __call__(self, text: str):
        match = self.pattern.search(text)
        if match is None:
            return None
        return self.parse(match.group(1))


def _rule(name: str, pattern: str, parse: Callable[[str], object], flags: int = re.IGNORECASE) -> FieldRule:
    return FieldRule(name=name, pattern=re.compile(pattern, flags), parse=parse)


@dataclass(frozen=True)
class FieldSpec:
    field: str
    rules: tuple[FieldRule, ...]
    accepts: Callable[[object], bool]


FIELD_SPECS: tuple[FieldSpec, ...] = (
    FieldSpec(
        field="display_name",
        rules=(
            _rule("name_before_ampersand_at_start", r"^([A-Za-z0-9_]+)\s*&", parse_literal, 0),
            _rule("name_before_ampersand", r"([A-Za-z0-9_]+)\s*&\s*[A-Za-z]", parse_literal, 0),
        ),
        accepts=lambda v: bool(v),
    ),
    FieldSpec(
        field="start_date",
        rules=(
            _rule("start_date_label", r"Start\s+Date[:\s]*(\d{1,2}/\d{1,2}/\d{4})", parse_literal),
        ),
        accepts=lambda v: bool(v),
    ),
    FieldSpec(
        field="distance_walked",
        rules=(
            _rule("distance_walked_label", r"Distance\s+Walked[:\s]*" + _DECIMAL_KM, parse_decimal),
            _rule("distance_label", r"Distance[:\s]+" + _DECIMAL_KM, parse_decimal),
            _rule("walked_label", r"Walked[:\s]+" + _DECIMAL_KM, parse_decimal),
            _rule("any_decimal_km", r"([\d,]+\.\d+)\s*km", parse_decimal),
        ),
        accepts=lambda v: 0 < v < 100000,
    ),
    FieldSpec(
        field="entities_caught",
        rules=(
            _rule("pokemon_caught_label", r"Pok[eé]mon\s+Caught[:\s]*" + _INT, parse_int),
            _rule("caught_label", r"Caught[:\s]*" + _INT, parse_int),
            _rule("collected_label", r"Collected[:\s]*" + _INT, parse_int),
            _rule("partial_mon_caught", r"mon\s+Caught[:\s]*" + _INT, parse_int),
        ),
        accepts=lambda v: 100 < v < 10000000,
    ),
    FieldSpec(
        field="checkpoints_visited",
        rules=(
            _rule("pokestops_visited_label", r"Pok[eé]\s?Stops?\s+Visited[:\s]*" + _INT, parse_int),
            _rule("stops_visited_label", r"Stops?\s+Visited[:\s]*" + _INT, parse_int),
            _rule("visited_label", r"Visited[:\s]*" + _INT, parse_int),
        ),
        accepts=lambda v: 100 < v < 10000000,
    ),
    FieldSpec(
        field="experience_total",
        rules=(
            _rule("total_xp_label", r"Total\s+XP[:\s]*" + _INT, parse_int),
            _rule("xp_label", r"(?:^|\s)XP[:\s]*" + _INT, parse_int),
        ),
        accepts=lambda v: v > 100000,
    ),
    FieldSpec(
        field="collection_entries",
        rules=(
            _rule("pokedex_entries_label", r"Pok[eé]dex\s+Entries[:\s]+" + _INT, parse_int),
            _rule("unique_pokedex_label", r"unique\s+pok[eé]dex[:\s]+" + _INT, parse_int),
            _rule("pokedex_label", r"Pok[eé]dex[:\s]+" + _INT, parse_int),
            _rule("dex_entries_label", r"Dex\s+Entries[:\s]+" + _INT, parse_int),
        ),
        accepts=lambda v: 0 < v <= MAX_COLLECTION_ENTRIES,
    ),
)

# Profile headers show the name in the first line or two
DISPLAY_NAME_WINDOW = 120


def extract_fields(raw_text: str, max_collection_entries: int | None = None) -> ExtractedFields:
    """Apply every field's rules to the normalized text.

    Never raises for text input; unrecoverable fields are left unset.
    """
    text = normalize_text(raw_text)
    values: dict[str, object] = {}

    for spec in FIELD_SPECS:
        haystack = text[:DISPLAY_NAME_WINDOW] if spec.field == "display_name" else text
        for rule in spec.rules:
            value = rule(haystack)
            if value is None or not spec.accepts(value):
                continue
            if (
                spec.field == "collection_entries"
                and max_collection_entries is not None
                and value > max_collection_entries
            ):
                logger.debug("collection_entries %s exceeds bound %d", value, max_collection_entries)
                continue
            values[spec.field] = value
            logger.debug("%s=%r via %s", spec.field, value, rule.name)
            break

    return ExtractedFields(**values)


def rules_for(field: str) -> tuple[FieldRule, ...]:
    for spec in FIELD_SPECS:
        if spec.field == field:
            return spec.rules
    raise KeyError(field)
