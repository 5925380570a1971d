"""Fallback assignment of unlabeled numbers to stat fields.

Runs only for fields the label rules left unset. Labels on a photographed
profile are often garbled, but two things survive recognition: the
magnitude band of each stat and the screen's fixed top-to-bottom order
(caught above visited). Assignment uses those plus nearby keywords.
"""

import logging
import re

from fields import normalize_text
from models import ExtractedFields, FieldCandidate

logger = logging.getLogger(__name__)

NUMBER_TOKEN = re.compile(r"[\d,]+\.?\d*")
FRACTION = re.compile(r"\.\d")

KM_WINDOW = 15
CONTEXT_WINDOW = 50

DISTANCE_RANGE = (1000, 100000)
EXPERIENCE_RANGE = (1000000, 1000000000)
MEDIUM_RANGE = (50000, 1000000)

CATCH_KEYWORDS = ("pokemon", "pokémon", "caught", "catch", "collect")
VISIT_KEYWORDS = ("pokestop", "pokéstop", "stop", "visited", "visit")


def find_candidates(text: str) -> list[FieldCandidate]:
    """All positive numeric tokens in the text, in document order."""
    candidates = []
    for match in NUMBER_TOKEN.finditer(text):
        original = match.group(0)
        cleaned = original.replace(",", "")
        is_fractional = FRACTION.search(cleaned) is not None
        cleaned = cleaned.rstrip(".")
        if not cleaned:
            continue
        try:
            value = float(cleaned) if is_fractional else int(cleaned)
        except ValueError:
            continue
        if value <= 0:
            continue
        candidates.append(FieldCandidate(
            original=original,
            value=value,
            is_fractional=is_fractional,
            position=match.start(),
        ))
    return candidates


def classify_context(text: str, position: int) -> str | None:
    """Which counter field the text just before ``position`` talks about.

    The keyword closest to the number wins; None if neither kind appears.
    """
    before = text[max(0, position - CONTEXT_WINDOW):position].lower()
    catch_at = max(before.rfind(k) for k in CATCH_KEYWORDS)
    visit_at = max(before.rfind(k) for k in VISIT_KEYWORDS)
    if catch_at < 0 and visit_at < 0:
        return None
    return "entities_caught" if catch_at > visit_at else "checkpoints_visited"


def resolve_missing(raw_text: str, fields: ExtractedFields) -> ExtractedFields:
    """Fill unset numeric fields from unlabeled numbers.

    Fields already present are never overwritten. Returns a new object.
    """
    text = normalize_text(raw_text)
    candidates = find_candidates(text)
    updates: dict[str, object] = {}

    if fields.distance_walked is None:
        distance = _resolve_distance(text, candidates)
        if distance is not None:
            updates["distance_walked"] = distance
            logger.debug("distance_walked=%s via fallback (near km)", distance)

    if fields.experience_total is None:
        experience = _resolve_experience(candidates)
        if experience is not None:
            updates["experience_total"] = experience
            logger.debug("experience_total=%s via fallback (largest number)", experience)

    caught_missing = fields.entities_caught is None
    visited_missing = fields.checkpoints_visited is None
    if caught_missing or visited_missing:
        experience = updates.get("experience_total", fields.experience_total)
        distance = updates.get("distance_walked", fields.distance_walked)
        medium = _medium_candidates(candidates, experience, distance)
        if caught_missing and visited_missing:
            updates.update(_resolve_counters(text, medium))
        else:
            missing = "entities_caught" if caught_missing else "checkpoints_visited"
            known = fields.checkpoints_visited if caught_missing else fields.entities_caught
            value = _resolve_one_counter(text, medium, missing, known)
            if value is not None:
                updates[missing] = value
                logger.debug("%s=%s via fallback (context)", missing, value)

    resolved = fields.model_copy(update=updates)
    if (
        resolved.entities_caught is not None
        and resolved.checkpoints_visited is not None
        and resolved.entities_caught < resolved.checkpoints_visited
    ):
        logger.warning(
            "entities_caught (%d) < checkpoints_visited (%d): unusual but possible",
            resolved.entities_caught,
            resolved.checkpoints_visited,
        )
    return resolved


def _resolve_distance(text: str, candidates: list[FieldCandidate]) -> float | None:
    low, high = DISTANCE_RANGE
    for c in candidates:
        if not c.is_fractional or not low < c.value < high:
            continue
        if "km" in text[c.position:c.position + KM_WINDOW].lower():
            return c.value
    return None


def _resolve_experience(candidates: list[FieldCandidate]) -> int | None:
    low, high = EXPERIENCE_RANGE
    large = [c for c in candidates if not c.is_fractional and low < c.value < high]
    if not large:
        return None
    return max(large, key=lambda c: c.value).value


def _medium_candidates(
    candidates: list[FieldCandidate],
    experience: int | None,
    distance: float | None,
) -> list[FieldCandidate]:
    low, high = MEDIUM_RANGE
    distance_whole = int(distance) if distance is not None else None
    medium = [
        c for c in candidates
        if not c.is_fractional
        and low < c.value < high
        and c.value != experience
        and c.value != distance_whole
    ]
    return sorted(medium, key=lambda c: c.position)


def _resolve_counters(text: str, medium: list[FieldCandidate]) -> dict[str, int]:
    """Both counters missing: document order, or context for a lone number."""
    if len(medium) >= 2:
        first, second = medium[0], medium[1]
        first_context = classify_context(text, first.position)
        # Order alone is not trusted; at least one of the two needs a keyword nearby
        if first_context is None and classify_context(text, second.position) is None:
            logger.debug("Two unlabeled medium numbers without keyword context, leaving counters unset")
            return {}
        if first_context == "checkpoints_visited":
            # Screen order would contradict the first number's own label
            return _assign_by_context(text, medium)
        logger.debug("Counters via fallback (document order): %s, %s", first.value, second.value)
        return {"entities_caught": first.value, "checkpoints_visited": second.value}

    if len(medium) == 1:
        only = medium[0]
        field = classify_context(text, only.position)
        if field is None:
            logger.debug("Lone medium number %s has no keyword context", only.original)
            return {}
        logger.debug("%s=%s via fallback (context)", field, only.value)
        return {field: only.value}

    return {}


def _resolve_one_counter(
    text: str,
    medium: list[FieldCandidate],
    missing: str,
    known: int | None,
) -> int | None:
    for c in medium:
        if c.value == known:
            continue
        if classify_context(text, c.position) == missing:
            return c.value
    return None


def _assign_by_context(text: str, medium: list[FieldCandidate]) -> dict[str, int]:
    """Each counter takes the first candidate whose own context names it."""
    assigned: dict[str, int] = {}
    for c in medium:
        field = classify_context(text, c.position)
        if field is not None and field not in assigned:
            assigned[field] = c.value
            logger.debug("%s=%s via fallback (context)", field, c.value)
    return assigned
