"""Consistency check of freshly extracted stats against a known baseline.

Lifetime counters only grow, so a decrease usually means a misread or the
wrong screenshot. The outcome is advisory; callers decide whether to block.
"""

import logging

from models import ExtractedFields, ValidationOutcome

logger = logging.getLogger(__name__)

MONOTONIC_FIELDS: tuple[tuple[str, str], ...] = (
    ("experience_total", "Total experience (XP)"),
    ("entities_caught", "Entities caught"),
    ("distance_walked", "Distance walked"),
    ("checkpoints_visited", "Checkpoints visited"),
)


def validate(extracted: ExtractedFields, baseline: ExtractedFields) -> ValidationOutcome:
    warnings: list[str] = []

    for field, label in MONOTONIC_FIELDS:
        new = getattr(extracted, field)
        old = getattr(baseline, field)
        if new is None or old is None:
            continue
        if new < old:
            warnings.append(f"{label} decreased: extracted {new:,} is lower than current value {old:,}")

    if warnings:
        logger.info("Validation found %d regressed field(s)", len(warnings))

    return ValidationOutcome(valid=not warnings, warnings=warnings)
