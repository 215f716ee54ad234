"""Geometric sanity checks for part records.

Validation is collective: every offending part is reported, not just the
first, so that a caller can fix a whole part list in one go.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .value_objects import Part


@dataclass(frozen=True)
class PartIssue:
    """A single invalid field on a part."""

    part_id: str
    field: str
    message: str


class InputInvalidError(Exception):
    """Raised when the part list cannot be optimized at all.

    Attributes:
        issues: Every invalid field found, in input order.
    """

    def __init__(self, issues: Sequence[PartIssue]) -> None:
        self.issues = list(issues)
        super().__init__(
            f"Invalid parts: {', '.join(self.part_ids)}"
        )

    @property
    def part_ids(self) -> list[str]:
        """Offending part ids, deduplicated, in input order."""
        return list(dict.fromkeys(issue.part_id for issue in self.issues))


def _is_positive_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_parts(parts: Sequence[Part]) -> list[PartIssue]:
    """Check every part and return all issues found.

    Args:
        parts: Parts to check.

    Returns:
        List of issues (empty if all parts are valid).
    """
    issues: list[PartIssue] = []
    for part in parts:
        for field_name in ("width", "length", "thickness"):
            value = getattr(part, field_name)
            if not value > 0:
                issues.append(
                    PartIssue(part.id, field_name, f"{field_name} must be greater than 0")
                )
        if not _is_positive_integer(part.quantity):
            issues.append(
                PartIssue(part.id, "quantity", "quantity must be a positive integer")
            )
        if not part.grade:
            issues.append(PartIssue(part.id, "grade", "grade must not be empty"))
    return issues


def ensure_valid_parts(parts: Sequence[Part]) -> None:
    """Raise InputInvalidError if any part is invalid."""
    issues = validate_parts(parts)
    if issues:
        raise InputInvalidError(issues)
