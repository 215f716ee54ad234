"""Partition parts into independent material groups."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .value_objects import MaterialKey, Part, PartInstance

logger = logging.getLogger(__name__)


@dataclass
class MaterialGroup:
    """All pieces of one grade and thickness.

    Attributes:
        key: Grade and thickness shared by every piece.
        instances: Placeable pieces, sorted for first-fit-decreasing packing.
        oversize: Pieces longer than the maximum sheet length.
    """

    key: MaterialKey
    instances: list[PartInstance] = field(default_factory=list)
    oversize: list[PartInstance] = field(default_factory=list)

    @property
    def thickness(self) -> float:
        return self.key.thickness

    @property
    def grade(self) -> str:
        return self.key.grade

    @property
    def total_instances(self) -> int:
        return len(self.instances) + len(self.oversize)


def sort_instances(instances: Sequence[PartInstance]) -> list[PartInstance]:
    """Sort widest first, then by area, then by length (stable, descending)."""
    return sorted(
        instances,
        key=lambda i: (i.width, i.area, i.length),
        reverse=True,
    )


def expand_part(part: Part, max_sheet_length: float) -> list[PartInstance]:
    """Expand a part into one instance per piece."""
    exceeds = part.length > max_sheet_length
    return [
        PartInstance(part=part, index=i + 1, exceeds_sheet_length=exceeds)
        for i in range(part.quantity)
    ]


def group_parts(
    parts: Sequence[Part],
    max_sheet_length: float,
) -> list[MaterialGroup]:
    """Group parts by (grade, thickness) in order of first appearance.

    Args:
        parts: Validated parts.
        max_sheet_length: Pieces longer than this are set aside as oversize.

    Returns:
        Material groups in discovery order.
    """
    groups: dict[MaterialKey, MaterialGroup] = {}

    for part in parts:
        key = part.material_key
        if key not in groups:
            groups[key] = MaterialGroup(key=key)
        group = groups[key]
        for instance in expand_part(part, max_sheet_length):
            if instance.exceeds_sheet_length:
                group.oversize.append(instance)
            else:
                group.instances.append(instance)

    for group in groups.values():
        group.instances = sort_instances(group.instances)
        if group.oversize:
            logger.warning(
                "%s: %d piece(s) exceed the maximum sheet length of %s mm",
                group.key.label,
                len(group.oversize),
                max_sheet_length,
            )

    return list(groups.values())
