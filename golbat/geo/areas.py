"""Named areas and wildcard matching between area lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class AreaName:
    """An area name within an optional parent area."""

    parent: str = ""
    name: str = ""

    def __str__(self) -> str:
        if self.name and not self.parent:
            return self.name
        if self.parent and not self.name:
            return self.parent
        if self.parent and self.name:
            if self.parent == self.name:
                return self.name
            return f"{self.parent}/{self.name}"
        return "unown"


def area_match_with_wildcards(
    areas: Iterable[AreaName], areas_to_match: Iterable[AreaName]
) -> bool:
    """Return True if any wanted area matches any of ``areas``.

    A wanted name of ``*`` matches any area in the same parent; a wanted
    parent of ``*`` matches the name in any parent.
    """
    areas = list(areas)
    for wanted in areas_to_match:
        for area in areas:
            if wanted.name == "*":
                if wanted.parent == area.parent:
                    return True
            elif wanted.parent == "*":
                if wanted.name == area.name:
                    return True
            elif wanted.parent == area.parent and wanted.name == area.name:
                return True
    return False