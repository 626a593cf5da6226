from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set

VALID_COLUMNS = (1, 2, 3)


@dataclass
class SectionConfig:
    """One column-positioned group of a page's children."""

    title: str
    column: int
    order: float
    page_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SectionConfig":
        return cls(
            title=data.get("title") or "",
            column=data.get("column") or 1,
            order=data.get("order") or 0,
            page_ids=list(data.get("pageIds") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "column": self.column,
            "order": self.order,
            "pageIds": list(self.page_ids),
        }


def load_sections(raw) -> List[SectionConfig]:
    """Read stored sections leniently; bad entries are skipped."""
    if not isinstance(raw, list):
        return []
    return [SectionConfig.from_dict(item) for item in raw if isinstance(item, dict)]


def organized_page_ids(sections: Iterable[SectionConfig]) -> Set[str]:
    ids: Set[str] = set()
    for section in sections:
        ids.update(section.page_ids)
    return ids


def unorganized_page_ids(child_ids: Iterable[str], sections: Iterable[SectionConfig]) -> List[str]:
    """Children not referenced by any section, in their original order."""
    organized = organized_page_ids(sections)
    return [child_id for child_id in child_ids if child_id not in organized]


def without_page(raw, page_id: str) -> List[Dict[str, Any]]:
    """Stored sections with ``page_id`` removed from every pageIds list."""
    return [
        SectionConfig(
            title=section.title,
            column=section.column,
            order=section.order,
            page_ids=[pid for pid in section.page_ids if pid != page_id],
        ).to_dict()
        for section in load_sections(raw)
    ]
