from collections import defaultdict, deque
from typing import Dict, Iterable, List, Optional, Tuple

from domaincms.models.page import Page


class PageTree:
    """
    Parent-indexed adjacency over the pages of one domain.

    Pages are referenced by id only; no ORM objects are held, so the tree
    can be built once per operation and walked without lazy loads.
    Traversals are iterative and track visited ids, so a malformed tree
    with a parent cycle still terminates.
    """

    def __init__(self, edges: Iterable[Tuple[str, Optional[str]]]):
        self.parent_of: Dict[str, Optional[str]] = {}
        self.children_of: Dict[Optional[str], List[str]] = defaultdict(list)

        for page_id, parent_id in edges:
            self.parent_of[page_id] = parent_id
            self.children_of[parent_id].append(page_id)

    @classmethod
    def for_domain(cls, domain_id: str) -> "PageTree":
        rows = (
            Page.query.with_entities(Page.id, Page.parent_id)
            .filter(Page.domain_id == domain_id)
            .order_by(Page.order.asc(), Page.title.asc())
            .all()
        )
        return cls((row.id, row.parent_id) for row in rows)

    def children(self, page_id: Optional[str]) -> List[str]:
        return list(self.children_of.get(page_id, ()))

    def descendants(self, page_id: str) -> List[Tuple[str, int]]:
        """
        Breadth-first (id, depth) pairs below ``page_id``.

        The page itself is not included. Depth of a direct child is 1.
        """
        result: List[Tuple[str, int]] = []
        visited = {page_id}
        queue = deque((child, 1) for child in self.children_of.get(page_id, ()))

        while queue:
            current, depth = queue.popleft()
            if current in visited:
                continue
            visited.add(current)
            result.append((current, depth))
            for child in self.children_of.get(current, ()):
                queue.append((child, depth + 1))

        return result

    def descendants_deepest_first(self, page_id: str) -> List[str]:
        ordered = sorted(self.descendants(page_id), key=lambda pair: pair[1], reverse=True)
        return [descendant_id for descendant_id, _ in ordered]

    def ancestors(self, page_id: str) -> List[str]:
        """Parent chain from the direct parent up to the root."""
        chain: List[str] = []
        visited = {page_id}
        current = self.parent_of.get(page_id)

        while current is not None and current not in visited:
            chain.append(current)
            visited.add(current)
            current = self.parent_of.get(current)

        return chain

    def is_descendant_of(self, candidate_id: str, ancestor_id: str) -> bool:
        return ancestor_id in self.ancestors(candidate_id)
