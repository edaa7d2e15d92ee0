"""Category hierarchy tools.

Turns the flat category collection into the ordered, depth-annotated list
used by category listings, then narrows it by activity and search term.
"""

import unicodedata
from collections import defaultdict
from dataclasses import fields
from typing import Dict, Hashable, Iterable, List, Optional

from models.category import Category, HierarchicalCategory, TOP_LEVEL_LABEL


class CategoryHierarchyError(ValueError):
    """Raised when parent links do not form a forest.

    Attributes:
        category_ids: IDs of the offending categories.
    """

    def __init__(self, message: str, category_ids: Iterable[Hashable] = ()):
        super().__init__(message)
        self.category_ids = list(category_ids)


def collation_key(name: str) -> tuple:
    """Sort key approximating locale collation for category names.

    Accents and case are ignored on the first pass and only break ties,
    so "café" sorts before "cafeteria" and "apple" next to "Apple".
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), name.casefold(), name)


def index_categories(categories: Iterable[Category]) -> Dict[Hashable, Category]:
    """Map category ID to category.

    Raises:
        CategoryHierarchyError: If two categories share an ID.
    """
    index = {}
    duplicates = []
    for category in categories:
        if category.id in index:
            duplicates.append(category.id)
        index[category.id] = category

    if duplicates:
        raise CategoryHierarchyError(
            f"Duplicate category IDs: {sorted(set(duplicates), key=str)}", duplicates
        )
    return index


def build_hierarchy(
    categories: Iterable[Category],
    parent_id: Optional[Hashable] = None,
    depth: int = 0,
    category_index: Optional[Dict[Hashable, Category]] = None,
) -> List[HierarchicalCategory]:
    """Build the pre-order traversal of the category forest.

    Siblings are ordered by sort_order, then by name (see collation_key).
    Every category is followed immediately by its whole subtree. Categories
    whose parent ID does not match any category are left out together with
    their descendants. The input categories are not modified.

    Args:
        categories: Full flat collection of categories.
        parent_id: Parent whose subtree to build; None builds the whole forest.
        depth: Depth assigned to the children of parent_id.
        category_index: Optional ID -> category mapping used to resolve
            parent names. Built from categories when omitted.

    Returns:
        List of HierarchicalCategory objects in display order.

    Raises:
        CategoryHierarchyError: If IDs are duplicated or parent links form a cycle.

    Example:
        Electronics (sort 1) with child Laptops, and Furniture (sort 2) give
        [Electronics (depth 0), Laptops (depth 1), Furniture (depth 0)].
    """
    categories = list(categories)
    own_index = index_categories(categories)
    if category_index is None:
        category_index = own_index

    children = defaultdict(list)
    for category in categories:
        children[category.parent_category_id].append(category)
    for siblings in children.values():
        siblings.sort(key=lambda c: (c.sort_order, collation_key(c.name)))

    result: List[HierarchicalCategory] = []
    _append_subtree(children, parent_id, depth, category_index, result)

    emitted = {category.id for category in result}
    cyclic = _find_cyclic(categories, emitted, own_index)
    if cyclic:
        raise CategoryHierarchyError(
            f"Category parent links form a cycle: {cyclic}", cyclic
        )

    return result


def _append_subtree(children, parent_id, depth, category_index, result) -> None:
    # Explicit stack so arbitrarily deep trees do not hit the recursion limit
    stack = [(category, depth) for category in reversed(children.get(parent_id, ()))]
    while stack:
        category, level = stack.pop()
        result.append(_annotate(category, level, category_index))
        stack.extend(
            (child, level + 1) for child in reversed(children.get(category.id, ()))
        )


def _annotate(
    category: Category, depth: int, category_index: Dict[Hashable, Category]
) -> HierarchicalCategory:
    parent_name = TOP_LEVEL_LABEL
    if category.parent_category_id is not None:
        parent = category_index.get(category.parent_category_id)
        if parent is not None:
            parent_name = parent.name

    values = {f.name: getattr(category, f.name) for f in fields(Category)}
    return HierarchicalCategory(**values, depth=depth, parent_category_name=parent_name)


def _find_cyclic(
    categories: List[Category], emitted: set, index: Dict[Hashable, Category]
) -> List[Hashable]:
    """Return IDs of unplaced categories whose ancestor chain loops."""
    cyclic = []
    for category in categories:
        if category.id in emitted:
            continue

        seen = set()
        current = category
        while current is not None and current.parent_category_id is not None:
            if current.id in seen:
                cyclic.append(category.id)
                break
            seen.add(current.id)
            current = index.get(current.parent_category_id)

    return cyclic


def filter_by_activity(
    categories: Iterable[HierarchicalCategory], include_inactive: bool
) -> List[HierarchicalCategory]:
    """Drop inactive categories unless include_inactive is set.

    Active children of a hidden parent are kept with their original depth
    and parent name; they are not re-parented.
    """
    if include_inactive:
        return list(categories)
    return [category for category in categories if category.is_active]


def search_categories(
    categories: Iterable[HierarchicalCategory], term: Optional[str]
) -> List[HierarchicalCategory]:
    """Keep categories whose name, description or parent name contains term.

    Matching is case-insensitive. Ancestors of a match are not pulled in.
    """
    if not term:
        return list(categories)

    needle = term.casefold()
    return [
        category
        for category in categories
        if needle in category.name.casefold()
        or (category.description and needle in category.description.casefold())
        or (
            category.parent_category_name
            and needle in category.parent_category_name.casefold()
        )
    ]


def category_display_list(
    categories: Iterable[Category],
    include_inactive: bool = False,
    search_term: Optional[str] = None,
) -> List[HierarchicalCategory]:
    """Build, filter and search in the order the category listing needs."""
    ordered = build_hierarchy(categories)
    visible = filter_by_activity(ordered, include_inactive)
    return search_categories(visible, search_term)
