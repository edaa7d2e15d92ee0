"""Tests for category hierarchy tools."""

import pytest

from models.category import HierarchicalCategory, TOP_LEVEL_LABEL
from tests.helpers import make_category
from tools.categories import (
    CategoryHierarchyError,
    build_hierarchy,
    category_display_list,
    collation_key,
    filter_by_activity,
    index_categories,
    search_categories,
)


@pytest.fixture
def catalogue():
    """Two top-level trees and a three-level branch."""
    return [
        make_category("C", "Furniture", sort_order=2, is_active=False),
        make_category("B", "Laptops", parent="A", sort_order=1),
        make_category("A", "Electronics", sort_order=1, description="Gadgets"),
        make_category("E", "Gaming", parent="B", sort_order=1),
        make_category("D", "Chairs", parent="C", sort_order=1),
        make_category("F", "Cables", parent="A", sort_order=2),
    ]


def ids(categories):
    return [category.id for category in categories]


class TestBuildHierarchy:
    """Tests for build_hierarchy."""

    def test_example_from_two_roots(self):
        """Test the basic forest yields parent before child, roots by sort order."""
        categories = [
            make_category("A", "Electronics", sort_order=1),
            make_category("B", "Laptops", parent="A", sort_order=1),
            make_category("C", "Furniture", sort_order=2, is_active=False),
        ]

        result = build_hierarchy(categories)

        assert ids(result) == ["A", "B", "C"]
        assert [c.depth for c in result] == [0, 1, 0]

    def test_pre_order_traversal(self, catalogue):
        """Test every subtree follows its root before the next sibling."""
        result = build_hierarchy(catalogue)

        assert ids(result) == ["A", "B", "E", "F", "C", "D"]

    def test_depth_counts_ancestor_hops(self, catalogue):
        """Test depth equals the number of parents up to a root."""
        result = build_hierarchy(catalogue)
        by_id = {c.id: c for c in catalogue}

        for node in result:
            hops = 0
            current = by_id[node.id]
            while current.parent_category_id is not None:
                current = by_id[current.parent_category_id]
                hops += 1
            assert node.depth == hops

    def test_parent_names_resolved(self, catalogue):
        """Test parent_category_name is the parent's name or Top-level."""
        result = {c.id: c for c in build_hierarchy(catalogue)}

        assert result["A"].parent_category_name == TOP_LEVEL_LABEL
        assert result["B"].parent_category_name == "Electronics"
        assert result["E"].parent_category_name == "Laptops"
        assert result["D"].parent_category_name == "Furniture"

    def test_returns_hierarchical_categories_with_all_fields(self, catalogue):
        """Test output records carry the original fields."""
        result = build_hierarchy(catalogue)

        electronics = result[0]
        assert isinstance(electronics, HierarchicalCategory)
        assert electronics.name == "Electronics"
        assert electronics.description == "Gadgets"
        assert electronics.sort_order == 1
        assert electronics.is_active is True

    def test_siblings_sorted_by_sort_order_before_name(self):
        """Test sort_order wins over alphabetical order."""
        categories = [
            make_category(1, "Alpha", sort_order=3),
            make_category(2, "Zulu", sort_order=1),
            make_category(3, "Mike", sort_order=2),
        ]

        assert ids(build_hierarchy(categories)) == [2, 3, 1]

    def test_equal_sort_order_sorted_by_name(self):
        """Test siblings with the same sort order are ordered by name."""
        categories = [
            make_category(1, "Paper", sort_order=1),
            make_category(2, "Boxes", sort_order=1),
            make_category(3, "Labels", sort_order=1),
        ]

        assert [c.name for c in build_hierarchy(categories)] == [
            "Boxes",
            "Labels",
            "Paper",
        ]

    def test_name_tie_break_is_accent_insensitive(self):
        """Test "café" sorts before "cafeteria" as under locale collation."""
        categories = [
            make_category(1, "cafeteria", sort_order=1),
            make_category(2, "café", sort_order=1),
        ]

        assert [c.name for c in build_hierarchy(categories)] == ["café", "cafeteria"]

    def test_name_tie_break_is_case_insensitive(self):
        """Test lowercase names are not pushed after all uppercase ones."""
        categories = [
            make_category(1, "Zebra", sort_order=0),
            make_category(2, "apple", sort_order=0),
        ]

        assert [c.name for c in build_hierarchy(categories)] == ["apple", "Zebra"]

    def test_missing_parent_excluded(self, catalogue):
        """Test a category with an unknown parent is dropped with its subtree."""
        catalogue.append(make_category("G", "Orphan", parent="missing-id"))
        catalogue.append(make_category("H", "Orphan child", parent="G"))

        result = build_hierarchy(catalogue)

        assert "G" not in ids(result)
        assert "H" not in ids(result)
        assert len(result) == 6

    def test_missing_parent_excluded_even_when_inactive(self):
        """Test the orphan rule does not depend on is_active."""
        categories = [
            make_category("A", "Root"),
            make_category("D", "Orphan", parent="missing-id", is_active=False),
        ]

        assert ids(build_hierarchy(categories)) == ["A"]

    def test_no_duplicates_and_no_fabrication(self, catalogue):
        """Test each input appears exactly once in the output."""
        result = build_hierarchy(catalogue)

        assert sorted(ids(result)) == sorted(ids(catalogue))
        assert len(set(ids(result))) == len(result)

    def test_idempotent(self, catalogue):
        """Test building twice yields the same list."""
        assert build_hierarchy(catalogue) == build_hierarchy(catalogue)

    def test_input_not_modified(self, catalogue):
        """Test the source categories are left untouched."""
        snapshot = [(c.id, c.name, c.parent_category_id) for c in catalogue]

        build_hierarchy(catalogue)

        assert [(c.id, c.name, c.parent_category_id) for c in catalogue] == snapshot
        assert not any(hasattr(c, "depth") for c in catalogue)

    def test_empty_input(self):
        """Test an empty collection gives an empty list."""
        assert build_hierarchy([]) == []

    def test_subtree_from_parent_id(self, catalogue):
        """Test building from a given parent returns only its descendants."""
        result = build_hierarchy(catalogue, parent_id="A", depth=1)

        assert ids(result) == ["B", "E", "F"]
        assert [c.depth for c in result] == [1, 2, 1]

    def test_explicit_category_index_resolves_parent_names(self, catalogue):
        """Test a caller-provided index is used for parent names."""
        index = index_categories(catalogue)

        result = build_hierarchy(catalogue, category_index=index)

        assert result[1].parent_category_name == "Electronics"

    def test_deep_chain(self):
        """Test a chain far deeper than the interpreter recursion limit."""
        levels = 1200
        categories = [make_category(0, "n0")] + [
            make_category(i, f"n{i}", parent=i - 1) for i in range(1, levels)
        ]

        result = build_hierarchy(categories)

        assert ids(result) == list(range(levels))
        assert result[-1].depth == levels - 1
        assert result[-1].parent_category_name == f"n{levels - 2}"

    def test_cycle_raises(self):
        """Test a parent loop is reported as a data integrity error."""
        categories = [
            make_category("A", "Root"),
            make_category("X", "Loop one", parent="Y"),
            make_category("Y", "Loop two", parent="X"),
        ]

        with pytest.raises(CategoryHierarchyError) as exc_info:
            build_hierarchy(categories)

        assert set(exc_info.value.category_ids) == {"X", "Y"}

    def test_self_parent_raises(self):
        """Test a category that is its own parent is reported."""
        categories = [make_category("A", "Selfish", parent="A")]

        with pytest.raises(CategoryHierarchyError, match="cycle"):
            build_hierarchy(categories)

    def test_descendant_of_cycle_raises(self):
        """Test categories hanging below a loop are reported too."""
        categories = [
            make_category("X", "Loop one", parent="Y"),
            make_category("Y", "Loop two", parent="X"),
            make_category("Z", "Below loop", parent="X"),
        ]

        with pytest.raises(CategoryHierarchyError) as exc_info:
            build_hierarchy(categories)

        assert "Z" in exc_info.value.category_ids

    def test_duplicate_ids_raise(self):
        """Test two categories sharing an ID are rejected."""
        categories = [make_category("A", "One"), make_category("A", "Two")]

        with pytest.raises(CategoryHierarchyError, match="Duplicate"):
            build_hierarchy(categories)


class TestFilterByActivity:
    """Tests for filter_by_activity."""

    def test_include_inactive_returns_everything(self, catalogue):
        """Test nothing is removed when inactive categories are requested."""
        ordered = build_hierarchy(catalogue)

        assert filter_by_activity(ordered, True) == ordered

    def test_example_drops_inactive_root(self):
        """Test the inactive top-level category disappears."""
        categories = [
            make_category("A", "Electronics", sort_order=1),
            make_category("B", "Laptops", parent="A", sort_order=1),
            make_category("C", "Furniture", sort_order=2, is_active=False),
        ]

        result = filter_by_activity(build_hierarchy(categories), False)

        assert ids(result) == ["A", "B"]
        assert [c.depth for c in result] == [0, 1]

    def test_is_ordered_subsequence_of_active(self, catalogue):
        """Test filtering keeps exactly the active nodes in the same order."""
        ordered = build_hierarchy(catalogue)

        result = filter_by_activity(ordered, False)

        assert ids(result) == [c.id for c in ordered if c.is_active]

    def test_active_child_of_inactive_parent_keeps_depth(self, catalogue):
        """Test children of a hidden parent are not re-parented."""
        result = filter_by_activity(build_hierarchy(catalogue), False)

        chairs = next(c for c in result if c.id == "D")
        assert chairs.depth == 1
        assert chairs.parent_category_name == "Furniture"
        assert "C" not in ids(result)


class TestSearchCategories:
    """Tests for search_categories."""

    def test_empty_term_returns_input(self, catalogue):
        """Test no term means no filtering."""
        ordered = build_hierarchy(catalogue)

        assert search_categories(ordered, "") == ordered
        assert search_categories(ordered, None) == ordered

    def test_matches_name_case_insensitively(self, catalogue):
        """Test name matching ignores case."""
        result = search_categories(build_hierarchy(catalogue), "CABLE")

        assert ids(result) == ["F"]

    def test_matches_description(self, catalogue):
        """Test description text is searched."""
        result = search_categories(build_hierarchy(catalogue), "gadget")

        assert ids(result) == ["A"]

    def test_matches_parent_name(self, catalogue):
        """Test a parent's name matches its children as well as itself."""
        result = search_categories(build_hierarchy(catalogue), "electronics")

        assert ids(result) == ["A", "B", "F"]

    def test_match_without_ancestors(self, catalogue):
        """Test a matching grandchild is returned without its ancestors."""
        result = search_categories(build_hierarchy(catalogue), "gaming")

        assert ids(result) == ["E"]
        assert result[0].depth == 2

    def test_no_match(self, catalogue):
        """Test an unmatched term gives an empty list."""
        assert search_categories(build_hierarchy(catalogue), "xyz") == []


class TestCategoryDisplayList:
    """Tests for category_display_list."""

    def test_combines_build_filter_and_search(self, catalogue):
        """Test the listing pipeline hides inactive nodes and applies search."""
        result = category_display_list(catalogue, include_inactive=False, search_term="ch")

        assert ids(result) == ["D"]

    def test_include_inactive(self, catalogue):
        """Test inactive categories are listed when asked for."""
        result = category_display_list(catalogue, include_inactive=True)

        assert ids(result) == ["A", "B", "E", "F", "C", "D"]


class TestCollationKey:
    """Tests for collation_key."""

    def test_accents_only_break_ties(self):
        """Test accented and plain spellings sort next to each other."""
        names = ["cote", "côte", "coté", "cotes"]

        assert sorted(names, key=collation_key)[-1] == "cotes"

    def test_identical_names_compare_equal(self):
        """Test equal names produce equal keys."""
        assert collation_key("Paper") == collation_key("Paper")
