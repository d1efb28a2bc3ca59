"""Tests for relation mapping and forest assembly."""

from conftest import raw_work_item

from azure_devops_tree.client.hierarchy import build_hierarchy, map_relations, map_work_item
from azure_devops_tree.models import WorkItem, WorkItemRelation


def item(item_id, parent=None, address=None):
    relations = ()
    if parent is not None:
        relations = (WorkItemRelation(type="parent", url=parent),)
    return WorkItem(id=item_id, url=address or f"/{item_id}", title=f"Item {item_id}", relations=relations)


def shape(roots):
    return [(node.id, shape(node.children)) for node in roots]


class TestMapRelations:
    def test_missing_relations_map_to_empty(self):
        assert map_relations(None) == []
        assert map_relations([]) == []

    def test_only_hierarchy_links_are_kept(self):
        raw = [
            {"rel": "System.LinkTypes.Hierarchy-Reverse", "url": "/1"},
            {"rel": "System.LinkTypes.Related", "url": "/2"},
            {"rel": "ArtifactLink", "url": "vstfs:///Git/Commit/abc"},
            {"rel": "System.LinkTypes.Hierarchy-Forward", "url": "/3"},
        ]

        assert map_relations(raw) == [
            WorkItemRelation(type="parent", url="/1"),
            WorkItemRelation(type="child", url="/3"),
        ]

    def test_map_work_item_reads_fields(self):
        work_item = map_work_item(raw_work_item(7, parent=3, work_item_type="Bug"))

        assert work_item.id == 7
        assert work_item.type == "Bug"
        assert work_item.state == "Active"
        assert work_item.title == "Item 7"
        assert work_item.relations[0].type == "parent"
        assert work_item.relations[0].url.endswith("/workItems/3")

    def test_map_work_item_without_relations(self):
        work_item = map_work_item(raw_work_item(8))

        assert work_item.relations == ()


class TestBuildHierarchy:
    def test_child_attached_to_parent(self):
        roots = build_hierarchy([item(2, parent="/1"), item(1)])

        assert shape(roots) == [(1, [(2, [])])]

    def test_unresolved_parent_is_promoted_to_root(self):
        roots = build_hierarchy([item(1), item(2, parent="/1"), item(3, parent="/9")])

        assert shape(roots) == [(1, [(2, [])]), (3, [])]

    def test_children_keep_input_order(self):
        roots = build_hierarchy([item(1), item(5, parent="/1"), item(3, parent="/1"), item(4, parent="/1")])

        assert shape(roots) == [(1, [(5, []), (3, []), (4, [])])]

    def test_parent_matched_by_address_not_id(self):
        roots = build_hierarchy([
            item(1, address="https://x/items/100"),
            item(2, parent="https://x/items/1"),
            item(3, parent="https://x/items/100"),
        ])

        assert shape(roots) == [(1, [(3, [])]), (2, [])]

    def test_first_parent_relation_wins(self):
        child = WorkItem(
            id=3,
            url="/3",
            relations=(
                WorkItemRelation(type="child", url="/1"),
                WorkItemRelation(type="parent", url="/2"),
                WorkItemRelation(type="parent", url="/1"),
            ),
        )

        roots = build_hierarchy([item(1), item(2), child])

        assert shape(roots) == [(1, []), (2, [(3, [])])]

    def test_deep_nesting(self):
        roots = build_hierarchy([item(4, parent="/3"), item(3, parent="/2"), item(2, parent="/1"), item(1)])

        assert shape(roots) == [(1, [(2, [(3, [(4, [])])])])]

    def test_every_item_appears_once(self):
        items = [item(1), item(2, parent="/1"), item(3, parent="/2"), item(4, parent="/8"), item(5)]

        roots = build_hierarchy(items)

        def ids(nodes):
            for node in nodes:
                yield node.id
                yield from ids(node.children)

        assert sorted(ids(roots)) == [1, 2, 3, 4, 5]

    def test_duplicate_address_last_wins_for_lookup(self):
        first = item(1, address="/dup")
        second = item(2, address="/dup")

        roots = build_hierarchy([first, second, item(3, parent="/dup")])

        assert shape(roots) == [(1, []), (2, [(3, [])])]

    def test_parent_cycle_produces_no_root(self):
        roots = build_hierarchy([item(1, parent="/2"), item(2, parent="/1"), item(3)])

        assert shape(roots) == [(3, [])]

    def test_empty(self):
        assert build_hierarchy([]) == []
