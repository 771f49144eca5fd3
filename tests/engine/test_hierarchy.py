"""Tests for metadata hierarchy introspection (``sequent.engine.hierarchy``)."""

import pytest

from sequent.engine.combinators import After, Catch, If
from sequent.engine.hierarchy import MetaHierarchy, children_of, hierarchy, label_of, walk
from sequent.engine.middleware import Stack
from sequent.engine.pipeline import Pipeline


def check_token(ctx):
    return None


class TestHierarchy:
    def test_empty_pipeline(self):
        result = hierarchy(Pipeline(meta={"name": "app"}))
        assert result == MetaHierarchy(meta={"name": "app"}, children=[])

    def test_leaves_have_no_children(self):
        app = Pipeline().use(check_token, meta={"name": "check"})

        result = hierarchy(app)

        assert result.children == [MetaHierarchy(meta={"name": "check"}, children=None)]

    def test_nested_containers(self):
        auth = Pipeline(meta={"name": "auth"}).use(check_token)
        app = Pipeline(meta={"name": "app"}).use(auth)

        assert hierarchy(app).to_dict() == {
            "meta": {"name": "app"},
            "children": [
                {
                    "meta": {"name": "auth"},
                    "children": [{"meta": None, "children": None}],
                }
            ],
        }

    def test_registration_meta_on_container(self):
        app = Pipeline().use(Pipeline().use(check_token), meta={"name": "auth"})
        assert hierarchy(app).children[0].meta == {"name": "auth"}

    def test_chain_group(self):
        app = Pipeline().use(check_token, check_token, meta={"name": "pair"})

        group = hierarchy(app).children[0]

        assert group.meta == {"name": "pair"}
        assert len(group.children) == 2

    def test_stack_and_combinators(self):
        stack = Stack(meta={"name": "stack"})
        stack.use(If(lambda ctx: True, [check_token], meta={"name": "if"}))
        stack.use(After([check_token]), meta={"name": "after"})
        stack.use(Catch(lambda err, ctx: None, [Pipeline(meta={"name": "inner"})]))

        result = hierarchy(stack).to_dict()

        assert result["meta"] == {"name": "stack"}
        assert [c["meta"] for c in result["children"]] == [{"name": "if"}, {"name": "after"}, None]
        assert result["children"][0]["children"] == [{"meta": None, "children": None}]
        assert result["children"][2]["children"][0] == {"meta": {"name": "inner"}, "children": []}

    def test_does_not_touch_execution_state(self):
        app = Pipeline().use(check_token)
        before = app.handlers
        hierarchy(app)
        assert app.handlers == before


class TestHelpers:
    def test_children_of_leaf(self):
        assert children_of(check_token) is None

    def test_children_of_container(self):
        app = Pipeline().use(check_token)
        assert len(children_of(app)) == 1

    @pytest.mark.parametrize(
        "node,expected",
        [
            (Pipeline(meta={"name": "named"}), "named"),
            (Pipeline(name="by-name"), "by-name"),
            (Pipeline(), "Pipeline"),
            (check_token, "check_token"),
        ],
    )
    def test_label_of(self, node, expected):
        assert label_of(node) == expected

    def test_walk_depth_first(self):
        inner = Pipeline(meta={"name": "inner"}).use(check_token)
        app = Pipeline(meta={"name": "app"}).use(inner).use(check_token)

        depths = [(depth, label_of(node)) for depth, node in walk(app)]

        assert depths == [(0, "app"), (1, "inner"), (2, "check_token"), (1, "check_token")]
