"""
Unit tests for the Query builder.
"""

import pytest

from localcosmos.emulator.query_builder import Query


def params(spec):
    return [p.model_dump() for p in spec.parameters]


CONDITION_CASES = [
    ("str", "=", True, "c.str = @str"),
    ("obj.key1.key2", ">", 30, "c.obj.key1.key2 > @obj_key1_key2"),
    ("str", "CONTAINS", "text", "CONTAINS(c.str, @str, true)"),
    ("obj.key1.key2", "CONTAINS", "text", "CONTAINS(c.obj.key1.key2, @obj_key1_key2, true)"),
]


class TestCondition:
    """Tests for single clause generation."""

    @pytest.mark.parametrize("field,op,value,expected", CONDITION_CASES)
    def test_condition(self, field, op, value, expected):
        clause, bound = Query.condition(field, op, value)

        assert clause == expected
        assert bound == {"@" + field.replace(".", "_"): value}

    @pytest.mark.parametrize("field,op,value,expected", CONDITION_CASES)
    def test_where_condition(self, field, op, value, expected):
        result = Query().where_condition(field, op, value).build()

        assert result.query == f"SELECT * FROM c WHERE ({expected})"
        assert params(result) == [{"name": "@" + field.replace(".", "_"), "value": value}]

    def test_unknown_operator(self):
        with pytest.raises(ValueError, match="Unsupported operator"):
            Query.condition("a", "!=", 1)


class TestWhere:
    """Tests for raw clauses."""

    @pytest.mark.parametrize("clause,names", [
        ("str = 'text'", []),
        ("str = @str", ["@str"]),
        ("str = @str AND obj.key > @obj_key", ["@str", "@obj_key"]),
    ])
    def test_where(self, clause, names):
        result = Query().where((clause, {name: "value" for name in names})).build()

        assert result.query == f"SELECT * FROM c WHERE ({clause})"
        assert params(result) == [{"name": name, "value": "value"} for name in names]

    def test_where_without_parameters(self):
        result = Query().where(("c.active = true",)).build()
        assert result.parameters == []


class TestBuild:
    """Tests for final query assembly."""

    def test_no_clauses(self):
        assert Query().build().query == "SELECT * FROM c "

    def test_top_without_clauses(self):
        result = Query().build(24)

        assert result.query == "SELECT TOP 24 * FROM c "
        assert result.parameters == []

    @pytest.mark.parametrize("max_items", [0, -1])
    def test_non_positive_top(self, max_items):
        with pytest.raises(ValueError):
            Query().build(max_items)

    def test_stacked_clauses(self):
        result = (
            Query()
            .where_condition("str", "=", "text")
            .where(("ARRAY_CONTAINS(c.tags, @tag)", {"@tag": "sale"}))
            .where_condition("str2", "CONTAINS", "text")
            .where(("c.obj.key > @key", {"@key": 30}))
            .build()
        )

        assert result.query == (
            "SELECT * FROM c WHERE (c.str = @str) AND (ARRAY_CONTAINS(c.tags, @tag)) "
            "AND (CONTAINS(c.str2, @str2, true)) AND (c.obj.key > @key)"
        )
        assert params(result) == [
            {"name": "@str", "value": "text"},
            {"name": "@tag", "value": "sale"},
            {"name": "@str2", "value": "text"},
            {"name": "@key", "value": 30},
        ]

    def test_overlapping_parameters_keep_first(self):
        """Test a reused parameter name keeps its first bound value."""
        result = (
            Query()
            .where_condition("str", "=", "text")
            .where(("ARRAY_CONTAINS(c.tags, @tag)", {"@tag": 30}))
            .where_condition("str", "CONTAINS", "other")
            .where(("c.obj.key > @tag",))
            .build()
        )

        assert result.query == (
            "SELECT * FROM c WHERE (c.str = @str) AND (ARRAY_CONTAINS(c.tags, @tag)) "
            "AND (CONTAINS(c.str, @str, true)) AND (c.obj.key > @tag)"
        )
        assert params(result) == [
            {"name": "@str", "value": "text"},
            {"name": "@tag", "value": 30},
        ]
