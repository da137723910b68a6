"""Tests for the operation registry (allow-list of collection operations)."""

import pytest

from docaction.core.errors import DispatchError
from docaction.operations.registry import (
    Operation,
    OperationRegistry,
    OperationSpec,
    get_operation,
    list_operations,
    operation_registry,
)


class TestOperationRegistry:
    def test_every_operation_registered(self):
        assert list_operations() == [op.value for op in Operation]
        assert len(list_operations()) == 15

    @pytest.mark.parametrize(
        ("name", "method"),
        [
            ("find", "find"),
            ("findOne", "find_one"),
            ("insertMany", "insert_many"),
            ("updateOne", "update_one"),
            ("findOneAndReplace", "find_one_and_replace"),
            ("countDocuments", "count_documents"),
        ],
    )
    def test_camel_case_maps_to_driver_method(self, name, method):
        assert get_operation(name).method == method

    def test_lookup_by_enum(self):
        assert operation_registry.get(Operation.AGGREGATE).name == "aggregate"

    @pytest.mark.parametrize("name", ["drop", "dropDatabase", "find_one", "FIND", "", "__class__"])
    def test_unknown_name_rejected(self, name):
        with pytest.raises(DispatchError, match="is not a valid function on the MongoDB collection object") as exc_info:
            get_operation(name)
        assert exc_info.value.operation == name

    def test_non_string_name_rejected(self):
        with pytest.raises(DispatchError, match="Method '42'"):
            get_operation(42)

    def test_contains(self):
        assert "distinct" in operation_registry
        assert Operation.FIND in operation_registry
        assert "mapReduce" not in operation_registry

    def test_cursor_operations(self):
        cursors = {spec.name for spec in operation_registry.specs() if spec.returns_cursor}
        assert cursors == {"find", "aggregate"}

    def test_count_documents_defaults_to_empty_filter(self):
        assert get_operation("countDocuments").default_args == ({},)

    def test_register_replaces_spec(self):
        registry = OperationRegistry()
        registry.register(OperationSpec(Operation.DISTINCT, "distinct", ("key",), "Distinct Values"))
        assert registry.get("distinct").params == ("key",)
        assert get_operation("distinct").params == ("key", "filter")


class TestOperationSpec:
    def test_max_args_counts_options(self):
        assert get_operation("updateOne").max_args == 3

    def test_describe(self):
        assert get_operation("find").describe() == {
            "name": "find",
            "label": "Find",
            "method": "find",
            "params": ["filter", "options"],
            "cursor": True,
        }
