"""
Test support utilities for docaction tests.

Helpers that are not pytest fixtures but are shared across test files live
here; the in-memory MongoDB client is in :mod:`tests._support.fakes`.
"""

from __future__ import annotations

from typing import Any


def assert_dict_subset(actual: dict, expected: dict, path: str = "") -> None:
    """
    Assert that expected is a subset of actual (recursive).

    Args:
        actual: The full dictionary
        expected: The expected subset
        path: Current path (for error messages)
    """
    for key, expected_value in expected.items():
        current_path = f"{path}.{key}" if path else key
        assert key in actual, f"Missing key at {current_path}"
        actual_value: Any = actual[key]
        if isinstance(expected_value, dict) and isinstance(actual_value, dict):
            assert_dict_subset(actual_value, expected_value, current_path)
        else:
            assert actual_value == expected_value, (
                f"Mismatch at {current_path}: "
                f"expected {expected_value!r}, got {actual_value!r}"
            )
