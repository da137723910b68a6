"""Operation vocabulary, dispatch, and result normalization.

Modules
-------
registry        Operation enum + OperationSpec table
dispatcher      parse_arguments() + dispatch()
normalizer      cursor drain, write-result conversion, JSON text
"""

from .dispatcher import dispatch, parse_arguments
from .normalizer import normalize, to_json_text
from .registry import Operation, OperationRegistry, OperationSpec, get_operation, list_operations, operation_registry

__all__ = [
    "Operation",
    "OperationRegistry",
    "OperationSpec",
    "dispatch",
    "get_operation",
    "list_operations",
    "normalize",
    "operation_registry",
    "parse_arguments",
    "to_json_text",
]
