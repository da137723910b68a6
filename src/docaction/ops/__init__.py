"""
Operations layer — the database action itself.

Usage::

    from docaction.ops import ActionInputs, run_database_action

    result = await run_database_action(inputs, sink)
"""

from docaction.ops.action import ActionRun, ActionState, run_database_action
from docaction.ops.requests import ActionInputs

__all__ = [
    "ActionInputs",
    "ActionRun",
    "ActionState",
    "run_database_action",
]
