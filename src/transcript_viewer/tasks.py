"""Task list extraction from todo tool output.

A todo tool result announces itself in its text. The task list itself is
read from the structured payload the producer attached to the result, or,
for older sessions without one, scraped from JSON embedded in the text.
"""

import json
import logging
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional, TypeVar

from .content import ToolOutput
from .core import Task

logger = logging.getLogger(__name__)

TASK_LIST_MARKERS = ("Todos have been modified successfully", "todo list")
TASK_LIST_FIELD = "newTodos"

# Greedy: first "{" to last "}".
_EMBEDDED_JSON = re.compile(r"\{.*\}", re.DOTALL)

T = TypeVar("T")
R = TypeVar("R")


def first_success(strategies: Iterable[Callable[[T], Optional[R]]], value: T) -> Optional[R]:
    """Return the first non-None result of applying ``strategies`` in order."""
    for strategy in strategies:
        result = strategy(value)
        if result is not None:
            return result
    return None


def is_task_list_output(segment: ToolOutput) -> bool:
    text = segment.raw_text or ""
    return any(marker in text for marker in TASK_LIST_MARKERS)


def from_structured_payload(segment: ToolOutput) -> Optional[list[Task]]:
    return _task_list_field(segment.structured_payload)


def from_embedded_json(segment: ToolOutput) -> Optional[list[Task]]:
    match = _EMBEDDED_JSON.search(segment.raw_text or "")
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.debug("No task list in tool output %s: %s", segment.correlation_id, e)
        return None
    return _task_list_field(parsed)


EXTRACTION_STRATEGIES = (from_structured_payload, from_embedded_json)


def extract_tasks(segment: ToolOutput) -> Optional[list[Task]]:
    """Return the task list written by a todo tool call, if there is one.

    Returns None for tool output that is not a task list update, and for one
    whose task list cannot be recovered.
    """
    if not is_task_list_output(segment):
        return None
    return first_success(EXTRACTION_STRATEGIES, segment)


def task_progress(tasks: list[Task]) -> tuple[int, int]:
    """Return (completed, total) for a task list."""
    completed = sum(
        1 for task in tasks
        if isinstance(task, Mapping) and task.get("status") == "completed"
    )
    return completed, len(tasks)


def _task_list_field(value: Any) -> Optional[list[Task]]:
    if isinstance(value, Mapping):
        tasks = value.get(TASK_LIST_FIELD)
        if isinstance(tasks, list):
            return tasks
    return None
