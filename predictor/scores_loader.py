"""
Input-state construction.

Builds the default snapshot the calculator starts from and overlays
scenario files of entered scores (YAML or JSON) on top of it.

Scenario file shape:

    modules:
      Analysis I:              # module id or name
        active: true
        tasks:
          Final Exam: 65       # task id or name -> value
          Problem Sheet 1:
            value: 8
            active: false
"""

import json
import math
from pathlib import Path
from typing import Any

import yaml

from .config import PASS_MARK_PERCENTAGE
from .models import (
    Course,
    DefaultValuePolicy,
    GradingPolicy,
    InputState,
    Module,
    Task,
    TaskInput,
)


class ScoresError(ValueError):
    """Raised when a scenario file does not match the course."""


def default_task_value(task: Task, policy: GradingPolicy) -> float | None:
    """Initial value of an untouched task under the given policy."""
    if policy.default_value == DefaultValuePolicy.UNSET or task.max_score <= 0:
        return None
    return float(math.ceil(round(task.max_score * PASS_MARK_PERCENTAGE, 9)))


def default_input_state(course: Course, policy: GradingPolicy | None = None) -> InputState:
    """
    Build the starting snapshot: everything active, values per policy.
    """
    policy = policy or GradingPolicy()

    state = InputState()
    for module in course.modules:
        state.modules[module.id] = True
        for task in module.tasks:
            state.tasks[task.id] = TaskInput(value=default_task_value(task, policy), active=True)
    return state


def load_scores(
    scores_path: Path,
    course: Course,
    policy: GradingPolicy | None = None,
) -> InputState:
    """
    Load a scenario file and overlay it on the default snapshot.

    Args:
        scores_path: YAML or JSON file with entered scores.
        course: Course the scores belong to.
        policy: Grading policy used for the defaults.

    Returns:
        InputState with the file's entries applied.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ScoresError: If the file refers to unknown modules or tasks.
    """
    if not scores_path.exists():
        raise FileNotFoundError(f"Scores file not found: {scores_path}")

    with open(scores_path, "r", encoding="utf-8") as f:
        if scores_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    state = default_input_state(course, policy)
    apply_scores(state, course, data or {})
    return state


def apply_scores(state: InputState, course: Course, data: dict[str, Any]) -> InputState:
    """
    Apply decoded scenario data to an existing snapshot (in place).

    Raises:
        ScoresError: On unknown modules/tasks or a malformed structure.
    """
    if not isinstance(data, dict):
        raise ScoresError("Scores data must be a mapping with a 'modules' key")

    modules = data.get("modules") or {}
    if not isinstance(modules, dict):
        raise ScoresError("'modules' must be a mapping of module id or name to entries")

    for module_key, entry in modules.items():
        module = _find_module(course, str(module_key))
        if module is None:
            raise ScoresError(f"Unknown module in scores file: {module_key}")

        if entry is None:
            continue
        if isinstance(entry, bool):
            state.set_module_active(module.id, entry)
            continue
        if not isinstance(entry, dict):
            raise ScoresError(f"Entry for module '{module_key}' must be a mapping")

        if "active" in entry:
            state.set_module_active(module.id, bool(entry["active"]))

        tasks = entry.get("tasks") or {}
        if not isinstance(tasks, dict):
            raise ScoresError(f"Tasks of module '{module_key}' must be a mapping")

        for task_key, task_entry in tasks.items():
            task = _find_task(module, str(task_key))
            if task is None:
                raise ScoresError(f"Unknown task in module '{module.name}': {task_key}")

            if isinstance(task_entry, dict):
                if "value" in task_entry:
                    state.set_task_value(task.id, task_entry["value"])
                if "active" in task_entry:
                    state.set_task_active(task.id, bool(task_entry["active"]))
            else:
                state.set_task_value(task.id, task_entry)

    return state


def _find_module(course: Course, key: str) -> Module | None:
    module = course.get_module(key)
    if module is not None:
        return module
    return next((m for m in course.modules if m.name.strip().lower() == key.strip().lower()), None)


def _find_task(module: Module, key: str) -> Task | None:
    for task in module.tasks:
        if task.id == key:
            return task
    return next((t for t in module.tasks if t.name.strip().lower() == key.strip().lower()), None)
