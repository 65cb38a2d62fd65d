"""
Loader for course files and the course index (hub).

Course files describe one year of a degree: its modules and their assessed
tasks. Every module and task gets a stable id at load time so that the rest
of the system never relies on list positions.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import TERM_ORDER, UNKNOWN_TERM
from .models import Course, CourseEntry, CourseIndex, Module, Task


class CourseDataError(ValueError):
    """Raised when a course or index file does not have the expected structure."""


def load_course(course_path: Path) -> Course:
    """
    Load a course JSON file.

    Args:
        course_path: Path to the course JSON file.

    Returns:
        Immutable Course.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        CourseDataError: If the file is not valid JSON or lacks the module list.
    """
    if not course_path.exists():
        raise FileNotFoundError(f"Course file not found: {course_path}")

    data = _read_json(course_path)
    return parse_course(data, source=str(course_path))


def parse_course(data: Any, source: str = "course data") -> Course:
    """
    Build a Course from decoded JSON.

    The module list is read from `modules` at the top level or from
    `year1.modules`; `year1.totalCredits` is kept when present.

    Args:
        data: Decoded JSON object.
        source: Label used in error messages.

    Returns:
        Immutable Course with ids assigned.

    Raises:
        CourseDataError: On structural problems.
    """
    if not isinstance(data, dict):
        raise CourseDataError(f"{source}: expected a JSON object at the top level")

    year = data.get("year1")
    total_credits = None
    if isinstance(data.get("modules"), list):
        raw_modules = data["modules"]
    elif isinstance(year, dict) and isinstance(year.get("modules"), list):
        raw_modules = year["modules"]
        total_credits = year.get("totalCredits")
    else:
        raise CourseDataError(f"{source}: no module list found (expected 'modules' or 'year1.modules')")

    modules = [_parse_module(raw, i, source) for i, raw in enumerate(raw_modules, 1)]
    _check_unique_ids(modules, source)

    try:
        return Course(
            name=data.get("courseName", ""),
            modules=modules,
            total_credits=total_credits,
        )
    except ValidationError as e:
        raise CourseDataError(f"{source}: {e}") from e


def _parse_module(raw: Any, position: int, source: str) -> Module:
    if not isinstance(raw, dict):
        raise CourseDataError(f"{source}: module {position} is not an object")
    if not isinstance(raw.get("tasks"), list):
        raise CourseDataError(f"{source}: module {position} ({raw.get('name', '?')}) has no task list")

    module_id = str(raw.get("id") or f"m{position}")

    tasks = []
    for j, raw_task in enumerate(raw["tasks"], 1):
        if not isinstance(raw_task, dict):
            raise CourseDataError(f"{source}: task {j} of module {module_id} is not an object")
        fields = dict(raw_task)
        fields["id"] = str(raw_task.get("id") or f"{module_id}.t{j}")
        fields.setdefault("name", f"Task {j}")
        # Missing or null maxScore is kept as 0 and skipped by the engine
        if fields.get("maxScore") is None:
            fields["maxScore"] = 0
        try:
            tasks.append(Task.model_validate(fields))
        except ValidationError as e:
            raise CourseDataError(f"{source}: task {j} of module {module_id}: {e}") from e

    try:
        return Module(
            id=module_id,
            name=raw.get("name", f"Module {position}"),
            credits=raw.get("credits") or 0,
            term=raw.get("term"),
            tasks=tasks,
        )
    except ValidationError as e:
        raise CourseDataError(f"{source}: module {module_id}: {e}") from e


def _check_unique_ids(modules: list[Module], source: str) -> None:
    seen: set[str] = set()
    for module in modules:
        for item_id in [module.id] + [t.id for t in module.tasks]:
            if item_id in seen:
                raise CourseDataError(f"{source}: duplicate id '{item_id}'")
            seen.add(item_id)


def load_index(index_path: Path) -> CourseIndex:
    """
    Load the course index shown on the hub.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        CourseDataError: If the file is not valid JSON or has the wrong shape.
    """
    if not index_path.exists():
        raise FileNotFoundError(f"Course index not found: {index_path}")

    data = _read_json(index_path)
    try:
        return CourseIndex.model_validate(data)
    except ValidationError as e:
        raise CourseDataError(f"{index_path}: {e}") from e


def resolve_course_file(index_path: Path, entry: CourseEntry) -> Path:
    """
    Resolve a hub entry's course file relative to the index file.

    Raises:
        CourseDataError: If the entry has no file (course not yet available).
    """
    if not entry.available:
        raise CourseDataError(f"Course '{entry.name}' is not available yet")

    path = Path(entry.file)
    if not path.is_absolute():
        path = index_path.parent / path
    return path


def group_modules_by_term(course: Course) -> list[tuple[str, list[Module]]]:
    """
    Group modules by term for display.

    Known terms come first in TERM_ORDER; any other term (including the
    "Other" bucket for modules without one) follows in first-seen order.
    """
    groups: dict[str, list[Module]] = {}
    for module in course.modules:
        groups.setdefault(module.term or UNKNOWN_TERM, []).append(module)

    ordered = [term for term in TERM_ORDER if term in groups]
    ordered.extend(term for term in groups if term not in TERM_ORDER)

    return [(term, groups[term]) for term in ordered]


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CourseDataError(f"Could not parse {path}: {e}") from e
