"""
Grading engine.

Turns the course tree and an input-state snapshot into module grades,
a year average and a classification band. Pure functions only: every call
recomputes from scratch over the full snapshot, so the presentation layer
simply calls recompute_all() after each edit.
"""

import math
from typing import Iterable

from .config import (
    FIRST_THRESHOLD,
    LOWER_SECOND_THRESHOLD,
    MAX_GRADE,
    THIRD_THRESHOLD,
    UPPER_SECOND_THRESHOLD,
)
from .models import (
    ClassificationBand,
    Course,
    GradingPolicy,
    InputState,
    Module,
    ModuleAggregation,
    ModuleResult,
    Prediction,
    TaskInput,
    WeightNormalization,
    YearResult,
)

BAND_THRESHOLDS: list[tuple[float, ClassificationBand]] = [
    (FIRST_THRESHOLD, ClassificationBand.FIRST),
    (UPPER_SECOND_THRESHOLD, ClassificationBand.UPPER_SECOND),
    (LOWER_SECOND_THRESHOLD, ClassificationBand.LOWER_SECOND),
    (THIRD_THRESHOLD, ClassificationBand.THIRD),
]


def parse_task_value(value) -> float | None:
    """
    Interpret an entered task value.

    Numbers and numeric strings are accepted as-is (no range check).
    Empty, non-numeric, boolean and non-finite values count as "not entered".

    Args:
        value: Raw value from the input state.

    Returns:
        The numeric value, or None if unset.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _module_sums(
    module: Module,
    task_inputs: dict[str, TaskInput],
    policy: GradingPolicy,
) -> tuple[float, float]:
    """Return (score_sum, weight_sum) for a module."""
    score_sum = 0.0
    weight_sum = 0.0

    for task in module.tasks:
        # A task without a positive maximum cannot be scored
        if task.max_score <= 0:
            continue

        task_input = task_inputs.get(task.id) or TaskInput()
        if not task_input.active:
            continue

        value = parse_task_value(task_input.value)
        if value is not None:
            score_sum += (value / task.max_score) * task.weight * 100
            weight_sum += task.weight
        elif policy.normalization == WeightNormalization.TOTAL:
            weight_sum += task.weight

    return score_sum, weight_sum


def compute_module_grade(
    module: Module,
    task_inputs: dict[str, TaskInput],
    module_active: bool = True,
    policy: GradingPolicy | None = None,
) -> float | None:
    """
    Compute a module's percentage grade.

    Only active tasks with a value count, and the score is divided by the
    weight of those tasks, so full marks on the work done so far is 100%
    regardless of how much of the module has been attempted.

    Args:
        module: Module whose tasks are graded.
        task_inputs: Task inputs keyed by task id. Missing ids are active and unset.
        module_active: False if the module is ignored.
        policy: Grading policy (canonical defaults if None).

    Returns:
        Grade in [0, 100], or None if the module is ignored.
    """
    if not module_active:
        return None

    policy = policy or GradingPolicy()
    score_sum, weight_sum = _module_sums(module, task_inputs, policy)

    if weight_sum <= 0:
        return 0.0

    return min(MAX_GRADE, score_sum / weight_sum)


def classify_average(average: float) -> ClassificationBand:
    """Map a year average to its classification band."""
    for threshold, band in BAND_THRESHOLDS:
        if average >= threshold:
            return band
    return ClassificationBand.FAIL


def compute_year_average(
    modules: Iterable[Module],
    module_grades: dict[str, float | None],
    module_active: dict[str, bool],
    policy: GradingPolicy | None = None,
) -> YearResult:
    """
    Compute the year average and classification.

    Ignored modules are left out of both sums rather than counted as 0.
    With no active credits the average is 0.

    Args:
        modules: Modules of the year (credits are read from here).
        module_grades: Module grades keyed by module id.
        module_active: Module include flags keyed by module id (missing = active).
        policy: Grading policy (canonical defaults if None).

    Returns:
        YearResult with the average, the band and the band to highlight.
    """
    policy = policy or GradingPolicy()

    weighted_sum = 0.0
    credit_sum = 0.0
    weight_sum = 0.0

    for module in modules:
        if not module_active.get(module.id, True):
            continue
        grade = module_grades.get(module.id)
        if grade is None:
            continue

        weight = module.credits if policy.aggregation == ModuleAggregation.CREDIT else 1.0
        weighted_sum += grade * weight
        weight_sum += weight
        credit_sum += module.credits

    average = weighted_sum / weight_sum if weight_sum > 0 else 0.0
    band = classify_average(average)

    highlighted: ClassificationBand | None = band
    if weight_sum <= 0:
        highlighted = None
    elif average == 0 and policy.suppress_zero_highlight:
        highlighted = None

    return YearResult(
        average=average,
        band=band,
        highlighted_band=highlighted,
        weighted_sum=weighted_sum,
        credit_sum=credit_sum,
        weight_sum=weight_sum,
    )


def recompute_all(
    course: Course,
    state: InputState,
    policy: GradingPolicy | None = None,
) -> Prediction:
    """
    Recompute every module grade and the year average from a full snapshot.

    Args:
        course: Immutable course tree.
        state: Current input state.
        policy: Grading policy (canonical defaults if None).

    Returns:
        Prediction with one ModuleResult per module, in course order.
    """
    policy = policy or GradingPolicy()

    module_results: list[ModuleResult] = []
    grades: dict[str, float | None] = {}
    active_flags: dict[str, bool] = {}

    for module in course.modules:
        active = state.is_module_active(module.id)
        grade = compute_module_grade(module, state.tasks, module_active=active, policy=policy)
        _, weight_sum = _module_sums(module, state.tasks, policy) if active else (0.0, 0.0)

        grades[module.id] = grade
        active_flags[module.id] = active
        module_results.append(
            ModuleResult(
                module_id=module.id,
                name=module.name,
                term=module.term,
                credits=module.credits,
                active=active,
                grade=grade,
                weight_sum=weight_sum,
            )
        )

    year = compute_year_average(course.modules, grades, active_flags, policy=policy)

    return Prediction(course_name=course.name, modules=module_results, year=year)
