"""
Pydantic models for the grade predictor.

Defines the immutable course tree loaded from JSON, the course index (hub),
the mutable input state owned by the presentation layer, the grading policy,
and the result types produced by the engine.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Course data
# ---------------------------------------------------------------------------

class Task(BaseModel):
    """
    A single assessed item (exam, coursework, quiz) within a module.

    Attributes:
        id: Stable identifier, unique within the course.
        name: Task title as shown to the student.
        weight: Fraction of the module grade (0-1). Siblings need not sum to 1.
        max_score: Maximum raw score. Tasks with max_score <= 0 are skipped by the engine.
        date: Optional free-text due date.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Stable task identifier")
    name: str = Field(..., description="Task title")
    weight: float = Field(default=0.0, description="Fraction of the module grade")
    max_score: float = Field(default=0.0, alias="maxScore", description="Maximum raw score")
    date: str | None = Field(default=None, description="Optional due date")


class Module(BaseModel):
    """
    A course unit with credits and an ordered list of tasks.

    Attributes:
        id: Stable identifier, unique within the course.
        name: Module title.
        credits: Weight of the module within the year average.
        term: Free-text term label, used only for grouping.
        tasks: Ordered tasks.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Stable module identifier")
    name: str = Field(..., description="Module title")
    credits: float = Field(default=0.0, ge=0, description="Module credits")
    term: str | None = Field(default=None, description="Term label")
    tasks: tuple[Task, ...] = Field(default_factory=tuple, description="Assessed tasks")


class Course(BaseModel):
    """
    A degree course year as loaded from its JSON file.

    Attributes:
        name: Course title.
        modules: Ordered modules.
        total_credits: Declared credit total for the year, if the file gives one.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., alias="courseName", description="Course title")
    modules: tuple[Module, ...] = Field(default_factory=tuple, description="Modules of the year")
    total_credits: float | None = Field(
        default=None, alias="totalCredits", description="Declared credit total"
    )

    def get_module(self, module_id: str) -> Module | None:
        return next((m for m in self.modules if m.id == module_id), None)


# ---------------------------------------------------------------------------
# Course index (hub)
# ---------------------------------------------------------------------------

class Announcement(BaseModel):
    title: str = Field(default="", description="Announcement heading")
    message: str = Field(default="", description="Announcement body")
    footer: str = Field(default="", description="Announcement footer")


class CourseEntry(BaseModel):
    """
    A course listed in the hub. Entries without a file are shown but cannot be opened.
    """

    name: str = Field(..., description="Course title")
    file: str | None = Field(default=None, description="Course JSON path, relative to the index")

    @property
    def available(self) -> bool:
        return bool(self.file)


class Department(BaseModel):
    name: str = Field(..., description="Department name")
    courses: list[CourseEntry] = Field(default_factory=list, description="Courses offered")


class CourseIndex(BaseModel):
    """
    The hub: an announcement plus the courses grouped by department.
    """

    announcement: Announcement = Field(default_factory=Announcement, description="Hub announcement")
    departments: list[Department] = Field(default_factory=list, description="Departments")

    def find_course(self, name: str) -> CourseEntry | None:
        """Find a course entry by name (case-insensitive)."""
        wanted = name.strip().lower()
        for department in self.departments:
            for entry in department.courses:
                if entry.name.strip().lower() == wanted:
                    return entry
        return None


# ---------------------------------------------------------------------------
# Input state
# ---------------------------------------------------------------------------

class TaskInput(BaseModel):
    """
    Current value and include flag of one task.

    The value is kept as entered (number or text); the engine decides
    whether it is usable.
    """

    value: float | str | None = Field(default=None, description="Entered score or None if unset")
    active: bool = Field(default=True, description="Whether the task is included")

    @field_validator("value", mode="before")
    @classmethod
    def _bool_is_unset(cls, value):
        # bool is an int subclass; lax mode would otherwise store True as 1.0
        if isinstance(value, bool):
            return None
        return value


class InputState(BaseModel):
    """
    Snapshot of everything the student has entered, keyed by stable ids.

    Missing entries mean "active, no value entered".
    """

    tasks: dict[str, TaskInput] = Field(default_factory=dict, description="Task inputs by task id")
    modules: dict[str, bool] = Field(default_factory=dict, description="Module include flags by module id")

    def task_input(self, task_id: str) -> TaskInput:
        return self.tasks.get(task_id) or TaskInput()

    def is_module_active(self, module_id: str) -> bool:
        return self.modules.get(module_id, True)

    def set_task_value(self, task_id: str, value: float | str | None) -> None:
        current = self.task_input(task_id)
        self.tasks[task_id] = TaskInput(value=value, active=current.active)

    def set_task_active(self, task_id: str, active: bool) -> None:
        current = self.task_input(task_id)
        self.tasks[task_id] = TaskInput(value=current.value, active=active)

    def set_module_active(self, module_id: str, active: bool) -> None:
        self.modules[module_id] = active


# ---------------------------------------------------------------------------
# Grading policy
# ---------------------------------------------------------------------------

class DefaultValuePolicy(str, Enum):
    PASS_MARK = "pass_mark"
    UNSET = "unset"


class WeightNormalization(str, Enum):
    """
    ACTIVE: divide by the weights of tasks that have a value (rewards attempted work).
    TOTAL: divide by the weights of all included tasks (ties the grade to completion).
    """

    ACTIVE = "active"
    TOTAL = "total"


class ModuleAggregation(str, Enum):
    CREDIT = "credit"
    EQUAL = "equal"


class GradingPolicy(BaseModel):
    """
    Knobs for the grading rules. The defaults are the canonical calculator.
    """

    default_value: DefaultValuePolicy = Field(
        default=DefaultValuePolicy.PASS_MARK, description="Initial value for untouched tasks"
    )
    normalization: WeightNormalization = Field(
        default=WeightNormalization.ACTIVE, description="Divisor for the module grade"
    )
    aggregation: ModuleAggregation = Field(
        default=ModuleAggregation.CREDIT, description="How modules are weighted in the year average"
    )
    suppress_zero_highlight: bool = Field(
        default=True, description="Highlight no band when the year average is exactly 0"
    )


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class ClassificationBand(str, Enum):
    FIRST = "1st"
    UPPER_SECOND = "2:1"
    LOWER_SECOND = "2:2"
    THIRD = "3rd"
    FAIL = "Fail"

    @property
    def title(self) -> str:
        return {
            "1st": "First",
            "2:1": "Upper Second",
            "2:2": "Lower Second",
            "3rd": "Third",
            "Fail": "Fail",
        }[self.value]


class ModuleResult(BaseModel):
    """
    Grade of one module.

    Attributes:
        module_id: Stable module identifier.
        name: Module title.
        term: Term label.
        credits: Module credits.
        active: Whether the module is included in the year average.
        grade: Percentage in [0, 100], or None when the module is ignored.
        weight_sum: Task weight the grade was normalized by.
    """

    module_id: str = Field(..., description="Stable module identifier")
    name: str = Field(..., description="Module title")
    term: str | None = Field(default=None, description="Term label")
    credits: float = Field(..., ge=0, description="Module credits")
    active: bool = Field(..., description="Whether the module is included")
    grade: float | None = Field(default=None, description="Module percentage, None if ignored")
    weight_sum: float = Field(default=0.0, ge=0, description="Normalizing task weight")

    @property
    def display(self) -> str:
        if self.grade is None:
            return "Ignored"
        return f"{self.grade:.1f}%"


class YearResult(BaseModel):
    """
    Year average and classification.

    Attributes:
        average: Weighted mean of active module grades (0 when nothing is active).
        band: Matched classification band.
        highlighted_band: Band to highlight on the summary card, or None.
        weighted_sum: Sum of grade x weight over active modules.
        credit_sum: Sum of credits over active modules.
        weight_sum: Divisor actually used (credit_sum, or module count for equal weighting).
    """

    average: float = Field(..., description="Year average percentage")
    band: ClassificationBand = Field(..., description="Classification band")
    highlighted_band: ClassificationBand | None = Field(default=None, description="Band to highlight")
    weighted_sum: float = Field(default=0.0, description="Sum of grade x weight")
    credit_sum: float = Field(default=0.0, ge=0, description="Active credits")
    weight_sum: float = Field(default=0.0, ge=0, description="Divisor used for the average")

    @property
    def display(self) -> str:
        return f"{self.average:.2f}% ({self.band.value})"


class Prediction(BaseModel):
    """
    Full output of one recomputation.
    """

    course_name: str = Field(..., description="Course title")
    modules: list[ModuleResult] = Field(default_factory=list, description="Per-module results")
    year: YearResult = Field(..., description="Year average and band")

    def module_result(self, module_id: str) -> ModuleResult | None:
        return next((m for m in self.modules if m.module_id == module_id), None)
