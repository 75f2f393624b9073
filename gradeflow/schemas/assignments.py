"""
Pydantic schemas for projects, assignments, tasks, rubrics and weights.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from gradeflow.schemas.quiz import GradingMethod, QuizData

DEFAULT_WEIGHT = 1.0


class TaskType(str, Enum):
    TASK = "TASK"
    QUIZ = "QUIZ"


class TaskStatus(str, Enum):
    # No GRADED value: "graded" is derived from the submission, see
    # gradeflow.services.aggregator.is_graded.
    TODO = "TODO"
    SUBMITTED = "SUBMITTED"


class Task(BaseModel):
    id: str
    type: TaskType = TaskType.TASK
    status: TaskStatus = TaskStatus.TODO
    quiz_data: Optional[QuizData] = None

    @property
    def is_auto_quiz(self) -> bool:
        return (
            self.type == TaskType.QUIZ
            and self.quiz_data is not None
            and self.quiz_data.grading_method == GradingMethod.AUTO
        )


class RubricItem(BaseModel):
    id: str
    assignment_id: str
    criterion: str
    max_points: float = Field(ge=0)
    position: int = 0


class Assignment(BaseModel):
    id: str
    project_id: str
    title: str
    weight: float = DEFAULT_WEIGHT
    due_date: Optional[datetime] = None
    rubric_items: List[RubricItem] = []
    task: Optional[Task] = None
    position: int = 0

    @field_validator("weight", mode="before")
    @classmethod
    def _default_weight(cls, value: Any) -> Any:
        return DEFAULT_WEIGHT if value is None else value

    @property
    def is_quiz(self) -> bool:
        return self.task is not None and self.task.type == TaskType.QUIZ

    @property
    def rubric_max(self) -> float:
        return sum(item.max_points for item in self.rubric_items)


class Project(BaseModel):
    id: str
    name: str = ""
    assignments: List[Assignment] = []
    student_ids: List[str] = []


# ---- Weight configuration ----
class WeightEntry(BaseModel):
    assignment_id: str
    weight: float


class WeightUpdate(BaseModel):
    entries: List[WeightEntry]
