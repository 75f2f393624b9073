"""
Read-side shapes produced by the aggregator: resolved grades, averages,
gradebook grids and quiz analytics.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class GradeSource(str, Enum):
    MANUAL = "MANUAL"
    AUTO_QUIZ = "AUTO_QUIZ"


class GradeResolution(BaseModel):
    value: float
    source: GradeSource


class WeightedAverage(BaseModel):
    average: float
    weight_total: float
    graded_count: int

    @property
    def has_data(self) -> bool:
        return self.weight_total > 0


class AssignmentColumn(BaseModel):
    assignment_id: str
    title: str
    weight: float
    max_score: Optional[float] = None


class GradebookCell(BaseModel):
    assignment_id: str
    submission_id: Optional[str] = None
    effective_grade: Optional[float] = None
    source: Optional[GradeSource] = None
    rubric_total: Optional[float] = None
    is_late: bool = False


class GradebookRow(BaseModel):
    student_id: str
    cells: List[GradebookCell]
    average: float
    weight_total: float


class Gradebook(BaseModel):
    project_id: str
    columns: List[AssignmentColumn]
    rows: List[GradebookRow]


class QuestionStats(BaseModel):
    question_id: str
    type: str
    responded_count: int
    correct_count: int = 0
    average_rating: Optional[float] = None
    success_rate: float = 0.0


class QuizAnalytics(BaseModel):
    assignment_id: str
    submission_count: int
    max_score: float
    average_score: float
    questions: List[QuestionStats]
