"""
Pydantic schemas for submissions, submission payloads and grading bodies.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field

AnswerValue = Union[str, int, float, None]


class RubricScore(BaseModel):
    rubric_item_id: str
    score: float
    feedback: Optional[str] = None


class Submission(BaseModel):
    id: str
    assignment_id: str
    student_id: str
    created_at: datetime
    grade: Optional[float] = None
    feedback: Optional[str] = None
    answers: Optional[dict[str, Any]] = None
    rubric_scores: List[RubricScore] = []
    url: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None

    @property
    def rubric_total(self) -> float:
        return sum(s.score for s in self.rubric_scores)


# ---- Submission payloads ----
class UrlPayload(BaseModel):
    kind: Literal["URL"] = "URL"
    url: str


class FilePayload(BaseModel):
    """A file the storage service already uploaded; only its reference is kept."""

    kind: Literal["FILE"] = "FILE"
    file_url: str
    file_name: str
    file_type: str
    file_size: int = Field(ge=0)


class QuizPayload(BaseModel):
    kind: Literal["QUIZ"] = "QUIZ"
    answers: dict[str, AnswerValue]


SubmissionPayload = Annotated[
    Union[UrlPayload, FilePayload, QuizPayload],
    Field(discriminator="kind"),
]


class SubmissionCreate(BaseModel):
    payload: SubmissionPayload


# ---- Grading ----
class ManualGrade(BaseModel):
    grade: float
    feedback: Optional[str] = None


class RubricScoresUpdate(BaseModel):
    scores: List[RubricScore]


class SubmissionStatus(str, Enum):
    NONE = "NONE"
    SUBMITTED = "SUBMITTED"


class SubmissionState(BaseModel):
    status: SubmissionStatus
    submission_id: Optional[str] = None
    is_graded: bool = False
    is_late: bool = False
