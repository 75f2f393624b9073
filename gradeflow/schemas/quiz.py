"""
Quiz content: questions as a tagged union on ``type``.

Quiz JSON is authored by the web client in camelCase (``correctAnswer``,
``gradingMethod``); models accept both spellings.
"""

import logging
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class GradingMethod(str, Enum):
    AUTO = "AUTO"
    MANUAL = "MANUAL"


class RatingType(str, Enum):
    NUMERIC = "NUMERIC"
    SATISFACTION = "SATISFACTION"
    AGREEMENT = "AGREEMENT"
    PERFORMANCE = "PERFORMANCE"
    FREQUENCY = "FREQUENCY"
    INTENSITY = "INTENSITY"


class _QuizModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _QuestionBase(_QuizModel):
    id: str
    prompt: str = ""
    points: float = Field(default=1, ge=0)

    @field_validator("points", mode="before")
    @classmethod
    def _default_points(cls, value: Any) -> Any:
        return 1 if value is None else value


class MultipleChoiceQuestion(_QuestionBase):
    type: Literal["MULTIPLE_CHOICE"] = "MULTIPLE_CHOICE"
    options: List[str] = []
    correct_answer: Optional[str] = None

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _stringify_answer(cls, value: Any) -> Any:
        # Stored quiz JSON may carry numeric answers such as 2.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_options(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [str(v) if isinstance(v, (int, float)) and not isinstance(v, bool) else v for v in value]
        return value


class TextQuestion(_QuestionBase):
    type: Literal["TEXT"] = "TEXT"


class RatingQuestion(_QuestionBase):
    type: Literal["RATING"] = "RATING"
    max_rating: int = Field(default=5, ge=1)
    rating_type: RatingType = RatingType.NUMERIC

    @field_validator("max_rating", mode="before")
    @classmethod
    def _default_max_rating(cls, value: Any) -> Any:
        return 5 if value is None else value


Question = Annotated[
    Union[MultipleChoiceQuestion, TextQuestion, RatingQuestion],
    Field(discriminator="type"),
]

_question_adapter = TypeAdapter(Question)


class QuizData(_QuizModel):
    grading_method: GradingMethod = GradingMethod.MANUAL
    questions: List[Question] = []

    @field_validator("questions", mode="before")
    @classmethod
    def _drop_malformed_questions(cls, value: Any) -> Any:
        # Stored quiz JSON is not schema-checked; a broken question must not
        # make the whole quiz unscorable.
        if not isinstance(value, list):
            return []
        questions = []
        for raw in value:
            try:
                questions.append(_question_adapter.validate_python(raw))
            except ValidationError as exc:
                logger.warning("Skipping malformed quiz question %r: %s", raw, exc.error_count())
        return questions

    @field_validator("grading_method", mode="before")
    @classmethod
    def _default_grading_method(cls, value: Any) -> Any:
        return GradingMethod.MANUAL if value is None else value


class QuizScoreRequest(_QuizModel):
    quiz_data: QuizData
    answers: dict[str, Any] = {}
