"""
Quiz auto-scoring.

Pure functions over ``QuizData`` and a submitted answer map. Scoring never
raises: a missing, malformed or unexpected answer simply earns nothing for
that question, so a quiz score is always computable.

Per-question credit:
- MULTIPLE_CHOICE: full points when the answer equals ``correct_answer``.
- RATING: full points when the answer is a number in ``[1, max_rating]``.
  Ratings have no correct value, so this credits completion.
- TEXT: nothing. Free text is credited only through a manual grade.
"""

import math
from collections.abc import Mapping
from typing import Any, Iterable, Optional

from gradeflow.schemas.gradebook import QuestionStats, QuizAnalytics
from gradeflow.schemas.quiz import (
    MultipleChoiceQuestion,
    Question,
    QuizData,
    RatingQuestion,
    TextQuestion,
)


def _is_blank(answer: Any) -> bool:
    return answer is None or (isinstance(answer, str) and not answer.strip())


def parse_rating(answer: Any) -> Optional[float]:
    """Return the numeric rating carried by ``answer``, or None."""
    if isinstance(answer, bool):
        return None
    if isinstance(answer, (int, float)):
        value = float(answer)
    elif isinstance(answer, str):
        try:
            value = float(answer.strip())
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def is_correct_choice(question: MultipleChoiceQuestion, answer: Any) -> bool:
    if isinstance(answer, (int, float)) and not isinstance(answer, bool):
        answer = str(answer)
    if question.correct_answer is None or not isinstance(answer, str):
        return False
    return answer == question.correct_answer


def is_valid_rating(question: RatingQuestion, answer: Any) -> bool:
    value = parse_rating(answer)
    return value is not None and 1 <= value <= question.max_rating


def question_score(question: Question, answer: Any) -> float:
    if _is_blank(answer):
        return 0.0
    if isinstance(question, MultipleChoiceQuestion):
        return question.points if is_correct_choice(question, answer) else 0.0
    if isinstance(question, RatingQuestion):
        return question.points if is_valid_rating(question, answer) else 0.0
    if isinstance(question, TextQuestion):
        return 0.0
    return 0.0


def max_quiz_score(quiz_data: Optional[QuizData]) -> float:
    """Sum of points over every question, whatever its type."""
    if quiz_data is None:
        return 0.0
    return float(sum(q.points for q in quiz_data.questions))


def score_quiz(quiz_data: Optional[QuizData], answers: Any) -> float:
    """Score one submission. Missing keys count as unanswered."""
    if quiz_data is None:
        return 0.0
    if not isinstance(answers, Mapping):
        answers = {}

    total = 0.0
    for question in quiz_data.questions:
        total += question_score(question, answers.get(question.id))

    return min(max(total, 0.0), max_quiz_score(quiz_data))


def quiz_analytics(
    assignment_id: str,
    quiz_data: QuizData,
    submissions: Iterable[tuple[Any, Optional[float]]],
) -> QuizAnalytics:
    """
    Per-question statistics across submissions.

    ``submissions`` yields ``(answers, effective_grade)`` pairs; the effective
    grade is what the gradebook shows (manual grade or auto score) and feeds
    the mean score.
    """
    pairs = list(submissions)
    stats = []
    for question in quiz_data.questions:
        responded = 0
        correct = 0
        rating_sum = 0.0
        rated = 0
        for answers, _ in pairs:
            answer = answers.get(question.id) if isinstance(answers, Mapping) else None
            if _is_blank(answer):
                continue
            responded += 1
            if isinstance(question, MultipleChoiceQuestion) and is_correct_choice(question, answer):
                correct += 1
            elif isinstance(question, RatingQuestion) and is_valid_rating(question, answer):
                rating_sum += parse_rating(answer)
                rated += 1

        entry = QuestionStats(question_id=question.id, type=question.type, responded_count=responded)
        if isinstance(question, RatingQuestion):
            if rated:
                entry.average_rating = rating_sum / rated
                entry.success_rate = round(entry.average_rating / question.max_rating * 100, 1)
        elif isinstance(question, MultipleChoiceQuestion):
            entry.correct_count = correct
            entry.success_rate = round(correct / responded * 100, 1) if responded else 0.0
        stats.append(entry)

    grades = [grade for _, grade in pairs if grade is not None]
    return QuizAnalytics(
        assignment_id=assignment_id,
        submission_count=len(pairs),
        max_score=max_quiz_score(quiz_data),
        average_score=round(sum(grades) / len(grades), 2) if grades else 0.0,
        questions=stats,
    )
