"""
Quizzes router — score preview and per-question analytics.
"""

from fastapi import APIRouter, Depends
from gradeflow.core.security import get_current_user, require_role, actor_from_user
from gradeflow.core.dependencies import get_gradebook_service
from gradeflow.schemas.quiz import QuizScoreRequest
from gradeflow.services.gradebook import GradebookService
from gradeflow.services.quiz_scorer import max_quiz_score, score_quiz
from gradeflow.utils.response import success_response, unwrap_or_raise

router = APIRouter(prefix="/api", tags=["Quizzes"])


@router.post("/quizzes/score")
async def score(
    body: QuizScoreRequest,
    user: dict = Depends(get_current_user),
):
    return success_response(data={
        "score": score_quiz(body.quiz_data, body.answers),
        "max_score": max_quiz_score(body.quiz_data),
    })


@router.get("/assignments/{assignment_id}/quiz-analytics")
async def get_quiz_analytics(
    assignment_id: str,
    user: dict = Depends(require_role(["teacher", "admin"])),
    gradebook: GradebookService = Depends(get_gradebook_service),
):
    analytics = unwrap_or_raise(gradebook.quiz_analytics(assignment_id, actor_from_user(user)))
    return success_response(data=analytics.model_dump(mode="json"))
