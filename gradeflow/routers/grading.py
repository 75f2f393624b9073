"""
Grading router — manual grades and rubric scores on existing submissions.
"""

from fastapi import APIRouter, Depends
from gradeflow.core.security import require_role, actor_from_user
from gradeflow.core.dependencies import get_grade_override
from gradeflow.schemas.submissions import ManualGrade, RubricScoresUpdate
from gradeflow.services.grading import GradeOverride
from gradeflow.utils.response import success_response, unwrap_or_raise

router = APIRouter(prefix="/api/submissions", tags=["Grading"])


@router.patch("/{submission_id}/grade")
async def grade_submission(
    submission_id: str,
    body: ManualGrade,
    user: dict = Depends(require_role(["teacher", "admin"])),
    grading: GradeOverride = Depends(get_grade_override),
):
    submission = unwrap_or_raise(
        grading.set_manual_grade(submission_id, body.grade, body.feedback, actor_from_user(user))
    )
    return success_response(data=submission.model_dump(mode="json"), message="Submission graded")


@router.put("/{submission_id}/rubric-scores")
async def score_rubric(
    submission_id: str,
    body: RubricScoresUpdate,
    user: dict = Depends(require_role(["teacher", "admin"])),
    grading: GradeOverride = Depends(get_grade_override),
):
    submission = unwrap_or_raise(grading.set_rubric_scores(submission_id, body.scores, actor_from_user(user)))
    return success_response(data=submission.model_dump(mode="json"), message="Rubric scores saved")
