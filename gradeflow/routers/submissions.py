from fastapi import APIRouter, Depends
from gradeflow.core.security import require_role, actor_from_user
from gradeflow.core.dependencies import get_submission_lifecycle
from gradeflow.schemas.submissions import SubmissionCreate
from gradeflow.services.submissions import SubmissionLifecycle
from gradeflow.utils.response import success_response, unwrap_or_raise

router = APIRouter(prefix="/api", tags=["Submissions"])


# Student endpoints
@router.post("/assignments/{assignment_id}/submissions")
async def create_submission(
    assignment_id: str,
    body: SubmissionCreate,
    user: dict = Depends(require_role(["student"])),
    lifecycle: SubmissionLifecycle = Depends(get_submission_lifecycle),
):
    actor = actor_from_user(user)
    submission = unwrap_or_raise(lifecycle.create(assignment_id, actor.id, body.payload, actor))
    return success_response(data=submission.model_dump(mode="json"), message="Assignment submitted")


@router.get("/assignments/{assignment_id}/submissions/me")
async def get_my_submission_state(
    assignment_id: str,
    user: dict = Depends(require_role(["student"])),
    lifecycle: SubmissionLifecycle = Depends(get_submission_lifecycle),
):
    actor = actor_from_user(user)
    state = unwrap_or_raise(lifecycle.state(assignment_id, actor.id))
    return success_response(data=state.model_dump(mode="json"))


# Teacher endpoints
@router.delete("/submissions/{submission_id}")
async def reset_submission(
    submission_id: str,
    user: dict = Depends(require_role(["teacher", "admin"])),
    lifecycle: SubmissionLifecycle = Depends(get_submission_lifecycle),
):
    """Delete a submission so the student can submit again."""
    unwrap_or_raise(lifecycle.reset(submission_id, actor_from_user(user)))
    return success_response(message="Submission reset")
