"""
Projects router — assignment weights, gradebook and per-student averages.
Averages are recomputed from current submissions on every request.
"""

from fastapi import APIRouter, Depends
from gradeflow.core.security import require_role, actor_from_user
from gradeflow.core.dependencies import get_gradebook_service, get_weight_configurator
from gradeflow.schemas.assignments import WeightUpdate
from gradeflow.services.gradebook import GradebookService
from gradeflow.services.weights import WeightConfigurator
from gradeflow.utils.response import success_response, unwrap_or_raise

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.put("/{project_id}/weights")
async def update_weights(
    project_id: str,
    body: WeightUpdate,
    user: dict = Depends(require_role(["teacher", "admin"])),
    weights: WeightConfigurator = Depends(get_weight_configurator),
):
    unwrap_or_raise(weights.update_weights(project_id, body.entries, actor_from_user(user)))
    return success_response(message=f"Weights updated for {len(body.entries)} assignments")


@router.get("/{project_id}/gradebook")
async def get_gradebook(
    project_id: str,
    user: dict = Depends(require_role(["teacher", "admin"])),
    gradebook: GradebookService = Depends(get_gradebook_service),
):
    result = unwrap_or_raise(gradebook.gradebook(project_id, actor_from_user(user)))
    return success_response(data=result.model_dump(mode="json"))


@router.get("/{project_id}/students/{student_id}/average")
async def get_student_average(
    project_id: str,
    student_id: str,
    user: dict = Depends(require_role(["teacher", "admin", "student"])),
    gradebook: GradebookService = Depends(get_gradebook_service),
):
    summary = unwrap_or_raise(gradebook.student_average(project_id, student_id, actor_from_user(user)))
    return success_response(data={
        "average": summary.average,
        "weight_total": summary.weight_total,
        "graded_count": summary.graded_count,
    })


@router.get("/{project_id}/summary")
async def get_my_summary(
    project_id: str,
    user: dict = Depends(require_role(["student"])),
    gradebook: GradebookService = Depends(get_gradebook_service),
):
    row = unwrap_or_raise(gradebook.student_summary(project_id, actor_from_user(user)))
    return success_response(data=row.model_dump(mode="json"))
