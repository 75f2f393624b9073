"""
FastAPI providers for the grading services. Tests swap these out through
``app.dependency_overrides``.
"""

from fastapi import Depends

from gradeflow.core.audit import AuditSink, get_audit_sink
from gradeflow.core.database import get_supabase
from gradeflow.services.gradebook import GradebookService
from gradeflow.services.grading import GradeOverride
from gradeflow.services.repository import GradingRepository
from gradeflow.services.submissions import SubmissionLifecycle
from gradeflow.services.weights import WeightConfigurator


def get_repository() -> GradingRepository:
    return GradingRepository(get_supabase())


def get_submission_lifecycle(
    repo: GradingRepository = Depends(get_repository),
    audit: AuditSink = Depends(get_audit_sink),
) -> SubmissionLifecycle:
    return SubmissionLifecycle(repo, audit)


def get_grade_override(
    repo: GradingRepository = Depends(get_repository),
    audit: AuditSink = Depends(get_audit_sink),
) -> GradeOverride:
    return GradeOverride(repo, audit)


def get_weight_configurator(
    repo: GradingRepository = Depends(get_repository),
    audit: AuditSink = Depends(get_audit_sink),
) -> WeightConfigurator:
    return WeightConfigurator(repo, audit)


def get_gradebook_service(repo: GradingRepository = Depends(get_repository)) -> GradebookService:
    return GradebookService(repo)
