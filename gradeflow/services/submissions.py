"""
Submission lifecycle: NONE -> SUBMITTED -> (NONE after a reset).

There is no stored GRADED state. Whether a submission is graded is derived
by the aggregator from its grade or from the quiz auto-score.
"""

import logging
from typing import Optional

from gradeflow.core.audit import AuditEvent, AuditLevel, AuditSink, emit_audit
from gradeflow.schemas.assignments import Assignment
from gradeflow.schemas.auth import Actor, Role
from gradeflow.schemas.submissions import (
    QuizPayload,
    Submission,
    SubmissionPayload,
    SubmissionState,
)
from gradeflow.services.aggregator import submission_state
from gradeflow.services.repository import GradingRepository, StoreConflict, StoreNotFound
from gradeflow.utils.result import Result, conflict, invalid_input, not_found, unauthorized

logger = logging.getLogger(__name__)


def validate_payload(assignment: Assignment, payload: SubmissionPayload) -> Optional[str]:
    """Return why ``payload`` cannot be submitted to ``assignment``, or None."""
    if not assignment.is_quiz:
        if isinstance(payload, QuizPayload):
            return "Quiz answers can only be submitted to a quiz"
        return None

    if not isinstance(payload, QuizPayload):
        return "A quiz submission must carry an answer map"
    quiz_data = assignment.task.quiz_data
    known = {q.id for q in quiz_data.questions} if quiz_data else set()
    unknown = sorted(set(payload.answers) - known)
    if unknown:
        return f"Answers reference unknown questions: {', '.join(unknown)}"
    return None


class SubmissionLifecycle:
    def __init__(self, repo: GradingRepository, audit: AuditSink):
        self.repo = repo
        self.audit = audit

    def create(
        self,
        assignment_id: str,
        student_id: str,
        payload: SubmissionPayload,
        actor: Actor,
    ) -> Result[Submission]:
        if actor.role != Role.STUDENT or actor.id != student_id:
            return unauthorized("Only the owning student can submit")

        assignment = self.repo.get_assignment(assignment_id)
        if assignment is None:
            return not_found("Assignment not found")
        if not self.repo.is_enrolled(assignment.project_id, student_id):
            return unauthorized("Student is not enrolled in this project")

        problem = validate_payload(assignment, payload)
        if problem:
            return invalid_input(problem)

        if self.repo.find_submission(assignment_id, student_id) is not None:
            return conflict("A submission already exists for this assignment")

        try:
            submission = self.repo.create_submission(assignment_id, student_id, payload)
        except StoreConflict:
            # Lost a race with a concurrent create; the unique key held.
            logger.info("Duplicate submission rejected for %s / %s", assignment_id, student_id)
            return conflict("A submission already exists for this assignment")
        except StoreNotFound:
            return not_found("Assignment not found")

        emit_audit(self.audit, AuditEvent(
            action="SUBMISSION_CREATED",
            description=f"Submitted '{assignment.title}'",
            actor_id=actor.id,
            target_id=submission.id,
            metadata={"assignment_id": assignment_id, "kind": payload.kind},
        ))
        return Result.success(submission)

    def reset(self, submission_id: str, actor: Actor) -> Result[None]:
        if not actor.is_staff:
            return unauthorized("Only teachers and admins can reset submissions")

        submission = self.repo.get_submission(submission_id)
        if submission is None:
            return not_found("Submission not found")

        try:
            self.repo.reset_submission(submission_id)
        except StoreNotFound:
            return not_found("Submission not found")

        emit_audit(self.audit, AuditEvent(
            action="SUBMISSION_RESET",
            description=f"Reset submission of student {submission.student_id}",
            level=AuditLevel.WARNING,
            actor_id=actor.id,
            target_id=submission_id,
            metadata={"assignment_id": submission.assignment_id, "student_id": submission.student_id},
        ))
        return Result.success(None)

    def state(self, assignment_id: str, student_id: str) -> Result[SubmissionState]:
        assignment = self.repo.get_assignment(assignment_id)
        if assignment is None:
            return not_found("Assignment not found")
        return Result.success(submission_state(assignment, self.repo.find_submission(assignment_id, student_id)))
