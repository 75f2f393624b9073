"""
Teacher grade overrides.

A manual grade always wins over the quiz auto-score when the aggregator
resolves a submission's effective grade. Rubric scores are stored on their
own and are never summed into ``grade``.
"""

import math
from typing import Optional

from gradeflow.core.audit import AuditEvent, AuditSink, emit_audit
from gradeflow.schemas.auth import Actor
from gradeflow.schemas.submissions import RubricScore, Submission
from gradeflow.services.repository import GradingRepository
from gradeflow.utils.result import Result, invalid_input, not_found, unauthorized


def _valid_points(value: float) -> bool:
    return math.isfinite(value) and value >= 0


class GradeOverride:
    def __init__(self, repo: GradingRepository, audit: AuditSink):
        self.repo = repo
        self.audit = audit

    def set_manual_grade(
        self,
        submission_id: str,
        grade: float,
        feedback: Optional[str],
        actor: Actor,
    ) -> Result[Submission]:
        if not actor.is_staff:
            return unauthorized("Only teachers and admins can grade")
        if not _valid_points(grade):
            return invalid_input("Grade must be a finite, non-negative number")

        submission = self.repo.update_grade(submission_id, grade, feedback)
        if submission is None:
            return not_found("Submission not found")

        emit_audit(self.audit, AuditEvent(
            action="GRADE_SET",
            description=f"Manual grade {grade:g} set",
            actor_id=actor.id,
            target_id=submission_id,
            metadata={"grade": grade, "student_id": submission.student_id},
        ))
        return Result.success(submission)

    def set_rubric_scores(
        self,
        submission_id: str,
        scores: list[RubricScore],
        actor: Actor,
    ) -> Result[Submission]:
        if not actor.is_staff:
            return unauthorized("Only teachers and admins can grade")
        if any(not _valid_points(s.score) for s in scores):
            return invalid_input("Rubric scores must be finite, non-negative numbers")
        item_ids = [s.rubric_item_id for s in scores]
        if len(item_ids) != len(set(item_ids)):
            return invalid_input("Each rubric item can be scored once")

        submission = self.repo.get_submission(submission_id)
        if submission is None:
            return not_found("Submission not found")
        assignment = self.repo.get_assignment(submission.assignment_id)
        known = {item.id for item in assignment.rubric_items} if assignment else set()
        unknown = sorted(set(item_ids) - known)
        if unknown:
            return not_found(f"Rubric items not found: {', '.join(unknown)}")

        self.repo.upsert_rubric_scores(submission_id, scores)
        updated = self.repo.get_submission(submission_id)

        emit_audit(self.audit, AuditEvent(
            action="RUBRIC_SCORED",
            description=f"Rubric scored ({len(scores)} criteria)",
            actor_id=actor.id,
            target_id=submission_id,
            metadata={"rubric_total": updated.rubric_total, "student_id": updated.student_id},
        ))
        return Result.success(updated)
