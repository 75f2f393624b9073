"""
Per-assignment weight configuration.

Weights are relative; they are not required to sum to 100. The aggregator
normalizes by the weights of graded work at read time.
"""

import logging
import math

from gradeflow.core.audit import AuditEvent, AuditLevel, AuditSink, emit_audit
from gradeflow.schemas.assignments import WeightEntry
from gradeflow.schemas.auth import Actor
from gradeflow.services.repository import GradingRepository, StoreNotFound
from gradeflow.utils.result import Result, invalid_input, not_found, unauthorized

logger = logging.getLogger(__name__)


class WeightConfigurator:
    def __init__(self, repo: GradingRepository, audit: AuditSink):
        self.repo = repo
        self.audit = audit

    def update_weights(self, project_id: str, entries: list[WeightEntry], actor: Actor) -> Result[None]:
        if not actor.is_staff:
            return unauthorized("Only teachers and admins can change weights")
        for entry in entries:
            if not math.isfinite(entry.weight) or entry.weight < 0:
                return invalid_input(f"Invalid weight {entry.weight} for assignment {entry.assignment_id}")
        ids = [e.assignment_id for e in entries]
        if len(ids) != len(set(ids)):
            return invalid_input("Each assignment can appear once per weight update")

        project = self.repo.get_project(project_id)
        if project is None:
            return not_found("Project not found")
        unknown = sorted(set(ids) - {a.id for a in project.assignments})
        if unknown:
            return not_found(f"Assignments not in project: {', '.join(unknown)}")

        try:
            self.repo.apply_weights(project_id, entries)
        except StoreNotFound as exc:
            return not_found(str(exc))

        zero = [e.assignment_id for e in entries if e.weight == 0]
        if zero:
            # Zero weight is accepted but excludes the assignment from averages.
            logger.warning("Project %s: zero weight for %s", project_id, ", ".join(zero))

        emit_audit(self.audit, AuditEvent(
            action="WEIGHTS_UPDATED",
            description=f"Updated {len(entries)} assignment weight(s)",
            level=AuditLevel.WARNING if zero else AuditLevel.INFO,
            actor_id=actor.id,
            target_id=project_id,
            metadata={
                "weights": {e.assignment_id: e.weight for e in entries},
                "zero_weight": zero,
            },
        ))
        return Result.success(None)
