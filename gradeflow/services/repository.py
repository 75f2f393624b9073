"""
Supabase access for the grading engine.

Reads go through the PostgREST table API. The three multi-row mutations
(create submission + task status, reset submission + task status, weight
batch) are Postgres functions called over RPC so each runs in a single
transaction; see supabase/migrations.
"""

from typing import Any, Iterable, Optional

from postgrest.exceptions import APIError
from supabase import Client

from gradeflow.schemas.assignments import Assignment, Project, RubricItem, Task, WeightEntry
from gradeflow.schemas.submissions import RubricScore, Submission, SubmissionPayload

UNIQUE_VIOLATION = "23505"
NO_DATA_FOUND = "P0002"


class StoreConflict(Exception):
    pass


class StoreNotFound(Exception):
    pass


def _translate(exc: APIError) -> Optional[Exception]:
    if exc.code == UNIQUE_VIOLATION:
        return StoreConflict(exc.message)
    if exc.code == NO_DATA_FOUND:
        return StoreNotFound(exc.message)
    return None


def _single(result: Any) -> Optional[dict]:
    # maybe_single() yields None (or empty data) when no row matches.
    if result is None or not result.data:
        return None
    data = result.data
    if isinstance(data, list):
        return data[0] if data else None
    return data


class GradingRepository:
    def __init__(self, db: Client):
        self.db = db

    # ---- Projects & assignments ----
    def get_project(self, project_id: str) -> Optional[Project]:
        row = _single(self.db.table("projects").select("*").eq("id", project_id).maybe_single().execute())
        if row is None:
            return None

        assignment_rows = (
            self.db.table("assignments")
            .select("*")
            .eq("project_id", project_id)
            .order("position")
            .execute()
        ).data or []
        students = (
            self.db.table("project_students")
            .select("student_id")
            .eq("project_id", project_id)
            .execute()
        ).data or []

        return Project(
            id=row["id"],
            name=row.get("name") or "",
            assignments=self._hydrate_assignments(assignment_rows),
            student_ids=[s["student_id"] for s in students],
        )

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        row = _single(self.db.table("assignments").select("*").eq("id", assignment_id).maybe_single().execute())
        if row is None:
            return None
        return self._hydrate_assignments([row])[0]

    def is_enrolled(self, project_id: str, student_id: str) -> bool:
        result = (
            self.db.table("project_students")
            .select("student_id")
            .eq("project_id", project_id)
            .eq("student_id", student_id)
            .execute()
        )
        return bool(result.data)

    def _hydrate_assignments(self, rows: list[dict]) -> list[Assignment]:
        if not rows:
            return []
        assignment_ids = [r["id"] for r in rows]
        task_ids = [r["task_id"] for r in rows if r.get("task_id")]

        tasks = {}
        if task_ids:
            for t in self.db.table("tasks").select("*").in_("id", task_ids).execute().data or []:
                tasks[t["id"]] = Task.model_validate(t)

        rubric: dict[str, list[RubricItem]] = {}
        items = (
            self.db.table("rubric_items")
            .select("*")
            .in_("assignment_id", assignment_ids)
            .order("position")
            .execute()
        ).data or []
        for item in items:
            rubric.setdefault(item["assignment_id"], []).append(RubricItem.model_validate(item))

        assignments = []
        for r in rows:
            data = {k: v for k, v in r.items() if k != "task_id"}
            data["task"] = tasks.get(r.get("task_id"))
            data["rubric_items"] = rubric.get(r["id"], [])
            assignments.append(Assignment.model_validate(data))
        return assignments

    # ---- Submissions ----
    def get_submission(self, submission_id: str) -> Optional[Submission]:
        row = _single(self.db.table("submissions").select("*").eq("id", submission_id).maybe_single().execute())
        if row is None:
            return None
        return self._hydrate_submissions([row])[0]

    def find_submission(self, assignment_id: str, student_id: str) -> Optional[Submission]:
        row = _single(
            self.db.table("submissions")
            .select("*")
            .eq("assignment_id", assignment_id)
            .eq("student_id", student_id)
            .maybe_single()
            .execute()
        )
        if row is None:
            return None
        return self._hydrate_submissions([row])[0]

    def list_submissions(self, assignment_ids: Iterable[str], student_id: Optional[str] = None) -> list[Submission]:
        assignment_ids = list(assignment_ids)
        if not assignment_ids:
            return []
        query = self.db.table("submissions").select("*").in_("assignment_id", assignment_ids)
        if student_id is not None:
            query = query.eq("student_id", student_id)
        rows = query.order("created_at").execute().data or []
        return self._hydrate_submissions(rows)

    def _hydrate_submissions(self, rows: list[dict]) -> list[Submission]:
        if not rows:
            return []
        scores: dict[str, list[dict]] = {}
        score_rows = (
            self.db.table("rubric_scores")
            .select("*")
            .in_("submission_id", [r["id"] for r in rows])
            .execute()
        ).data or []
        for s in score_rows:
            scores.setdefault(s["submission_id"], []).append(s)
        return [Submission.model_validate({**r, "rubric_scores": scores.get(r["id"], [])}) for r in rows]

    # ---- Atomic units ----
    def _rpc(self, name: str, params: dict[str, Any]):
        try:
            return self.db.rpc(name, params).execute()
        except APIError as exc:
            translated = _translate(exc)
            if translated is None:
                raise
            raise translated from exc

    def create_submission(self, assignment_id: str, student_id: str, payload: SubmissionPayload) -> Submission:
        """Insert the submission and mark the task SUBMITTED in one transaction."""
        params = {
            "p_assignment_id": assignment_id,
            "p_student_id": student_id,
            "p_payload": payload.model_dump(exclude={"kind"}),
        }
        result = self._rpc("create_submission", params)
        return Submission.model_validate(_single(result))

    def reset_submission(self, submission_id: str) -> None:
        """Delete the submission and, if it was the last one, return the task to TODO."""
        self._rpc("reset_submission", {"p_submission_id": submission_id})

    def apply_weights(self, project_id: str, entries: list[WeightEntry]) -> None:
        params = {
            "p_project_id": project_id,
            "p_entries": [e.model_dump() for e in entries],
        }
        self._rpc("update_assignment_weights", params)

    # ---- Single-row grading writes ----
    def update_grade(self, submission_id: str, grade: float, feedback: Optional[str]) -> Optional[Submission]:
        data: dict[str, Any] = {"grade": grade}
        if feedback is not None:
            data["feedback"] = feedback
        result = self.db.table("submissions").update(data).eq("id", submission_id).execute()
        if not result.data:
            return None
        return self._hydrate_submissions(result.data)[0]

    def upsert_rubric_scores(self, submission_id: str, scores: list[RubricScore]) -> None:
        records = [{"submission_id": submission_id, **s.model_dump()} for s in scores]
        self.db.table("rubric_scores").upsert(records, on_conflict="submission_id,rubric_item_id").execute()
