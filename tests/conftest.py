"""
Shared fixtures for the grading engine tests.
An in-memory stand-in for the Supabase client covers the table calls the
repository makes and the three RPC functions from supabase/migrations.
Zero network calls.
"""
import copy
import uuid
from datetime import datetime, timezone

import pytest
from postgrest.exceptions import APIError

from gradeflow.schemas.auth import Actor, Role
from gradeflow.services.repository import GradingRepository

UNIQUE_KEYS = {
    "submissions": ("assignment_id", "student_id"),
    "rubric_scores": ("submission_id", "rubric_item_id"),
    "project_students": ("project_id", "student_id"),
}


def _api_error(code, message):
    return APIError({"code": code, "message": message, "details": "", "hint": ""})


class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = len(data) if isinstance(data, list) else None


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.sort = None
        self.single = False
        self.on_conflict = None

    # -- verbs --
    def select(self, *columns, **kwargs):
        self.op = "select"
        return self

    def insert(self, data):
        self.op, self.payload = "insert", data
        return self

    def update(self, data):
        self.op, self.payload = "update", data
        return self

    def upsert(self, data, on_conflict=""):
        self.op, self.payload, self.on_conflict = "upsert", data, on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    # -- modifiers --
    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.sort = (column, desc)
        return self

    def maybe_single(self):
        self.single = True
        return self

    def _matches(self):
        return [r for r in self.db.rows(self.table) if all(f(r) for f in self.filters)]

    def execute(self):
        if self.db.fail_tables and self.table in self.db.fail_tables:
            raise _api_error("08006", f"{self.table} unavailable")

        if self.op == "select":
            rows = [copy.deepcopy(r) for r in self._matches()]
            if self.sort:
                column, desc = self.sort
                rows.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
            if self.single:
                if not rows:
                    return None
                if len(rows) > 1:
                    raise _api_error("PGRST116", "multiple rows returned")
                return FakeResponse(rows[0])
            return FakeResponse(rows)

        if self.op == "insert":
            records = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResponse([self.db.insert(self.table, r) for r in records])

        if self.op == "upsert":
            keys = tuple(k.strip() for k in self.on_conflict.split(","))
            out = []
            for record in self.payload:
                existing = next(
                    (r for r in self.db.rows(self.table) if all(r.get(k) == record.get(k) for k in keys)),
                    None,
                )
                if existing is not None:
                    existing.update(copy.deepcopy(record))
                    out.append(copy.deepcopy(existing))
                else:
                    out.append(self.db.insert(self.table, record))
            return FakeResponse(out)

        if self.op == "update":
            rows = self._matches()
            for r in rows:
                r.update(copy.deepcopy(self.payload))
            return FakeResponse([copy.deepcopy(r) for r in rows])

        if self.op == "delete":
            rows = self._matches()
            self.db.tables[self.table] = [r for r in self.db.rows(self.table) if r not in rows]
            return FakeResponse(rows)

        raise AssertionError(self.op)


class FakeRpc:
    def __init__(self, db, name, params):
        self.db, self.name, self.params = db, name, params

    def execute(self):
        return FakeResponse(getattr(self.db, f"_rpc_{self.name}")(**self.params))


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.fail_tables = set()

    def rows(self, table):
        return self.tables.setdefault(table, [])

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)

    def insert(self, table, record):
        row = copy.deepcopy(record)
        row.setdefault("id", str(uuid.uuid4()))
        keys = UNIQUE_KEYS.get(table)
        if keys and any(all(r.get(k) == row.get(k) for k in keys) for r in self.rows(table)):
            raise _api_error("23505", f"duplicate key value violates unique constraint on {table}")
        self.rows(table).append(row)
        return copy.deepcopy(row)

    def _find(self, table, **match):
        return next((r for r in self.rows(table) if all(r.get(k) == v for k, v in match.items())), None)

    # -- transactional functions (see supabase/migrations) --
    def _rpc_create_submission(self, p_assignment_id, p_student_id, p_payload):
        assignment = self._find("assignments", id=p_assignment_id)
        if assignment is None:
            raise _api_error("P0002", f"assignment {p_assignment_id} not found")
        row = self.insert("submissions", {
            "assignment_id": p_assignment_id,
            "student_id": p_student_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "grade": None,
            "feedback": None,
            "answers": p_payload.get("answers"),
            "url": p_payload.get("url"),
            "file_url": p_payload.get("file_url"),
            "file_name": p_payload.get("file_name"),
            "file_type": p_payload.get("file_type"),
            "file_size": p_payload.get("file_size"),
        })
        task = self._find("tasks", id=assignment.get("task_id"))
        if task is not None:
            task["status"] = "SUBMITTED"
        return row

    def _rpc_reset_submission(self, p_submission_id):
        submission = self._find("submissions", id=p_submission_id)
        if submission is None:
            raise _api_error("P0002", f"submission {p_submission_id} not found")
        self.tables["submissions"] = [r for r in self.rows("submissions") if r["id"] != p_submission_id]
        self.tables["rubric_scores"] = [
            r for r in self.rows("rubric_scores") if r["submission_id"] != p_submission_id
        ]
        assignment = self._find("assignments", id=submission["assignment_id"])
        task = self._find("tasks", id=assignment.get("task_id")) if assignment else None
        if task is not None and self._find("submissions", assignment_id=assignment["id"]) is None:
            task["status"] = "TODO"
        return None

    def _rpc_update_assignment_weights(self, p_project_id, p_entries):
        targets = []
        for entry in p_entries:
            row = self._find("assignments", id=entry["assignment_id"], project_id=p_project_id)
            if row is None:
                raise _api_error("P0002", f"assignment {entry['assignment_id']} not in project")
            targets.append((row, entry["weight"]))
        for row, weight in targets:
            row["weight"] = weight
        return None


class RecordingAuditSink:
    def __init__(self, fail=False):
        self.events = []
        self.fail = fail

    def record(self, event):
        if self.fail:
            raise RuntimeError("audit store down")
        self.events.append(event)

    @property
    def actions(self):
        return [e.action for e in self.events]


class Seeder:
    """Builds rows directly in the fake store."""

    def __init__(self, db):
        self.db = db

    def project(self, students=(), name="Project"):
        project = self.db.insert("projects", {"name": name})
        for student_id in students:
            self.db.insert("project_students", {"project_id": project["id"], "student_id": student_id})
        return project["id"]

    def task(self, type="TASK", quiz_data=None, status="TODO"):
        return self.db.insert("tasks", {"type": type, "status": status, "quiz_data": quiz_data})["id"]

    def assignment(self, project_id, title="Assignment", weight=1, task_id=None, due_date=None, position=0):
        return self.db.insert("assignments", {
            "project_id": project_id,
            "title": title,
            "weight": weight,
            "task_id": task_id,
            "due_date": due_date,
            "position": position,
        })["id"]

    def rubric_item(self, assignment_id, criterion="Clarity", max_points=5, position=0):
        return self.db.insert("rubric_items", {
            "assignment_id": assignment_id,
            "criterion": criterion,
            "max_points": max_points,
            "position": position,
        })["id"]

    def submission(self, assignment_id, student_id, grade=None, answers=None, created_at=None):
        return self.db.insert("submissions", {
            "assignment_id": assignment_id,
            "student_id": student_id,
            "created_at": created_at or datetime.now(timezone.utc).isoformat(),
            "grade": grade,
            "feedback": None,
            "answers": answers,
        })["id"]


def quiz_json(method="AUTO"):
    return {
        "gradingMethod": method,
        "questions": [
            {"id": "q1", "type": "MULTIPLE_CHOICE", "prompt": "1+1?", "options": ["A", "B"], "correctAnswer": "A"},
            {"id": "q2", "type": "MULTIPLE_CHOICE", "prompt": "2+2?", "options": ["A", "B"], "correctAnswer": "B"},
        ],
    }


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def repo(db):
    return GradingRepository(db)


@pytest.fixture
def audit():
    return RecordingAuditSink()


@pytest.fixture
def seed(db):
    return Seeder(db)


@pytest.fixture
def teacher():
    return Actor(id="teacher-1", role=Role.TEACHER)


@pytest.fixture
def admin():
    return Actor(id="admin-1", role=Role.ADMIN)


@pytest.fixture
def student():
    return Actor(id="student-1", role=Role.STUDENT)
