"""Tests for the read-side gradebook views over stored state."""
import pytest

from conftest import quiz_json
from gradeflow.schemas.auth import Actor, Role
from gradeflow.schemas.gradebook import GradeSource
from gradeflow.services.gradebook import GradebookService
from gradeflow.utils.result import ErrorKind


@pytest.fixture
def service(repo):
    return GradebookService(repo)


@pytest.fixture
def course(seed):
    project_id = seed.project(students=["s1", "s2"])
    quiz = seed.assignment(project_id, "Quiz", weight=2, task_id=seed.task("QUIZ", quiz_json()), position=0)
    essay = seed.assignment(project_id, "Essay", weight=1, position=1)
    seed.submission(quiz, "s1", answers={"q1": "A", "q2": "C"})
    seed.submission(essay, "s1", grade=4.0)
    seed.submission(quiz, "s2", answers={"q1": "B", "q2": "B"})
    return project_id, quiz, essay


def test_gradebook(service, course, teacher):
    project_id, quiz, essay = course

    gradebook = service.gradebook(project_id, teacher).value

    assert [c.assignment_id for c in gradebook.columns] == [quiz, essay]
    rows = {r.student_id: r for r in gradebook.rows}
    assert rows["s1"].average == pytest.approx((1 * 2 + 4.0 * 1) / 3)
    assert rows["s2"].cells[0].source == GradeSource.AUTO_QUIZ
    assert rows["s2"].average == 1


def test_gradebook_is_staff_only(service, course, student):
    project_id, _, _ = course
    assert service.gradebook(project_id, student).error.kind == ErrorKind.UNAUTHORIZED


def test_average_reflects_latest_state(service, course, teacher, db):
    project_id, _, essay = course
    before = service.student_average(project_id, "s1", teacher).value.average
    db.table("submissions").update({"grade": 1.0}).eq("assignment_id", essay).eq("student_id", "s1").execute()
    after = service.student_average(project_id, "s1", teacher).value.average
    assert before != after
    assert after == pytest.approx((1 * 2 + 1.0) / 3)


def test_students_see_only_their_own_average(service, course):
    project_id, _, _ = course
    s1 = Actor(id="s1", role=Role.STUDENT)
    assert service.student_average(project_id, "s1", s1).ok
    assert service.student_average(project_id, "s2", s1).error.kind == ErrorKind.UNAUTHORIZED


def test_student_summary(service, course):
    project_id, _, essay = course
    row = service.student_summary(project_id, Actor(id="s1", role=Role.STUDENT)).value
    assert row.student_id == "s1"
    assert row.cells[1].effective_grade == 4.0
    outsider = Actor(id="x", role=Role.STUDENT)
    assert service.student_summary(project_id, outsider).error.kind == ErrorKind.UNAUTHORIZED


def test_unknown_project(service, teacher):
    assert service.gradebook("missing", teacher).error.kind == ErrorKind.NOT_FOUND
    assert service.student_average("missing", "s1", teacher).error.kind == ErrorKind.NOT_FOUND


def test_quiz_analytics(service, course, teacher):
    _, quiz, essay = course
    analytics = service.quiz_analytics(quiz, teacher).value
    assert analytics.submission_count == 2
    assert analytics.average_score == 1.0
    assert analytics.questions[1].correct_count == 1
    assert service.quiz_analytics(essay, teacher).error.kind == ErrorKind.INVALID_INPUT
