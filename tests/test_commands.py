"""Tests for optimistic edit commands."""
from gradeflow.services.commands import EditCommand, EditStatus
from gradeflow.services.grading import GradeOverride
from gradeflow.utils.result import ErrorKind, Result


def test_successful_edit_keeps_proposed_value():
    command = EditCommand(previous=3.0, proposed=4.0)
    assert command.run(lambda value: Result.success(value)).ok
    assert command.status == EditStatus.APPLIED
    assert command.displayed == 4.0


def test_failed_grade_edit_rolls_back(repo, audit, seed, student):
    project_id = seed.project(students=[student.id])
    submission_id = seed.submission(seed.assignment(project_id), student.id, grade=3.0)
    grading = GradeOverride(repo, audit)
    command = EditCommand(previous=3.0, proposed=4.0)

    # a student cannot grade; the edit is rolled back but kept for retry
    result = command.run(lambda grade: grading.set_manual_grade(submission_id, grade, None, student))

    assert result.error.kind == ErrorKind.UNAUTHORIZED
    assert command.status == EditStatus.ROLLED_BACK
    assert command.displayed == 3.0
    assert command.proposed == 4.0
    assert repo.get_submission(submission_id).grade == 3.0


def test_retry_after_failure(teacher, repo, audit, seed, student):
    project_id = seed.project(students=[student.id])
    submission_id = seed.submission(seed.assignment(project_id), student.id)
    grading = GradeOverride(repo, audit)
    command = EditCommand(previous=None, proposed=5.0)

    command.run(lambda grade: grading.set_manual_grade(submission_id, grade, None, student))
    result = command.retry(lambda grade: grading.set_manual_grade(submission_id, grade, None, teacher))

    assert result.ok
    assert command.error is None
    assert command.displayed == 5.0
