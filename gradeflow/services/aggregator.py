"""
Weighted grade aggregation.

Everything here is recomputed from the project and its current submissions
on every call; nothing is cached. The average is normalized by the weights
of graded assignments only:

    average = sum(grade_i * weight_i) / sum(weight_i)   over graded i

An assignment counts as graded for a student when their submission has a
manual grade, or when the assignment is an AUTO quiz (its score is always
computable). Rubric scores are reported alongside but never feed the average.
"""

from datetime import timezone
from typing import Iterable, Optional

from gradeflow.schemas.assignments import Assignment, Project
from gradeflow.schemas.gradebook import (
    AssignmentColumn,
    GradeResolution,
    GradeSource,
    Gradebook,
    GradebookCell,
    GradebookRow,
    WeightedAverage,
)
from gradeflow.schemas.submissions import Submission, SubmissionState, SubmissionStatus
from gradeflow.services.quiz_scorer import max_quiz_score, score_quiz

SubmissionIndex = dict[tuple[str, str], Submission]


def index_submissions(submissions: Iterable[Submission]) -> SubmissionIndex:
    return {(s.assignment_id, s.student_id): s for s in submissions}


def resolve_grade(assignment: Assignment, submission: Optional[Submission]) -> Optional[GradeResolution]:
    """Effective grade for one submission, or None when it is not graded yet."""
    if submission is None:
        return None
    if submission.grade is not None:
        return GradeResolution(value=submission.grade, source=GradeSource.MANUAL)
    if assignment.task is not None and assignment.task.is_auto_quiz:
        score = score_quiz(assignment.task.quiz_data, submission.answers)
        return GradeResolution(value=score, source=GradeSource.AUTO_QUIZ)
    return None


def is_graded(assignment: Assignment, submission: Optional[Submission]) -> bool:
    return resolve_grade(assignment, submission) is not None


def is_late(assignment: Assignment, submission: Optional[Submission]) -> bool:
    if submission is None or assignment.due_date is None:
        return False
    due = assignment.due_date
    created = submission.created_at
    # Dates coming from forms may be naive; treat them as UTC.
    if due.tzinfo is None:
        due = due.replace(tzinfo=timezone.utc)
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created > due


def submission_state(assignment: Assignment, submission: Optional[Submission]) -> SubmissionState:
    if submission is None:
        return SubmissionState(status=SubmissionStatus.NONE)
    return SubmissionState(
        status=SubmissionStatus.SUBMITTED,
        submission_id=submission.id,
        is_graded=is_graded(assignment, submission),
        is_late=is_late(assignment, submission),
    )


def weighted_average(project: Project, student_id: str, submissions: SubmissionIndex) -> WeightedAverage:
    weighted_sum = 0.0
    weight_total = 0.0
    graded = 0

    for assignment in project.assignments:
        resolution = resolve_grade(assignment, submissions.get((assignment.id, student_id)))
        if resolution is None:
            continue
        weighted_sum += resolution.value * assignment.weight
        weight_total += assignment.weight
        graded += 1

    if weight_total == 0:
        return WeightedAverage(average=0.0, weight_total=0.0, graded_count=graded)
    return WeightedAverage(average=weighted_sum / weight_total, weight_total=weight_total, graded_count=graded)


def compute_weighted_average(project: Project, student_id: str, submissions: Iterable[Submission]) -> float:
    """Per-student average; 0 when nothing is graded yet."""
    if not isinstance(submissions, dict):
        submissions = index_submissions(submissions)
    return weighted_average(project, student_id, submissions).average


def assignment_max_score(assignment: Assignment) -> Optional[float]:
    if assignment.is_quiz and assignment.task.quiz_data is not None:
        return max_quiz_score(assignment.task.quiz_data)
    if assignment.rubric_items:
        return assignment.rubric_max
    return None


def build_cell(assignment: Assignment, submission: Optional[Submission]) -> GradebookCell:
    cell = GradebookCell(assignment_id=assignment.id)
    if submission is None:
        return cell
    resolution = resolve_grade(assignment, submission)
    cell.submission_id = submission.id
    cell.is_late = is_late(assignment, submission)
    if resolution is not None:
        cell.effective_grade = resolution.value
        cell.source = resolution.source
    if submission.rubric_scores:
        cell.rubric_total = submission.rubric_total
    return cell


def build_row(project: Project, student_id: str, submissions: SubmissionIndex) -> GradebookRow:
    summary = weighted_average(project, student_id, submissions)
    return GradebookRow(
        student_id=student_id,
        cells=[build_cell(a, submissions.get((a.id, student_id))) for a in project.assignments],
        average=summary.average,
        weight_total=summary.weight_total,
    )


def build_gradebook(project: Project, submissions: Iterable[Submission]) -> Gradebook:
    """Every enrolled student x assignment, plus each student's average."""
    index = index_submissions(submissions)
    columns = [
        AssignmentColumn(
            assignment_id=a.id,
            title=a.title,
            weight=a.weight,
            max_score=assignment_max_score(a),
        )
        for a in project.assignments
    ]
    rows = [build_row(project, student_id, index) for student_id in project.student_ids]
    return Gradebook(project_id=project.id, columns=columns, rows=rows)
