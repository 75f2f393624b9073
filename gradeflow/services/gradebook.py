"""
Read-side views over current stored state: per-student averages, the
project gradebook, a student's own summary and quiz analytics.
"""

from gradeflow.schemas.auth import Actor
from gradeflow.schemas.gradebook import Gradebook, GradebookRow, QuizAnalytics, WeightedAverage
from gradeflow.services.aggregator import build_gradebook, build_row, index_submissions, resolve_grade, weighted_average
from gradeflow.services.quiz_scorer import quiz_analytics
from gradeflow.services.repository import GradingRepository
from gradeflow.utils.result import Result, invalid_input, not_found, unauthorized


class GradebookService:
    def __init__(self, repo: GradingRepository):
        self.repo = repo

    def student_average(self, project_id: str, student_id: str, actor: Actor) -> Result[WeightedAverage]:
        if not actor.is_staff and actor.id != student_id:
            return unauthorized("Students can only view their own average")
        project = self.repo.get_project(project_id)
        if project is None:
            return not_found("Project not found")
        submissions = self.repo.list_submissions([a.id for a in project.assignments], student_id)
        return Result.success(weighted_average(project, student_id, index_submissions(submissions)))

    def gradebook(self, project_id: str, actor: Actor) -> Result[Gradebook]:
        if not actor.is_staff:
            return unauthorized("Only teachers and admins can view the gradebook")
        project = self.repo.get_project(project_id)
        if project is None:
            return not_found("Project not found")
        submissions = self.repo.list_submissions([a.id for a in project.assignments])
        return Result.success(build_gradebook(project, submissions))

    def student_summary(self, project_id: str, actor: Actor) -> Result[GradebookRow]:
        project = self.repo.get_project(project_id)
        if project is None:
            return not_found("Project not found")
        if actor.id not in project.student_ids:
            return unauthorized("Not enrolled in this project")
        submissions = self.repo.list_submissions([a.id for a in project.assignments], actor.id)
        return Result.success(build_row(project, actor.id, index_submissions(submissions)))

    def quiz_analytics(self, assignment_id: str, actor: Actor) -> Result[QuizAnalytics]:
        if not actor.is_staff:
            return unauthorized("Only teachers and admins can view quiz analytics")
        assignment = self.repo.get_assignment(assignment_id)
        if assignment is None:
            return not_found("Assignment not found")
        if not assignment.is_quiz or assignment.task.quiz_data is None:
            return invalid_input("Assignment is not a quiz")

        submissions = self.repo.list_submissions([assignment_id])
        pairs = []
        for s in submissions:
            resolution = resolve_grade(assignment, s)
            pairs.append((s.answers or {}, resolution.value if resolution else None))
        return Result.success(quiz_analytics(assignment_id, assignment.task.quiz_data, pairs))
