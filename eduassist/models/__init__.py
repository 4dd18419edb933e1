from eduassist.models.student import Student, QuizResult
from eduassist.models.grading_result import GradingResult

__all__ = [
    "Student",
    "QuizResult",
    "GradingResult",
]
