from eduassist.db.base_class import Base

# Import all models so Base.metadata knows every table
from eduassist.models.student import Student, QuizResult
from eduassist.models.grading_result import GradingResult
