"""
Student task limits and earnings.
"""
from kushl.students.service import EligibilityResult, StudentService, calculate_student_task_limit

__all__ = ["EligibilityResult", "StudentService", "calculate_student_task_limit"]
