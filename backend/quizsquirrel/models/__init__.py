from quizsquirrel.models.quiz import Quiz
from quizsquirrel.models.user import AuthUser

__all__ = [
    "Quiz",
    "AuthUser",
]
