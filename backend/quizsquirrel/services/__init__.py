from quizsquirrel.services.errors import BackendError
from quizsquirrel.services.auth import AuthService, SignUpResult, get_auth_service
from quizsquirrel.services.quizzes import QuizService, filter_quizzes, get_quiz_service

__all__ = [
    "BackendError",
    "AuthService",
    "SignUpResult",
    "get_auth_service",
    "QuizService",
    "filter_quizzes",
    "get_quiz_service",
]
