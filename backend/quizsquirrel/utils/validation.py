"""
Pure input checks used by the register and login forms. No I/O.
"""
import re
from dataclasses import dataclass, field

PASSWORD_REQUIREMENTS = {
    "min_length": 8,
    "require_uppercase": True,
    "require_lowercase": True,
    "require_number": True,
    "require_special": True,
}

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_SPECIAL_RE = re.compile(r'[!@#$%^&*(),.?":{}|<>]')


@dataclass
class PasswordCheck:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_password(password: str) -> PasswordCheck:
    """Check ``password`` against PASSWORD_REQUIREMENTS.

    Every failed rule contributes one message, in rule order.
    """
    errors = []
    min_length = PASSWORD_REQUIREMENTS["min_length"]

    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters long")

    if PASSWORD_REQUIREMENTS["require_uppercase"] and not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if PASSWORD_REQUIREMENTS["require_lowercase"] and not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if PASSWORD_REQUIREMENTS["require_number"] and not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")

    if PASSWORD_REQUIREMENTS["require_special"] and not _SPECIAL_RE.search(password):
        errors.append("Password must contain at least one special character")

    return PasswordCheck(is_valid=not errors, errors=errors)


def validate_email(email: str) -> bool:
    return _EMAIL_RE.fullmatch(email) is not None
