from dataclasses import dataclass


@dataclass(frozen=True)
class AuthUser:
    """The signed-in user as reported by the auth provider. Never written."""

    id: str
    email: str
    email_confirmed: bool = False

    @classmethod
    def from_backend(cls, user) -> "AuthUser":
        return cls(
            id=str(user.id),
            email=user.email or "",
            email_confirmed=getattr(user, "email_confirmed_at", None) is not None,
        )

    def __repr__(self):
        return f"<AuthUser {self.email}>"
