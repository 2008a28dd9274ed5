from dataclasses import dataclass
from datetime import datetime, timezone


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass
class Quiz:
    """A row of the backend ``quizzes`` table."""

    id: str
    title: str
    description: str
    is_public: bool
    user_id: str
    created_at: datetime
    # only present when the author's profile was joined in
    author_email: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Quiz":
        profile = row.get("profiles") or {}
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            description=row.get("description") or "",
            is_public=bool(row.get("is_public", False)),
            user_id=str(row.get("user_id") or ""),
            created_at=_parse_timestamp(row["created_at"]),
            author_email=profile.get("email"),
        )

    def __repr__(self):
        return f"<Quiz id={self.id} owner={self.user_id}>"
