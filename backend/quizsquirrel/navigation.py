"""Top bar links, chosen by whether someone is signed in."""
from dataclasses import dataclass


@dataclass(frozen=True)
class NavLink:
    label: str
    endpoint: str
    # rendered as a POST form button rather than a link
    is_action: bool = False
    primary: bool = False


def nav_links(user) -> list[NavLink]:
    links = [NavLink("Browse Quizzes", "quizzes.public_list")]
    if user:
        links += [
            NavLink("Dashboard", "dashboard.index"),
            NavLink("Sign Out", "auth.logout", is_action=True),
        ]
    else:
        links += [
            NavLink("Login", "auth.login"),
            NavLink("Sign Up", "auth.register", primary=True),
        ]
    return links
