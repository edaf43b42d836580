# This project was developed with assistance from AI tools.
"""Agent principals (access-code login, scoped by referred-by text)."""

from db import UserRole

from ._users import build_user_router

router = build_user_router(UserRole.AGENT)
