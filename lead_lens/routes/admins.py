# This project was developed with assistance from AI tools.
"""Admin principals (password login)."""

from db import UserRole

from ._users import build_user_router

router = build_user_router(UserRole.ADMIN)
