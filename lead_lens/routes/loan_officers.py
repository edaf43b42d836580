# This project was developed with assistance from AI tools.
"""Loan officer principals (access-code login, scoped by partner name)."""

from db import UserRole

from ._users import build_user_router

router = build_user_router(UserRole.LOAN_OFFICER)
