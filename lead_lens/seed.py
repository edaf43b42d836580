# This project was developed with assistance from AI tools.
"""CLI entrypoint for bootstrapping the first admin.

Usage:
    python -m lead_lens.seed --email admin@example.com --name "Admin" --password secret1

Idempotent: an existing admin with the same email is left untouched.
"""

import argparse
import asyncio
import json
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import User, UserRole
from db.database import SessionLocal

from .core.errors import LeadLensError
from .services.auth import normalize_email
from .services.users import create_user


async def seed_admin(session: AsyncSession, email: str, name: str, password: str) -> dict:
    """Create the admin unless one already exists for ``email``."""
    result = await session.execute(
        select(User).where(User.email == normalize_email(email), User.role == UserRole.ADMIN)
    )
    existing = result.scalar_one_or_none()
    if existing is not None:
        return {"status": "already_exists", "id": existing.id, "email": existing.email}

    user, _ = await create_user(session, UserRole.ADMIN, name=name, email=email, password=password)
    return {"status": "created", "id": user.id, "email": user.email}


async def main(email: str, name: str, password: str) -> int:
    async with SessionLocal() as session:
        try:
            result = await seed_admin(session, email, name, password)
        except LeadLensError as exc:
            print(f"error: {exc.message}", file=sys.stderr)
            return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the first Lead Lens admin")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--password", required=True, help="At least 6 characters")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.email, args.name, args.password)))
