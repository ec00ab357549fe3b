"""CLI for the service desk: bootstrap the database, manage profiles and tokens."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys


async def cmd_init_db(args):
    """Create all tables."""
    from app.db.engine import create_all

    await create_all()
    print("Database tables created.")


async def cmd_create_profile(args):
    """Create an admin, technician or client profile."""
    from app.db.engine import create_all, async_session_factory
    from app.db import crud
    from app.schemas import Role

    roles = [r.value for r in Role]
    if args.role not in roles:
        print(f"Role must be one of: {', '.join(roles)}")
        sys.exit(1)

    await create_all()
    email = args.email.strip().lower()
    async with async_session_factory() as db:
        if await crud.get_profile_by_email(db, email):
            print(f"A profile with email {email} already exists")
            sys.exit(1)
        profile = await crud.create_profile(
            db, email=email, role=args.role, display_name=args.display_name or "",
        )

    print(f"Profile created: {profile.email} (id={profile.id}, role={profile.role})")


async def cmd_issue_token(args):
    """Issue a session token for a profile, as the identity provider would after OTP."""
    from app.db.engine import async_session_factory
    from app.db import crud
    from app.services.auth import create_session

    async with async_session_factory() as db:
        profile = await crud.get_profile_by_email(db, args.email.strip().lower())
        if not profile or not profile.is_active:
            print(f"No active profile for {args.email}")
            sys.exit(1)
        token = await create_session(profile, db, days=args.days)

    print(token)


def cmd_serve(args):
    import uvicorn

    uvicorn.run("app.main:app", host=args.host, port=args.port, reload=args.reload)


def main():
    parser = argparse.ArgumentParser(description="CNC Service Desk CLI")
    parser.add_argument("--log-level", default="INFO")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Create database tables")

    cp = subparsers.add_parser("create-profile", help="Create a profile")
    cp.add_argument("--email", required=True, help="Profile email")
    cp.add_argument("--role", required=True, help="admin | technician | client")
    cp.add_argument("--display-name", default="", help="Display name")

    it = subparsers.add_parser("issue-token", help="Issue a session token for a profile")
    it.add_argument("--email", required=True, help="Profile email")
    it.add_argument("--days", type=int, default=7, help="Token lifetime in days")

    sv = subparsers.add_parser("serve", help="Run the API server")
    sv.add_argument("--host", default="127.0.0.1")
    sv.add_argument("--port", type=int, default=8000)
    sv.add_argument("--reload", action="store_true")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "init-db":
        asyncio.run(cmd_init_db(args))
    elif args.command == "create-profile":
        asyncio.run(cmd_create_profile(args))
    elif args.command == "issue-token":
        asyncio.run(cmd_issue_token(args))
    elif args.command == "serve":
        cmd_serve(args)


if __name__ == "__main__":
    main()
