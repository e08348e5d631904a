"""
Members API - command line

Usage:
    # Run the API server
    python -m members_api serve --port 8000

    # Add a user who can authenticate against /auth
    python -m members_api create-user alice

    # Load members from a YAML or JSON list
    python -m members_api seed members.yaml
"""

import sys
import getpass
import logging
import argparse
from pathlib import Path

import yaml
from pydantic import ValidationError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("members_api")


def run_serve(args):
    """Run the API server."""
    import uvicorn

    logger.info(f"Starting Members API on {args.host}:{args.port}")
    uvicorn.run("members_api.main:app", host=args.host, port=args.port, reload=args.reload)


def run_create_user(args):
    """Create a user, prompting for the password when not given."""
    from members_api.services.database_service import db_service, DuplicateEntryError

    password = args.password or getpass.getpass(f"Password for {args.username}: ")
    if not password:
        logger.error("Password must not be empty")
        return 1

    try:
        user = db_service.create_user(args.username, password)
    except DuplicateEntryError:
        if not args.update:
            logger.error(f"User '{args.username}' already exists (use --update to reset the password)")
            return 1
        user = db_service.set_user_password(args.username, password)
        logger.info(f"Password updated for '{user['username']}'")
        return 0

    print(f"Created user {user['id']}: {user['username']}")
    return 0


def run_seed(args):
    """Load members from a file, skipping ones whose email is taken."""
    from members_api.models.member import MemberCreate
    from members_api.services.database_service import db_service, DuplicateEntryError

    path = Path(args.file)
    if not path.exists():
        logger.error(f"File not found: {path}")
        return 1

    # JSON is a subset of YAML, one loader covers both
    records = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    if not isinstance(records, list):
        logger.error("Seed file must contain a list of members")
        return 1

    created = skipped = 0
    for record in records:
        try:
            data = MemberCreate(**record)
        except (TypeError, ValidationError) as e:
            logger.warning(f"Skipping invalid record {record!r}: {e}")
            skipped += 1
            continue

        try:
            member = db_service.create_member(data.model_dump())
        except DuplicateEntryError as e:
            logger.info(f"Skipping: {e}")
            skipped += 1
            continue

        created += 1
        logger.debug(f"Seeded member {member['MemberId']}")

    print(f"Seeded {created} member(s), skipped {skipped}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="members_api",
        description="Members API - member management with bearer-token auth"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", "-H", default="127.0.0.1")
    serve_parser.add_argument("--port", "-p", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Create-user command
    user_parser = subparsers.add_parser("create-user", help="Add an API user")
    user_parser.add_argument("username")
    user_parser.add_argument("--password", "-P", help="Password (prompted when omitted)")
    user_parser.add_argument("--update", "-u", action="store_true",
                             help="Reset the password if the user exists")

    # Seed command
    seed_parser = subparsers.add_parser("seed", help="Load members from a YAML/JSON file")
    seed_parser.add_argument("file")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        run_serve(args)
        return 0
    elif args.command == "create-user":
        return run_create_user(args)
    elif args.command == "seed":
        return run_seed(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
