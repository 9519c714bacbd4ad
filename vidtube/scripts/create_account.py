"""
Create an account without going through the HTTP API. Run from project root:
  python -m vidtube.scripts.create_account USERNAME EMAIL PASSWORD FULL_NAME
Example:
  python -m vidtube.scripts.create_account admin admin@example.com your-secure-password "Site Admin"
"""
import argparse
import asyncio
import sys

from vidtube.core.config import Settings, get_settings
from vidtube.core.database import Database
from vidtube.core.errors import Err
from vidtube.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password, password_length_ok
from vidtube.services.account_store import AccountStore


async def create_account(
    settings: Settings,
    username: str,
    email: str,
    password: str,
    full_name: str,
) -> int:
    database = Database(settings.DATABASE_URL)
    try:
        if settings.AUTO_CREATE_TABLES:
            await database.create_all()
        password_hash = await asyncio.to_thread(hash_password, password, settings.BCRYPT_ROUNDS)
        async with database.session() as session:
            created = await AccountStore(session).create(
                username=username,
                email=email,
                full_name=full_name,
                password_hash=password_hash,
            )
        if isinstance(created, Err):
            print(created.message, file=sys.stderr)
            return 1
        print(f"Created account '{created.value.username}' ({created.value.id}).")
        return 0
    finally:
        await database.dispose()


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a VidTube account.")
    parser.add_argument("username", help="Username (unique, stored lowercase)")
    parser.add_argument("email", help="Email address (unique, stored lowercase)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("full_name", help="Display name")
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > 255:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not args.email.strip() or "@" not in args.email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not password_length_ok(args.password):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    if not args.full_name.strip():
        print("Full name is required.", file=sys.stderr)
        return 1

    return asyncio.run(
        create_account(settings or get_settings(), username, args.email, args.password, args.full_name)
    )


if __name__ == "__main__":
    sys.exit(main())
