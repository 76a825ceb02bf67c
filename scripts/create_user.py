"""Register a blog account from the command line.

The database location and bcrypt cost come from the same ``BLOG_CONFIG`` file
and ``BLOG_*`` variables the server reads; ``--db`` overrides the path.
"""
import argparse
import getpass
import sys
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from blog.accounts import AccountService
from blog.config import load_database_settings, resolve_database_path
from blog.database import Database
from blog.errors import BlogError

PASSWORD_ATTEMPTS = 3


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Register a blog account")
    parser.add_argument("name", help="Name shown on the dashboard")
    parser.add_argument("email", help="Login email, unique per account")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="SQLite database to write to (defaults to the configured database_path)",
    )
    return parser.parse_args(argv)


def read_password() -> str:
    """Ask for the password twice; give up after a few failed attempts."""
    for attempt in range(1, PASSWORD_ATTEMPTS + 1):
        password = getpass.getpass("Password: ")
        if not password:
            print("An empty password is not allowed.", file=sys.stderr)
            continue
        if getpass.getpass("Repeat password: ") == password:
            return password
        print(f"Passwords differ ({attempt}/{PASSWORD_ATTEMPTS}).", file=sys.stderr)
    raise SystemExit("No password set; account not created.")


def open_database(db_path: Optional[str]) -> Database:
    storage = load_database_settings()
    path = resolve_database_path(db_path) if db_path else storage.database_path
    database = Database(path, bcrypt_rounds=storage.bcrypt_rounds)
    database.initialize()
    return database


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        database = open_database(args.db_path)
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    password = read_password()
    try:
        user = AccountService(database).register(args.name, args.email, password)
    except BlogError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    print(f"Registered #{user.id} {user.name} <{user.email}> in {database.path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
