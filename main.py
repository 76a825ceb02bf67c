"""Command-line interface for the blog service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from getpass import getpass
from pathlib import Path
from typing import Callable, Sequence

from blog.client import DEFAULT_API_URL, BlogClient
from blog.config import load_database_settings, load_settings
from blog.database import Database
from blog.session import FileTokenStore, FormMode, SessionState, View

logger = logging.getLogger("blog.main")

DEFAULT_TOKEN_FILE = Path("~/.blog/token.json")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Personal blog utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the blog database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: BLOG_HOST or 0.0.0.0)")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Listening port (default: BLOG_PORT or 5000)",
    )

    client_parser = subparsers.add_parser("client", help="Open the interactive terminal client")
    client_parser.add_argument(
        "--api-url",
        default=os.getenv("BLOG_API_URL", DEFAULT_API_URL),
        help=f"Base URL of the blog API (default: {DEFAULT_API_URL})",
    )
    client_parser.add_argument(
        "--token-file",
        default=os.getenv("BLOG_TOKEN_FILE", str(DEFAULT_TOKEN_FILE)),
        help="Where the session token is kept between runs",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "client", "init-db"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database() -> Database:
    storage = load_database_settings()
    database = Database(storage.database_path, bcrypt_rounds=storage.bcrypt_rounds)
    database.initialize()
    logger.info("Database initialised at %s", storage.database_path)
    return database


def _serve(*, host: str | None, port: int | None) -> None:
    from blog.application import create_application
    import uvicorn

    settings = load_settings()
    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Starting blog API on http://%s:%s", bind_host, bind_port)

    app = create_application(settings=settings)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level="info")


# ----------------------------------------------------------------------
# Interactive client
# ----------------------------------------------------------------------
def _confirm(prompt: str) -> bool:
    return input(f"{prompt} [y/N]: ").strip().lower() in {"y", "yes"}


def _print_messages(state: SessionState) -> None:
    if state.notice:
        print(state.notice)
    if state.error:
        print(f"Error: {state.error}")


def _login_screen(state: SessionState) -> bool:
    print("\n== Login ==")
    _print_messages(state)
    choice = input("[l]ogin, [r]egister, [q]uit: ").strip().lower()
    if choice == "q":
        return False
    if choice == "r":
        state.show_register()
    elif choice == "l":
        email = input("Email: ").strip()
        password = getpass("Password: ")
        state.login(email, password)
    return True


def _register_screen(state: SessionState) -> bool:
    print("\n== Register ==")
    _print_messages(state)
    choice = input("[r]egister, back to [l]ogin, [q]uit: ").strip().lower()
    if choice == "q":
        return False
    if choice == "l":
        state.show_login()
    elif choice == "r":
        name = input("Name: ").strip()
        email = input("Email: ").strip()
        password = getpass("Password: ")
        state.register(name, email, password)
    return True


def _print_posts(state: SessionState) -> None:
    if not state.posts:
        print("You haven't created any posts yet.")
        return
    for index, post in enumerate(state.posts, start=1):
        tags = f" [{', '.join(post.tags)}]" if post.tags else ""
        print(f"{index:>3}) {post.title}{tags}")
        for line in post.content.splitlines():
            print(f"       {line}")


def _pick_post(state: SessionState):
    raw = input("Post number: ").strip()
    try:
        return state.posts[int(raw) - 1]
    except (ValueError, IndexError):
        print("No such post.")
        return None


def _form_screen(state: SessionState, mode: FormMode) -> None:
    draft = mode.draft
    print("\n== Edit Post ==" if draft.is_edit else "\n== Create New Post ==")
    if mode.error:
        print(f"Error: {mode.error}")
    if input("Continue? [Y/n] (n cancels): ").strip().lower() in {"n", "no"}:
        state.close_form()
        return

    title = input(f"Title [{draft.title}]: ").strip() or draft.title
    content = input(f"Content [{draft.content}]: ").strip() or draft.content
    tags = input(f"Tags, comma separated [{draft.tags}]: ").strip() or draft.tags
    state.submit(title, content, tags)


def _dashboard_screen(state: SessionState, confirm: Callable[[str], bool]) -> bool:
    if isinstance(state.mode, FormMode):
        _form_screen(state, state.mode)
        return True

    print("\n== My Blog Posts ==")
    _print_posts(state)
    choice = input("[c]reate, [e]dit, [d]elete, [r]efresh, [o] logout, [q]uit: ").strip().lower()
    if choice == "q":
        return False
    if choice == "c":
        state.open_create()
    elif choice == "e":
        post = _pick_post(state)
        if post is not None:
            state.open_edit(post)
    elif choice == "d":
        post = _pick_post(state)
        if post is not None:
            state.delete(post.id, confirm)
    elif choice == "r":
        state.refresh()
    elif choice == "o":
        state.logout()
    return True


def _run_client(api_url: str, token_file: str) -> None:
    store = FileTokenStore(Path(token_file).expanduser())
    with BlogClient(api_url) as client:
        state = SessionState(client, store)
        state.start()
        try:
            while True:
                if state.view is View.LOGIN:
                    running = _login_screen(state)
                elif state.view is View.REGISTER:
                    running = _register_screen(state)
                else:
                    running = _dashboard_screen(state, _confirm)
                if not running:
                    print("Goodbye!")
                    return
        except (KeyboardInterrupt, EOFError):
            print("\nExiting.")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)

    if args.command == "serve":
        _serve(host=args.host, port=args.port)
    elif args.command == "client":
        _run_client(args.api_url, args.token_file)
    elif args.command == "init-db":
        _initialise_database()
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
