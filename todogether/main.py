"""Console entry point.

Drives the auth guard and the todo service from a terminal:

    todogether login
    todogether whoami
    todogether lists
    todogether sync
    todogether logout
"""

import argparse
import asyncio
import getpass
import sys
from collections.abc import Sequence

from todogether.api.sync import SyncSnapshot
from todogether.auth.schemas import User
from todogether.core.config import AppConfig, get_config
from todogether.core.container import Container
from todogether.core.exceptions import AppError
from todogether.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


class ConsoleView:
    """Renders guard transitions as terminal output."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def _print(self, text: str) -> None:
        print(text, file=self.stream)

    def show_login(self) -> None:
        self._print("Not logged in. Run `todogether login`.")

    def show_app(self, user: User | None) -> None:
        if user is not None:
            self._print(f"Welcome, {user.username}")

    def show_error(self, form: str, message: str) -> None:
        self._print(f"[{form}] {message}")

    def hide_error(self, form: str) -> None:
        pass

    def set_loading(self, form: str, loading: bool) -> None:
        if loading:
            self._print("...")


def _configure_logging(config: AppConfig) -> None:
    log_file = config.log_file
    if log_file is None and not config.is_development:
        log_file = config.auth.storage_path.parent / "app.log"
    setup_logging(
        log_level=config.effective_log_level,
        json_format=bool(config.json_logs),
        log_file=log_file,
        log_to_console=config.is_development,
    )


async def _login(container: Container, args: argparse.Namespace) -> int:
    username = args.username or input("Username: ")
    password = getpass.getpass("Password: ")
    return 0 if await container.guard.handle_login(username, password) else 1


async def _register(container: Container, args: argparse.Namespace) -> int:
    username = args.username or input("Username: ")
    password = getpass.getpass("Password: ")
    password_confirm = getpass.getpass("Confirm password: ")
    ok = await container.guard.handle_register(
        username,
        password,
        password_confirm,
        invite_code=args.invite_code,
        has_invite_code=args.invite_code is not None,
    )
    if ok and container.guard.invite_token:
        print(f"Invite code for your partner: {container.guard.invite_token}")
    return 0 if ok else 1


async def _logout(container: Container, args: argparse.Namespace) -> int:
    await container.guard.logout()
    return 0


async def _whoami(container: Container, args: argparse.Namespace) -> int:
    if not await container.guard.init():
        return 1
    user = container.guard.current_user
    print(f"{user.username} (id={user.id}, couple={user.couple_id})")
    return 0


async def _lists(container: Container, args: argparse.Namespace) -> int:
    if not await container.guard.init():
        return 1
    service = container.todo_service
    my_lists = await service.list_todo_lists()
    partner = await service.get_partner_overview()

    print("My lists:")
    for todo_list in my_lists:
        print(f"  [{todo_list.id}] {todo_list.title}")
    if partner is None:
        print("No partner yet.")
        return 0
    print(f"{partner.username}'s lists:")
    for todo_list in partner.todo_lists:
        print(f"  [{todo_list.id}] {todo_list.title}")
    return 0


async def _sync(container: Container, args: argparse.Namespace) -> int:
    if not await container.guard.init():
        return 1

    def report(snapshot: SyncSnapshot) -> None:
        print(f"synced: {len(snapshot.my_lists)} own, {len(snapshot.partner_lists)} partner lists")

    container.realtime_sync.start(report)
    try:
        while container.realtime_sync.is_running:
            await asyncio.sleep(1)
    finally:
        container.realtime_sync.stop()
    return 1


COMMANDS = {
    "login": _login,
    "register": _register,
    "logout": _logout,
    "whoami": _whoami,
    "lists": _lists,
    "sync": _sync,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="todogether", description="To-dogether client")
    parser.add_argument("--dev", action="store_true", help="Use the development backend")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Log in and store the session")
    login.add_argument("--username")

    register = sub.add_parser("register", help="Create an account")
    register.add_argument("--username")
    register.add_argument("--invite-code", help="Pair with a partner's invite code")

    sub.add_parser("logout", help="Log out and forget the session")
    sub.add_parser("whoami", help="Validate the stored session and show the user")
    sub.add_parser("lists", help="Show own and partner todo lists")
    sub.add_parser("sync", help="Poll todo lists until interrupted")
    return parser


async def run(args: argparse.Namespace, config: AppConfig) -> int:
    container = Container(config=config).override(view=ConsoleView())
    try:
        return await COMMANDS[args.command](container, args)
    except AppError as e:
        logger.error("command_failed", command=args.command, error=e.message, code=e.code)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        await container.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    if args.dev:
        config = config.model_copy(update={"environment": "development"})

    _configure_logging(config)
    logger.info("application_starting", app_name=config.app_name, environment=config.environment)
    try:
        return asyncio.run(run(args, config))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
