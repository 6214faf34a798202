"""HR payroll command line interface.

Provides administrative tools for:
- Schema creation
- Bootstrapping an administrator account
- Running the API server

Usage:
    python -m hr_payroll.cli init-db [--database-url URL]
    python -m hr_payroll.cli create-admin --name N --email E --cpf C --password P
    python -m hr_payroll.cli serve [--host H] [--port P] [--reload]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.config import configure_logging, get_settings
from hr_payroll.database import create_engine_for, create_schema, make_session_factory
from hr_payroll.models import Module, User
from hr_payroll.services import PermissionGroupService, PermissionService, QueryCache, UserService

logger = logging.getLogger(__name__)

ADMIN_GROUP_NAME = "Administradores"
ADMIN_GROUP_DESCRIPTION = "Full access to every module"


async def bootstrap_admin(
    session: AsyncSession,
    name: str,
    email: str,
    cpf: str,
    password: str,
    cache: QueryCache | None = None,
) -> tuple[User, bool]:
    """Ensure an administrator user with full access exists.

    Creates the user when no user has the CPF, creates the administrators
    group when missing, grants every module all actions and assigns the
    user to the group. Returns the user and whether it was created.
    """
    cache = cache or QueryCache()
    users = UserService(session, cache)
    groups = PermissionGroupService(session, cache)
    permissions = PermissionService(session, cache)

    user = await users.get_by_cpf(cpf)
    created = user is None
    if user is None:
        user = await users.create(
            {"name": name, "email": email, "cpf": cpf, "password": password, "active": True}
        )

    group = await groups.get_by_name(ADMIN_GROUP_NAME)
    if group is None:
        group = await groups.create({"name": ADMIN_GROUP_NAME, "description": ADMIN_GROUP_DESCRIPTION})

    for module in Module:
        await permissions.set_module_permission(
            group.id,
            module,
            can_read=True,
            can_create=True,
            can_update=True,
            can_delete=True,
        )
    await permissions.assign_user_to_group(user.id, group.id)
    return user, created


class HRPayrollCli:
    """HR payroll command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m hr_payroll.cli",
            description="HR payroll administrative tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # init-db command
        init_db = subparsers.add_parser("init-db", help="Create database tables")
        init_db.add_argument(
            "--database-url",
            type=str,
            help="Database URL (default: $DATABASE_URL)",
        )

        # create-admin command
        admin = subparsers.add_parser(
            "create-admin",
            help="Create an administrator with full access",
        )
        admin.add_argument("--name", required=True, help="Full name")
        admin.add_argument("--email", required=True, help="Email address")
        admin.add_argument("--cpf", required=True, help="CPF used to log in")
        admin.add_argument("--password", required=True, help="Login password")
        admin.add_argument(
            "--database-url",
            type=str,
            help="Database URL (default: $DATABASE_URL)",
        )

        # serve command
        serve = subparsers.add_parser("serve", help="Run the API server")
        serve.add_argument("--host", type=str, help="Bind address (default: $HOST)")
        serve.add_argument("--port", type=int, help="Port (default: $PORT)")
        serve.add_argument("--reload", action="store_true", help="Reload on code changes")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        configure_logging(get_settings().log_level)

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "init-db": self._cmd_init_db,
            "create-admin": self._cmd_create_admin,
            "serve": self._cmd_serve,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    def _database_url(self, args: argparse.Namespace) -> str:
        return args.database_url or get_settings().database_url

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create all tables."""

        async def _run() -> None:
            engine = create_engine_for(self._database_url(args))
            try:
                await create_schema(engine)
            finally:
                await engine.dispose()

        asyncio.run(_run())
        print("Database schema created.")
        return 0

    def _cmd_create_admin(self, args: argparse.Namespace) -> int:
        """Create or complete the administrator account."""

        async def _run() -> tuple[User, bool]:
            engine = create_engine_for(self._database_url(args))
            try:
                async with make_session_factory(engine)() as session:
                    return await bootstrap_admin(
                        session, args.name, args.email, args.cpf, args.password
                    )
            finally:
                await engine.dispose()

        user, created = asyncio.run(_run())
        if created:
            print(f"Administrator created: {user.name} ({user.cpf})")
        else:
            print(f"Administrator already exists: {user.name} ({user.cpf}); permissions refreshed")
        return 0

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        """Run the API with uvicorn."""
        import uvicorn

        settings = get_settings()
        uvicorn.run(
            "hr_payroll.api.app:app",
            host=args.host or settings.HOST,
            port=args.port or settings.PORT,
            reload=args.reload or settings.DEBUG,
        )
        return 0


def main() -> int:
    """CLI entry point."""
    cli = HRPayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
