"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator, Callable, Coroutine
from typing import Annotated, Any, TypeVar

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.config import Settings
from hr_payroll.database import init_db
from hr_payroll.errors import AuthenticationError
from hr_payroll.models import Action, Module, User
from hr_payroll.services import AuthService, PermissionService, QueryCache, TokenSigner
from hr_payroll.services.records import EmployeeRecordService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        yield session


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> QueryCache:
    return request.app.state.cache


def get_signer(request: Request) -> TokenSigner:
    return request.app.state.signer


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
SettingsDep = Annotated[Settings, Depends(get_settings_dep)]
CacheDep = Annotated[QueryCache, Depends(get_cache)]
SignerDep = Annotated[TokenSigner, Depends(get_signer)]
Credentials = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


async def get_current_user(
    db: DbSession,
    signer: SignerDep,
    credentials: Credentials,
) -> User:
    """Resolve the bearer token to an active user."""
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    return await AuthService(db, signer).user_from_token(credentials.credentials)


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_permission(
    module: Module, action: Action
) -> Callable[..., Coroutine[Any, Any, User | None]]:
    """Build a dependency that checks a module permission.

    Returns the acting user when a bearer token is sent. With permission
    enforcement disabled, requests without a token pass as anonymous.
    """

    async def dependency(
        db: DbSession,
        settings: SettingsDep,
        cache: CacheDep,
        signer: SignerDep,
        credentials: Credentials,
    ) -> User | None:
        if credentials is None:
            if settings.enforce_permissions:
                raise AuthenticationError("Missing bearer token")
            return None

        user = await AuthService(db, signer).user_from_token(credentials.credentials)
        if settings.enforce_permissions:
            await PermissionService(db, cache).require(user.id, module, action)
        return user

    return dependency


RecordServiceT = TypeVar("RecordServiceT", bound=EmployeeRecordService[Any])


def record_service(
    service_cls: type[RecordServiceT],
    db: AsyncSession,
    cache: QueryCache,
    settings: Settings,
    user: User | None = None,
) -> RecordServiceT:
    """Build an employee record service acting on behalf of user."""
    return service_cls(
        db,
        cache,
        strict_transitions=settings.strict_status_transitions,
        actor_id=user.id if user is not None else None,
    )
