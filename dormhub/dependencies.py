# dormhub/dependencies.py
"""
FastAPI dependency providers.

Routes receive the acting ``Principal`` and ready-built services; tests
override ``get_session_factory`` to point every service at a test database.
"""
from __future__ import annotations

from typing import Annotated, Callable, Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from dormhub.config.settings import settings
from dormhub.core.logging import bind_request_context, get_logger
from dormhub.db.session import SessionLocal
from dormhub.schemas.common.pagination import PaginationParams
from dormhub.services.allocation import AllocationService
from dormhub.services.attendance import CheckInOutService
from dormhub.services.common.errors import AuthenticationError
from dormhub.services.common.permissions import Principal
from dormhub.services.common.security import JWTSettings, principal_from_token
from dormhub.services.notification import NotificationService
from dormhub.services.payment import PaymentService
from dormhub.services.preference import PreferenceService
from dormhub.services.room import RoomQueryService, RoomService

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

SessionFactory = Callable[[], Session]


def get_session_factory() -> SessionFactory:
    return SessionLocal


def get_jwt_settings() -> JWTSettings:
    return JWTSettings(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


async def get_current_principal(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    jwt_settings: Annotated[JWTSettings, Depends(get_jwt_settings)],
) -> Principal:
    """
    Resolve the caller from the bearer token.

    Raises:
        AuthenticationError: Missing, malformed or expired token
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    principal = principal_from_token(credentials.credentials, jwt_settings)
    bind_request_context(user_id=str(principal.user_id))
    logger.debug("principal_resolved", role=principal.role.value)
    return principal


def get_pagination(
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1)] = settings.DEFAULT_PAGE_SIZE,
) -> PaginationParams:
    return PaginationParams(page=page, page_size=min(page_size, settings.MAX_PAGE_SIZE))


# --- Services ------------------------------------------------------------------

def get_notification_service(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
) -> NotificationService:
    return NotificationService(session_factory)


def get_preference_service(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
) -> PreferenceService:
    return PreferenceService(session_factory)


def get_room_service(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
    preferences: Annotated[PreferenceService, Depends(get_preference_service)],
) -> RoomService:
    return RoomService(session_factory, notifier, preferences)


def get_room_query_service(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
) -> RoomQueryService:
    return RoomQueryService(session_factory)


def get_allocation_service(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
) -> AllocationService:
    return AllocationService(session_factory, notifier)


def get_payment_service(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
) -> PaymentService:
    return PaymentService(session_factory)


def get_check_in_out_service(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
) -> CheckInOutService:
    return CheckInOutService(session_factory, notifier)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
Pagination = Annotated[PaginationParams, Depends(get_pagination)]
