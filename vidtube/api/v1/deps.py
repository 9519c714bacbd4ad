"""Per-request wiring: settings, store and services built from app state."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.config import Settings
from vidtube.core.database import get_db
from vidtube.services.account_store import AccountStore
from vidtube.services.accounts import AccountService
from vidtube.services.sessions import SessionService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_account_store(db: Annotated[AsyncSession, Depends(get_db)]) -> AccountStore:
    return AccountStore(db)


def get_session_service(
    store: Annotated[AccountStore, Depends(get_account_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SessionService:
    return SessionService(store, settings)


def get_account_service(
    request: Request,
    store: Annotated[AccountStore, Depends(get_account_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AccountService:
    return AccountService(store, settings, request.app.state.media)
