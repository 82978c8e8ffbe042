# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from barter_moderation.core.security import create_access_token
from barter_moderation.db.session import Base
from barter_moderation.db.session import get_db as app_get_session
from barter_moderation.main import app as fastapi_app
from barter_moderation.models import BlockedKeyword, Item, Message, Report, User
from barter_moderation.models.user import ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER
from barter_moderation.services import reports as report_service

TEST_DB_URL = "sqlite://"

_USERNAME_COUNTER = count(1)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _bearer(user_id: str, role: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, role=role)}"}


@pytest.fixture()
def user_headers() -> dict[str, str]:
    return _bearer("user-1", ROLE_USER)


@pytest.fixture()
def moderator_headers() -> dict[str, str]:
    return _bearer("moderator-1", ROLE_MODERATOR)


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    return _bearer("admin-1", ROLE_ADMIN)


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    def _make(**overrides: Any) -> User:
        values: dict[str, Any] = {"username": f"trader{next(_USERNAME_COUNTER)}"}
        values.update(overrides)
        user = User(**values)
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_item(db_session: Session) -> Callable[..., Item]:
    def _make(**overrides: Any) -> Item:
        values: dict[str, Any] = {
            "user_id": "owner-1",
            "title": "Vintage bicycle",
            "description": "Will trade for a guitar",
        }
        values.update(overrides)
        item = Item(**values)
        db_session.add(item)
        db_session.commit()
        return item

    return _make


@pytest.fixture()
def make_message(db_session: Session) -> Callable[..., Message]:
    def _make(**overrides: Any) -> Message:
        values: dict[str, Any] = {
            "sender_id": "sender-1",
            "receiver_id": "receiver-1",
            "content": "Is this still available?",
        }
        values.update(overrides)
        message = Message(**values)
        db_session.add(message)
        db_session.commit()
        return message

    return _make


@pytest.fixture()
def make_keyword(db_session: Session) -> Callable[..., BlockedKeyword]:
    def _make(keyword: str, **overrides: Any) -> BlockedKeyword:
        values: dict[str, Any] = {
            "keyword": keyword,
            "pattern_type": "contains",
            "severity": "warning",
            "enabled": True,
        }
        values.update(overrides)
        rule = BlockedKeyword(**values)
        db_session.add(rule)
        db_session.commit()
        return rule

    return _make


@pytest.fixture()
def make_report(db_session: Session) -> Callable[..., Report]:
    def _make(
        target_type: str = "item",
        target_id: str = "item-1",
        *,
        created_at: datetime | None = None,
        **overrides: Any,
    ) -> Report:
        return report_service.create_report(
            db_session,
            reporter_id=overrides.pop("reporter_id", "reporter-1"),
            target_type=target_type,
            target_id=target_id,
            category=overrides.pop("category", "spam"),
            description=overrides.pop("description", None),
            metadata=overrides.pop("metadata", None),
            now=created_at,
        )

    return _make
