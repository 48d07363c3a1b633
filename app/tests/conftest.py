"""
Pytest configuration and fixtures for split_service tests.
"""
import jwt
import pytest
from decimal import Decimal
from typing import Dict, List
from unittest.mock import Mock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.db.database import Base, get_db
from app.main import app
from app.models.users import User
from app.rabbitmq import producer as producer_module
from app.rabbitmq.config import rabbitmq_config


@pytest.fixture
def engine():
    """Fresh in-memory database per test, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db) -> Dict[str, User]:
    """Four registered users; dave never joins any group unless a test adds him."""
    people = {
        "alice": User(name="Alice", username="alice", email="alice@example.com"),
        "bob": User(name="Bob", username="bob", email="bob@example.com"),
        "carol": User(name="Carol", username="carol", email="carol@example.com"),
        "dave": User(name=None, username="dave", email="dave@example.com"),
    }
    db.add_all(people.values())
    db.commit()
    return people


@pytest.fixture(autouse=True)
def mock_producer(monkeypatch):
    """Stand-in RabbitMQ producer so no test needs a broker."""
    producer = Mock()
    producer.publish_notification.return_value = True
    producer.publish_group_event.return_value = True
    monkeypatch.setattr(producer_module, "_rabbitmq_producer", producer)
    monkeypatch.setattr(rabbitmq_config, "enabled", True)
    return producer


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(user: User, **claims) -> str:
    payload = {"sub": user.id, "email": user.email, **claims}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


@pytest.fixture
def auth_headers():
    """auth_headers(user) -> headers carrying a valid access token for that user."""
    def _headers(user: User) -> Dict[str, str]:
        return {"access-token": f"Bearer {make_token(user)}"}
    return _headers


def apply_transfers(balances: Dict[str, Decimal], transfers: List[Dict]) -> Dict[str, Decimal]:
    """Balances after every suggested transfer has been paid."""
    result = dict(balances)
    for transfer in transfers:
        result[transfer["from"]] = result.get(transfer["from"], Decimal("0")) + transfer["amount"]
        result[transfer["to"]] = result.get(transfer["to"], Decimal("0")) - transfer["amount"]
    return result
