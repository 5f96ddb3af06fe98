import os
import uuid
from datetime import datetime, timedelta

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["FRONTEND_URL"] = "https://app.shiftly.test"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("INTERNAL_API_KEY", None)

import fakeredis
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from shiftly import models_chat  # noqa: F401
from shiftly import rate_limiter
from shiftly.database import Base, SessionLocal, engine, get_db
from shiftly.main import app
from shiftly.message_queue import MessageQueue, get_message_queue
from shiftly.models import (
    DEFAULT_ROLES,
    ROLE_ADMIN,
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    ROLE_OWNER,
    Employee,
    Role,
    Store,
)
from shiftly.redis_client import set_redis_client

JWT_SECRET = "test-jwt-secret"


def make_token(sub: str, email: str = "user@example.com", expires_in: int = 3600, **claims) -> str:
    now = datetime.utcnow()
    payload = {
        "sub": sub,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
        **claims,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


def auth_headers(employee: Employee) -> dict:
    return {"Authorization": f"Bearer {make_token(employee.id, employee.email)}"}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    session.add_all([Role(role_id=rid, role_name=name) for rid, name in DEFAULT_ROLES.items()])
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    client = fakeredis.FakeRedis(decode_responses=True)
    set_redis_client(client)
    rate_limiter.memory_cache.clear()
    yield client
    set_redis_client(None)
    rate_limiter.memory_cache.clear()


@pytest.fixture
def queue(fake_redis):
    return MessageQueue(fake_redis, "messages")


@pytest.fixture
def client(db, queue):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_message_queue] = lambda: queue
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_employee(db):
    counter = {"n": 0}

    def _make(role_id: int = ROLE_EMPLOYEE, store: Store = None, **fields) -> Employee:
        counter["n"] += 1
        n = counter["n"]
        employee = Employee(
            id=fields.pop("id", str(uuid.uuid4())),
            email=fields.pop("email", f"person{n}@example.com"),
            role_id=role_id,
            store_id=store.store_id if store else None,
            first_name=fields.pop("first_name", f"First{n}"),
            last_name=fields.pop("last_name", f"Last{n}"),
            **fields,
        )
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    return _make


@pytest.fixture
def stores(db):
    downtown = Store(
        store_name="Downtown",
        address_line_1="100 King St W",
        city="Toronto",
        province="ON",
        country="Canada",
        latitude=43.6487,
        longitude=-79.3817,
        timezone="America/Toronto",
    )
    uptown = Store(
        store_name="Uptown",
        address_line_1="2300 Yonge St",
        city="Toronto",
        province="ON",
        country="Canada",
        timezone="America/Toronto",
    )
    db.add_all([downtown, uptown])
    db.commit()
    return downtown, uptown


@pytest.fixture
def staff(stores, make_employee):
    """Owner, admin, a manager and two employees at Downtown, one employee at Uptown"""
    downtown, uptown = stores
    return {
        "owner": make_employee(ROLE_OWNER, salary=90000),
        "admin": make_employee(ROLE_ADMIN, downtown, salary=70000),
        "manager": make_employee(ROLE_MANAGER, downtown, salary=60000),
        "alice": make_employee(ROLE_EMPLOYEE, downtown, first_name="Alice", salary=40000),
        "bob": make_employee(ROLE_EMPLOYEE, downtown, first_name="Bob"),
        "carol": make_employee(ROLE_EMPLOYEE, uptown, first_name="Carol"),
    }
