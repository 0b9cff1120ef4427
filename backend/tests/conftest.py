import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from household.auth import SessionContext, get_password_hash
from household.database import Base, get_db
from household.main import app
from household.models import Group, User

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def add_group(db, name, usernames):
    group = Group(
        name=name,
        budgets=["house", "food"],
        group_metadata={"default_share": {}, "default_currency": "USD"},
    )
    db.add(group)
    db.flush()
    users = [
        User(
            username=username,
            first_name=username.capitalize(),
            hashed_password=get_password_hash(f"{username}pass"),
            group_id=group.id,
        )
        for username in usernames
    ]
    db.add_all(users)
    db.commit()
    return group, users


def make_context(db, user_id):
    user = db.get(User, user_id)
    return SessionContext(
        user=user,
        group=user.group,
        members={m.id: m.first_name for m in user.group.members},
    )


@pytest.fixture
def household(db):
    """Alice and Bob sharing one group."""
    group, (alice, bob) = add_group(db, "Home", ["alice", "bob"])
    return {"group_id": group.id, "alice": alice.id, "bob": bob.id}


@pytest.fixture
def trio(db):
    """Alice, Bob and Carol sharing one group."""
    group, (alice, bob, carol) = add_group(db, "Flat", ["alice", "bob", "carol"])
    return {"group_id": group.id, "alice": alice.id, "bob": bob.id, "carol": carol.id}


def login(client, username):
    res = client.post("/api/login", json={"username": username, "password": f"{username}pass"})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def auth_headers(client, household):
    return login(client, "alice")


@pytest.fixture
def bob_headers(client, household):
    return login(client, "bob")
