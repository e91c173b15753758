import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from familyhub.core.config import GetSettings, Settings
from familyhub.db import Base, CreateDbEngine, GetDb
from familyhub.main import app
from familyhub.modules.auth.models import ROLE_CHILD, ROLE_PARENT, Family, User
from familyhub.modules.auth.service import ContextForUser, HashPin

# Model modules register their tables on Base.metadata when imported.
import familyhub.modules.allowance.models  # noqa: F401
import familyhub.modules.chat.models  # noqa: F401
import familyhub.modules.chores.models  # noqa: F401
import familyhub.modules.rewards.models  # noqa: F401


@pytest.fixture()
def settings():
    return Settings(
        JwtSecret="test-access-secret",
        RefreshSecret="test-refresh-secret",
        PinHashRounds=1,
    )


@pytest.fixture()
def engine():
    test_engine = CreateDbEngine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory, settings):
    def _override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[GetDb] = _override_db
    app.dependency_overrides[GetSettings] = lambda: settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _AddFamily(db, name: str, code: str, settings: Settings) -> Family:
    family = Family(Name=name, FamilyCode=code, PinHash=HashPin("1234", settings.PinHashRounds))
    db.add(family)
    db.flush()
    return family


def _AddUser(db, family: Family, name: str, role: str, points: int = 0) -> User:
    user = User(
        FamilyId=family.Id,
        Name=name,
        Role=role,
        Points=points,
        Streak=0,
        JarSpend=0,
        JarSave=0,
        JarGive=0,
    )
    db.add(user)
    db.flush()
    return user


@pytest.fixture()
def household(db, settings):
    """One family with a parent and a child, plus an unrelated family."""
    family = _AddFamily(db, "Smiths", "SMITH1", settings)
    parent = _AddUser(db, family, "Alice", ROLE_PARENT)
    child = _AddUser(db, family, "Bob", ROLE_CHILD)
    other_family = _AddFamily(db, "Joneses", "JONES1", settings)
    outsider = _AddUser(db, other_family, "Carol", ROLE_CHILD)
    db.commit()
    return {
        "family": family,
        "parent": parent,
        "child": child,
        "outsider": outsider,
        "parent_ctx": ContextForUser(parent),
        "child_ctx": ContextForUser(child),
        "outsider_ctx": ContextForUser(outsider),
    }
