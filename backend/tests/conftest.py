"""
Shared pytest configuration.

Environment is pinned before the app is imported: settings are read at import
time and the module-level engine must never point at a developer database.
"""

import os
import sys
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="cuaderno-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'unused.db'}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RUN_MIGRATIONS"] = "0"
os.environ["STORAGE_ROOT"] = str(_TMP / "storage")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
for _name in ("MABOT_BASE_URL", "MABOT_USERNAME", "MABOT_PASSWORD"):
    os.environ[_name] = ""

# Ensure backend/ is importable for test modules.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cuaderno.clients.mabot_client import GatewayConfig, GatewayCredentialsStore, MabotClient
from cuaderno.clients.storage_client import ObjectStorage
from cuaderno.database import get_db
from cuaderno.deps import get_chat_registry, get_local_store, get_mabot_client, get_storage
from cuaderno.main import app
from cuaderno.models import Base
from cuaderno.repositories import ProgramRepository, SubjectRepository, UserRepository
from cuaderno.schemas.user import UserCreate
from cuaderno.services.chat_service import ChatRegistry
from cuaderno.services.context_service import ContextAssembler
from cuaderno.services.local_store import LocalStore
from tests.utils import FakeGateway, signup



# ---------- database ----------
@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


@pytest.fixture()
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture()
def store(session_factory):
    return LocalStore(session_factory=session_factory)


@pytest.fixture()
def storage(tmp_path):
    return ObjectStorage(root=str(tmp_path / "objects"), public_base_url="http://testserver", secret="test-secret")


# ---------- gateway ----------
@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def mabot_client(gateway, store):
    config = GatewayConfig(base_url="http://mabot.test", username="bot-user", password="bot-pass")
    http = httpx.Client(transport=httpx.MockTransport(gateway))
    client = MabotClient(config, GatewayCredentialsStore(store), http_client=http)
    yield client
    http.close()


@pytest.fixture()
def registry(storage, mabot_client):
    return ChatRegistry(ContextAssembler(storage=storage), mabot_client)


# ---------- seed helpers ----------
@pytest.fixture()
def student(db):
    user = UserRepository().create(db, UserCreate(email="ana@example.com", password_hash="!", full_name="Ana"))
    return user


@pytest.fixture()
def biology(db, student):
    program = ProgramRepository().create_owned(db, student.id, {"name": "BSc Biology"})
    subject = SubjectRepository().create_owned(db, student.id, {"name": "Biology", "program_id": program.id})
    db.commit()
    return subject


# ---------- API ----------
@pytest.fixture()
def api(session_factory, storage, store, mabot_client, registry):
    def _get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_local_store] = lambda: store
    app.dependency_overrides[get_mabot_client] = lambda: mabot_client
    app.dependency_overrides[get_chat_registry] = lambda: registry
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(api):
    return signup(api)
