import os

# Must be set before inventory_service reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from inventory_service.domain.models import Base
from inventory_service.infrastructure.db import SessionLocal, engine


@pytest.fixture
def db():
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    from inventory_service.main import app

    Base.metadata.drop_all(engine)
    caches = app.state.inventory_caches
    caches.by_id.invalidate_all()
    caches.by_product_id.invalidate_all()
    with TestClient(app) as c:
        yield c
