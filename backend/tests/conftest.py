import os
import tempfile

# Point the app at a throwaway SQLite file before kilnlog is imported
_DB_DIR = tempfile.mkdtemp(prefix="kilnlog-test-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'kilnlog.db')}"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import delete  # noqa: E402

from kilnlog.db.base import engine, init_db  # noqa: E402
from kilnlog.db.models import StateEntry  # noqa: E402
from kilnlog.main import app  # noqa: E402


@pytest_asyncio.fixture
async def client():
    # Fresh tables and an empty store for every test
    await init_db()
    async with engine.begin() as conn:
        await conn.execute(delete(StateEntry))

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Pooled connections belong to this test's event loop
    await engine.dispose()
