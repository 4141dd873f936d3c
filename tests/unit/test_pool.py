"""Unit tests for connection pool lifecycle helpers."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from pg_crud.config.settings import DatabaseConfig
from pg_crud.db.pool import close_pool, create_pool


class TestCreatePool:
    """Tests for create_pool."""

    @pytest.mark.asyncio
    async def test_passes_configuration(self, monkeypatch: pytest.MonkeyPatch) -> None:
        pool = MagicMock()
        create = AsyncMock(return_value=pool)
        monkeypatch.setattr("pg_crud.db.pool.asyncpg.create_pool", create)
        config = DatabaseConfig(
            host="db", port=5433, name="zoo", user="admin", password="s3cret", max_pool_size=5
        )

        assert await create_pool(config) is pool

        kwargs = create.await_args.kwargs
        assert kwargs["host"] == "db"
        assert kwargs["port"] == 5433
        assert kwargs["database"] == "zoo"
        assert kwargs["password"] == "s3cret"
        assert kwargs["min_size"] == 1
        assert kwargs["max_size"] == 5

    @pytest.mark.asyncio
    async def test_none_pool_is_an_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("pg_crud.db.pool.asyncpg.create_pool", AsyncMock(return_value=None))

        with pytest.raises(RuntimeError, match="zoo"):
            await create_pool(DatabaseConfig(name="zoo"))


class TestClosePool:
    """Tests for close_pool."""

    @pytest.mark.asyncio
    async def test_graceful_close(self) -> None:
        pool = MagicMock()
        pool.close = AsyncMock()

        await close_pool(pool)

        pool.close.assert_awaited_once()
        pool.terminate.assert_not_called()

    @pytest.mark.asyncio
    async def test_terminates_on_timeout(self) -> None:
        async def slow_close() -> None:
            await asyncio.sleep(1)

        pool = MagicMock()
        pool.close = slow_close

        await close_pool(pool, timeout=0.01)

        pool.terminate.assert_called_once()

    @pytest.mark.asyncio
    async def test_terminates_on_error(self) -> None:
        pool = MagicMock()
        pool.close = AsyncMock(side_effect=RuntimeError("boom"))

        await close_pool(pool)

        pool.terminate.assert_called_once()
