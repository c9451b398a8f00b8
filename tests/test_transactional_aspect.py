"""Tests for @transactional and TransactionalAspect."""

import pytest

from legacy.common.aop import TransactionalAspect, is_transactional, transactional
from legacy.context import ApplicationContext, ComponentScan
from legacy.db import PooledDataSource, TransactionManager, current_connection


class LedgerService:
    def __init__(self, data_source: PooledDataSource):
        self.data_source = data_source

    @transactional
    async def transfer(self, amount: int) -> bool:
        if amount < 0:
            raise ValueError("negative amount")
        return current_connection(self.data_source) is not None

    async def balance(self) -> bool:
        return current_connection(self.data_source) is not None


def build_context(data_source: PooledDataSource) -> ApplicationContext:
    context = ApplicationContext(
        "root", ComponentScan(base_packages=(__name__, "legacy.common.aop"))
    )
    context.register_bean(PooledDataSource, lambda: data_source)
    context.register_bean(TransactionManager, lambda: TransactionManager(data_source))
    context.register(LedgerService)
    context.register(TransactionalAspect)
    context.refresh()
    return context


class TestTransactionalDecorator:
    """Tests for the @transactional marker."""

    def test_marks_coroutine_function(self):
        assert is_transactional(LedgerService.transfer)
        assert not is_transactional(LedgerService.balance)

    def test_rejects_sync_function(self):
        with pytest.raises(TypeError, match="async function"):

            @transactional
            def not_async():
                pass


class TestTransactionalAspect:
    """Tests for weaving through the application context."""

    @pytest.mark.asyncio
    async def test_marked_method_runs_in_transaction(self, open_data_source, fake_connection):
        service = build_context(open_data_source).get(LedgerService)

        assert await service.transfer(10) is True
        assert fake_connection.events == ["begin", "commit"]

    @pytest.mark.asyncio
    async def test_unmarked_method_not_woven(self, open_data_source, fake_connection):
        service = build_context(open_data_source).get(LedgerService)

        assert await service.balance() is False
        assert fake_connection.events == []

    @pytest.mark.asyncio
    async def test_failure_rolls_back_and_propagates(self, open_data_source, fake_connection):
        service = build_context(open_data_source).get(LedgerService)

        with pytest.raises(ValueError, match="negative amount"):
            await service.transfer(-1)

        assert fake_connection.events == ["begin", "rollback"]

    @pytest.mark.asyncio
    async def test_without_aspect_no_transaction(self, open_data_source, fake_connection):
        service = LedgerService(open_data_source)

        assert await service.transfer(10) is False
        assert fake_connection.events == []

    def test_woven_method_keeps_metadata(self, open_data_source):
        service = build_context(open_data_source).get(LedgerService)

        assert service.transfer.__name__ == "transfer"
        assert service.transfer.__wrapped__ is not None
