"""
Unit tests for the typed container wrapper and its action logging.
"""

import logging

import pytest

from localcosmos.db.container import Container, log_db_action
from localcosmos.core.logging_config import correlation_scope
from localcosmos.emulator import CosmosClient, DocumentNotFoundError, FeedOptions, SqlQuerySpec
from localcosmos.emulator.response import ResponseTimer, feed_response, item_response

LOGGER = "localcosmos.db.container"


@pytest.fixture
async def wrapper():
    client = CosmosClient()
    db = (await client.databases.create_if_not_exists({"id": "db"})).database
    raw = (await db.containers.create_if_not_exists(
        {"id": "users", "partitionKey": {"paths": ["/tenantId"]}}
    )).container
    return Container("users", raw)


def action_records(caplog):
    return [r for r in caplog.records if r.name == LOGGER and hasattr(r, "context")]


class TestContainerOperations:
    """Tests for wrapper operations."""

    @pytest.mark.asyncio
    async def test_upsert_and_get(self, wrapper):
        await wrapper.upsert_item({"id": "1", "tenantId": "t", "name": "Ada"})

        assert (await wrapper.get_item("1", "t"))["name"] == "Ada"
        assert await wrapper.get_item("2", "t") is None

    @pytest.mark.asyncio
    async def test_partition_helpers(self, wrapper):
        await wrapper.upsert_item({"id": "1", "tenantId": "t"})
        await wrapper.upsert_item({"id": "2", "tenantId": "t"})
        await wrapper.upsert_item({"id": "3", "tenantId": "u"})

        items = await wrapper.get_items_by_partition_key("t")
        ids = await wrapper.get_ids_by_partition_key("t")

        assert sorted(item["id"] for item in items) == ["1", "2"]
        assert sorted(ids) == ["1", "2"]
        assert await wrapper.get_count() == 3

    @pytest.mark.asyncio
    async def test_count_empty(self, wrapper):
        assert await wrapper.get_count() == 0

    @pytest.mark.asyncio
    async def test_query_spec(self, wrapper):
        await wrapper.upsert_item({"id": "1", "tenantId": "t", "age": 40})
        await wrapper.upsert_item({"id": "2", "tenantId": "t", "age": 20})

        result = await wrapper.query(SqlQuerySpec(
            query="SELECT * FROM c WHERE c.age > @age",
            parameters=[{"name": "@age", "value": 30}],
        ))

        assert [doc["id"] for doc in result] == ["1"]

    @pytest.mark.asyncio
    async def test_query_with_feed_options_model(self, wrapper, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)
        await wrapper.upsert_item({"id": "1", "tenantId": "t"})
        await wrapper.upsert_item({"id": "2", "tenantId": "u"})

        result = await wrapper.query("SELECT * FROM c", FeedOptions(partition_key="u"))

        assert [doc["id"] for doc in result] == ["2"]
        assert action_records(caplog)[-1].context["pkey"] == "u"

    @pytest.mark.asyncio
    async def test_delete(self, wrapper):
        await wrapper.upsert_item({"id": "1", "tenantId": "t"})
        await wrapper.delete_item("1", "t")

        assert await wrapper.get_item("1", "t") is None


class TestActionLogging:
    """Tests for structured action records."""

    @pytest.mark.asyncio
    async def test_upsert_logged(self, wrapper, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)

        await wrapper.upsert_item({"id": "1", "tenantId": "t"})

        record = action_records(caplog)[-1]
        assert record.getMessage() == "UPSERT users"
        assert record.context["action"] == "UPSERT"
        assert record.context["container"] == "users"
        assert record.context["ru"] == 1.0
        assert record.context["bytes"] > 0
        assert "pkey" not in record.context

    @pytest.mark.asyncio
    async def test_query_logged_with_count(self, wrapper, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)
        await wrapper.upsert_item({"id": "1", "tenantId": "t"})

        await wrapper.get_ids_by_partition_key("t")

        record = action_records(caplog)[-1]
        assert record.context["action"] == "QUERY"
        assert record.context["query"] == "SELECT c.id FROM c"
        assert record.context["pkey"] == "t"
        assert record.context["count"] == 1

    @pytest.mark.asyncio
    async def test_item_payload_not_logged(self, wrapper, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)

        await wrapper.upsert_item({"id": "1", "tenantId": "t", "secret": "hunter2"})

        assert "hunter2" not in caplog.text
        assert all("hunter2" not in str(r.context) for r in action_records(caplog))

    @pytest.mark.asyncio
    async def test_failure_logged_and_reraised(self, wrapper, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)

        with pytest.raises(DocumentNotFoundError):
            await wrapper.delete_item("missing", "t")

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors[-1].getMessage().startswith("DeleteItem: ")
        assert action_records(caplog) == []


class TestLogDbAction:
    """Tests for the log_db_action helper."""

    def test_mapping_query_text(self, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)
        response = feed_response([1, 2], ResponseTimer())

        log_db_action("QUERY", "users", response, query={"query": "SELECT * FROM c"})

        record = action_records(caplog)[-1]
        assert record.context["query"] == "SELECT * FROM c"
        assert record.context["count"] == 2

    def test_null_partition_key_omitted(self, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)

        log_db_action("READ", "users", item_response(None, ResponseTimer()), None)

        record = action_records(caplog)[-1]
        assert "pkey" not in record.context
        assert "count" not in record.context

    def test_broken_response_never_raises(self, caplog):
        """Test a record that cannot be built is logged, not raised."""
        caplog.set_level(logging.INFO, logger=LOGGER)

        log_db_action("READ", "users", object(), "t")

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors[-1].getMessage().startswith("LogDBAction: ")
        assert action_records(caplog) == []

    @pytest.mark.asyncio
    async def test_action_succeeds_when_logging_fails(self, wrapper, caplog, monkeypatch):
        """Test a completed write is kept even when its record fails."""
        caplog.set_level(logging.INFO, logger=LOGGER)

        def broken_log(*args, **kwargs):
            raise RuntimeError("sink down")

        monkeypatch.setattr("localcosmos.db.container.log_with_context", broken_log)

        await wrapper.upsert_item({"id": "1", "tenantId": "t"})

        assert (await wrapper.container.item("1", "t").read()).resource is not None
        assert any(r.getMessage() == "LogDBAction: sink down" for r in caplog.records)


class TestCorrelation:
    """Tests for correlation ids on action records."""

    @pytest.mark.asyncio
    async def test_each_action_gets_an_id(self, wrapper, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)

        await wrapper.upsert_item({"id": "1", "tenantId": "t"})
        await wrapper.get_item("1", "t")

        first, second = action_records(caplog)
        assert first.correlation_id
        assert second.correlation_id
        assert first.correlation_id != second.correlation_id

    @pytest.mark.asyncio
    async def test_actions_join_enclosing_scope(self, wrapper, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)

        with correlation_scope("request-42"):
            await wrapper.upsert_item({"id": "1", "tenantId": "t"})
            await wrapper.get_ids_by_partition_key("t")

        assert [r.correlation_id for r in action_records(caplog)] == ["request-42", "request-42"]

    @pytest.mark.asyncio
    async def test_failure_record_carries_id(self, wrapper, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER)

        with correlation_scope("request-43"):
            with pytest.raises(DocumentNotFoundError):
                await wrapper.delete_item("missing", "t")

        error = [r for r in caplog.records if r.levelno == logging.ERROR][-1]
        assert error.getMessage().startswith("DeleteItem: ")
        assert error.correlation_id == "request-43"
