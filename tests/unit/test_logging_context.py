"""Tests for the per-request logging context."""

import asyncio

import pytest

from src.logutils.context import (
    LogContext,
    clear_context,
    get_context,
    get_correlation_id,
    set_context,
    update_context,
    with_context,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def clear_log_context():
    clear_context()
    yield
    clear_context()


class TestLogContext:
    """Tests for the LogContext dataclass."""

    def test_correlation_id_is_short_hex(self):
        ctx = LogContext()
        assert len(ctx.correlation_id) == 12
        int(ctx.correlation_id, 16)

    def test_ids_are_unique(self):
        assert LogContext().correlation_id != LogContext().correlation_id

    def test_to_dict_skips_empty_fields(self):
        ctx = LogContext(correlation_id="abc", role="tutor")
        assert ctx.to_dict() == {"correlation_id": "abc", "role": "tutor"}

    def test_to_dict_includes_extra(self):
        ctx = LogContext(correlation_id="abc", operation="roster_fetch", extra={"count": 2})
        assert ctx.to_dict() == {"correlation_id": "abc", "operation": "roster_fetch", "count": 2}


class TestContextAccess:
    """Tests for get/set/update/clear."""

    def test_get_context_creates_one(self):
        ctx = get_context()
        assert get_context() is ctx
        assert get_correlation_id() == ctx.correlation_id

    def test_set_context(self):
        ctx = LogContext(correlation_id="fixed")
        set_context(ctx)
        assert get_correlation_id() == "fixed"

    def test_clear_context(self):
        first = get_correlation_id()
        clear_context()
        assert get_correlation_id() != first

    def test_update_known_and_unknown_fields(self):
        update_context(user_id="20123456", page="roster")
        ctx = get_context()
        assert ctx.user_id == "20123456"
        assert ctx.extra == {"page": "roster"}


class TestWithContext:
    """Tests for with_context()."""

    def test_scoped_fields(self):
        with with_context(operation="code_exchange", component="auth") as ctx:
            assert get_context() is ctx
            assert ctx.operation == "code_exchange"
            assert ctx.component == "auth"

    def test_restores_previous_context(self):
        outer = get_context()
        with with_context(operation="inner"):
            pass
        assert get_context() is outer

    def test_nested_context_inherits(self):
        with with_context(user_id="20123456", role="tutor") as outer:
            with with_context(operation="student_fetch") as inner:
                assert inner.user_id == "20123456"
                assert inner.role == "tutor"
                assert inner.correlation_id == outer.correlation_id
            assert get_context().operation is None

    def test_nested_override(self):
        with with_context(role="student"):
            with with_context(role="tutor") as inner:
                assert inner.role == "tutor"

    def test_extra_fields_merge(self):
        with with_context(page="roster"):
            with with_context(student="20000001") as inner:
                assert inner.extra == {"page": "roster", "student": "20000001"}

    def test_explicit_correlation_id(self):
        with with_context(correlation_id="req-1"):
            assert get_correlation_id() == "req-1"

    def test_restored_after_exception(self):
        outer = get_context()
        with pytest.raises(RuntimeError):
            with with_context(operation="failing"):
                raise RuntimeError("boom")
        assert get_context() is outer

    @pytest.mark.asyncio
    async def test_async_with(self):
        async with with_context(operation="chat_reply") as ctx:
            await asyncio.sleep(0)
            assert get_context() is ctx

    @pytest.mark.asyncio
    async def test_tasks_do_not_share_context(self):
        async def run(name: str) -> str:
            with with_context(operation=name):
                await asyncio.sleep(0)
                return get_context().operation

        assert await asyncio.gather(run("a"), run("b")) == ["a", "b"]
