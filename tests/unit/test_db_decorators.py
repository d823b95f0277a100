"""
Tests for database decorators and the error taxonomy.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from presale.utils.db_decorators import with_auto_commit
from presale.utils.exceptions import (
    ConcurrentUpdateConflictError,
    InvalidScheduleError,
    NotFoundError,
    OverclaimAttemptError,
    PresaleError,
    StakeNotFoundError,
    ValidationError,
    is_retryable,
)


class FakeService:
    """Service-shaped object holding a session."""

    def __init__(self, session):
        self.session = session

    @with_auto_commit
    async def succeed(self):
        return "ok"

    @with_auto_commit
    async def fail(self):
        raise ValidationError("bad amount")


class TestAutoCommit:
    """with_auto_commit commits on success, rolls back on error."""

    @pytest.mark.asyncio
    async def test_commit_on_success(self, mock_session):
        result = await FakeService(mock_session).succeed()

        assert result == "ok"
        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rollback_and_reraise(self, mock_session):
        with pytest.raises(ValidationError):
            await FakeService(mock_session).fail()

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rollback_failure_keeps_original_error(self, mock_session):
        """A failing rollback is logged; the business error still propagates."""
        mock_session.rollback = AsyncMock(side_effect=RuntimeError("connection lost"))

        with pytest.raises(ValidationError):
            await FakeService(mock_session).fail()

    @pytest.mark.asyncio
    async def test_session_keyword(self, mock_session):
        @with_auto_commit
        async def op(session=None):
            return 1

        assert await op(session=mock_session) == 1
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_conflict_rolls_back(self, mock_session):
        @with_auto_commit
        async def op(session=None):
            raise ConcurrentUpdateConflictError("lost race")

        with pytest.raises(ConcurrentUpdateConflictError):
            await op(session=mock_session)

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_session_found(self):
        @with_auto_commit
        async def op(x):
            return x * 2

        assert await op(21) == 42


class TestExceptions:
    """Error hierarchy."""

    def test_not_found_message(self):
        exc = StakeNotFoundError(7)

        assert isinstance(exc, NotFoundError)
        assert isinstance(exc, LookupError)
        assert exc.entity_id == 7
        assert str(exc) == "Stake 7 not found"

    def test_overclaim_carries_amounts(self):
        exc = OverclaimAttemptError(Decimal("10"), Decimal("4.5"))

        assert exc.requested == Decimal("10")
        assert exc.available == Decimal("4.5")
        assert isinstance(exc, PresaleError)
        assert isinstance(exc, ValueError)

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)
        assert issubclass(ValidationError, PresaleError)

    def test_calculator_errors_reexported(self):
        assert issubclass(InvalidScheduleError, ValueError)

    def test_is_retryable(self):
        assert is_retryable(ConcurrentUpdateConflictError("retry")) is True
        assert is_retryable(ValidationError("no")) is False
        assert is_retryable(StakeNotFoundError(1)) is False
