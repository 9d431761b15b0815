"""Tests for sqlpersist.core.errors module."""

import sqlite3

import pytest

from sqlpersist.core.errors import (
    ErrorCategory,
    ErrorContext,
    IllegalStateError,
    InvalidArgumentError,
    NonUniqueResultError,
    NoResultError,
    NullValueError,
    PersistenceError,
    SequenceError,
    SqlPersistError,
    UnsupportedOperationError,
    WrongStatementKindError,
    wrap_driver_error,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.sql is None
        assert ctx.operation is None
        assert ctx.metadata == {}

    def test_to_dict_includes_set_fields(self):
        ctx = ErrorContext(sql="SELECT 1", operation="execute", metadata={"rows": 0})
        d = ctx.to_dict()
        assert d == {"sql": "SELECT 1", "operation": "execute", "rows": 0}
        assert "entity" not in d


class TestSqlPersistError:
    """Test base error behaviour."""

    def test_default_category_is_internal(self):
        error = SqlPersistError("boom")
        assert error.category == ErrorCategory.INTERNAL
        assert error.message == "boom"
        assert str(error) == "boom"

    def test_category_override(self):
        error = SqlPersistError("boom", category=ErrorCategory.CONFIG)
        assert error.category == ErrorCategory.CONFIG

    def test_cause_is_chained(self):
        cause = sqlite3.OperationalError("no such table: ACCOUNT")
        error = PersistenceError("failed", cause=cause)
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_with_context_is_fluent(self):
        error = NoResultError("none")
        assert error.with_context(sql="SELECT 1", attempt=2) is error
        assert error.context.sql == "SELECT 1"
        assert error.context.metadata == {"attempt": 2}

    def test_to_dict(self):
        cause = sqlite3.OperationalError("locked")
        error = PersistenceError(
            "commit failed",
            context=ErrorContext(operation="commit"),
            cause=cause,
        )
        d = error.to_dict()
        assert d["error_type"] == "PersistenceError"
        assert d["category"] == "DATABASE"
        assert d["context"] == {"operation": "commit"}
        assert "locked" in d["cause"]

    def test_to_dict_omits_empty_context(self):
        assert "context" not in SqlPersistError("x").to_dict()

    def test_repr(self):
        assert repr(NoResultError("none")) == "NoResultError('none', category=RESULT)"


class TestTaxonomy:
    """Each error type carries the right category and builtin base."""

    @pytest.mark.parametrize(
        "error_type, category",
        [
            (InvalidArgumentError, ErrorCategory.ARGUMENT),
            (NullValueError, ErrorCategory.ARGUMENT),
            (IllegalStateError, ErrorCategory.STATE),
            (SequenceError, ErrorCategory.STATE),
            (WrongStatementKindError, ErrorCategory.STATEMENT),
            (NoResultError, ErrorCategory.RESULT),
            (NonUniqueResultError, ErrorCategory.RESULT),
            (PersistenceError, ErrorCategory.DATABASE),
            (UnsupportedOperationError, ErrorCategory.UNSUPPORTED),
        ],
    )
    def test_default_categories(self, error_type, category):
        error = error_type("x")
        assert error.category == category
        assert isinstance(error, SqlPersistError)

    def test_builtin_bases(self):
        assert isinstance(InvalidArgumentError("x"), ValueError)
        assert isinstance(NullValueError("x"), ValueError)
        assert isinstance(IllegalStateError("x"), RuntimeError)
        assert isinstance(UnsupportedOperationError("x"), NotImplementedError)

    def test_sequence_error_is_illegal_state(self):
        with pytest.raises(IllegalStateError):
            raise SequenceError("execute() first")


class TestWrapDriverError:
    def test_wraps_with_context(self):
        cause = sqlite3.IntegrityError("UNIQUE constraint failed")
        error = wrap_driver_error(cause, operation="persist", sql="INSERT INTO T VALUES(?)")
        assert isinstance(error, PersistenceError)
        assert error.cause is cause
        assert error.context.operation == "persist"
        assert error.context.sql == "INSERT INTO T VALUES(?)"
        assert "UNIQUE constraint failed" in error.message
