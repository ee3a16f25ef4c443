"""Tests for database decorators and context managers."""
import pytest
from unittest.mock import MagicMock

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from mementos.core.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from mementos.core.logging_manager import MementosLogger
from mementos.database.decorators import (
    DatabaseOperation,
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)


class _Manager:
    """Minimal object shaped like an entity manager."""

    def __init__(self, logger=None):
        self.logger = logger
        self.owner_id = 1

    @log_database_operation("do_work")
    def work(self, value):
        return value * 2

    @log_database_operation("fail_work")
    def fail(self):
        raise ValueError("bad")

    @log_database_operation("reject_work")
    def reject(self):
        raise ValidationError("rating out of range")

    @validate_metadata(["name"])
    def create(self, metadata):
        return metadata["name"]

    @handle_db_errors
    def integrity(self):
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    @handle_db_errors
    def broken(self):
        raise SQLAlchemyError("connection lost")


class TestLogDatabaseOperation:
    """Tests for log_database_operation decorator."""

    def test_logs_start_and_completion(self):
        """Successful calls log a debug start and a completed operation."""
        mock_logger = MagicMock(spec=MementosLogger)

        assert _Manager(mock_logger).work(21) == 42

        assert "Starting do_work" in mock_logger.log_debug.call_args[0][0]
        assert mock_logger.log_debug.call_args[0][1]["owner_id"] == 1
        name, details = mock_logger.log_operation.call_args[0]
        assert name == "do_work_completed"
        assert details["success"] is True

    def test_logs_and_reraises_errors(self):
        """Failures are logged with the operation name and re-raised."""
        mock_logger = MagicMock(spec=MementosLogger)

        with pytest.raises(ValueError):
            _Manager(mock_logger).fail()

        context = mock_logger.log_error.call_args[0][1]
        assert context["operation"] == "fail_work"
        mock_logger.log_operation.assert_not_called()

    def test_works_without_logger(self):
        assert _Manager().work(2) == 4


class TestValidateMetadata:
    """Tests for validate_metadata decorator."""

    def test_passes_valid_metadata(self):
        assert _Manager().create({"name": "Cafe"}) == "Cafe"

    def test_keyword_metadata(self):
        assert _Manager().create(metadata={"name": "Cafe"}) == "Cafe"

    def test_rejects_missing_field(self):
        with pytest.raises(ValidationError, match="'name'"):
            _Manager().create({"city": "Lisbon"})


class TestHandleDbErrors:
    """Tests for handle_db_errors decorator."""

    def test_integrity_error_converted(self):
        with pytest.raises(DatabaseError, match="Data integrity violation"):
            _Manager().integrity()

    def test_sqlalchemy_error_converted(self):
        with pytest.raises(DatabaseError, match="Database operation failed"):
            _Manager().broken()


class TestDatabaseOperation:
    """Tests for DatabaseOperation context manager."""

    def test_successful_operation(self):
        """DatabaseOperation should log completion on success."""
        mock_logger = MagicMock(spec=MementosLogger)

        with DatabaseOperation(mock_logger, "test_operation"):
            result = 1 + 1

        assert result == 2
        call_args = mock_logger.log_operation.call_args
        assert call_args[0][0] == "test_operation_completed"
        assert call_args[0][1]["success"] is True

    def test_successful_operation_with_none_logger(self):
        """DatabaseOperation should work with None logger (uses NullLogger)."""
        with DatabaseOperation(None, "test_operation"):
            pass

    def test_integrity_error_raises_database_error(self):
        """DatabaseOperation should convert IntegrityError to DatabaseError."""
        mock_logger = MagicMock(spec=MementosLogger)

        with pytest.raises(DatabaseError) as exc_info:
            with DatabaseOperation(mock_logger, "test_operation"):
                raise IntegrityError("statement", {}, Exception("duplicate"))

        assert "Data integrity violation" in str(exc_info.value)
        mock_logger.log_error.assert_called_once()

    def test_sqlalchemy_error_raises_database_error(self):
        """DatabaseOperation should convert SQLAlchemyError to DatabaseError."""
        mock_logger = MagicMock(spec=MementosLogger)

        with pytest.raises(DatabaseError, match="Database operation failed"):
            with DatabaseOperation(mock_logger, "test_operation"):
                raise SQLAlchemyError("connection failed")

    def test_other_exceptions_propagate(self):
        """DatabaseOperation should propagate non-SQLAlchemy exceptions."""
        mock_logger = MagicMock(spec=MementosLogger)

        with pytest.raises(ValueError):
            with DatabaseOperation(mock_logger, "test_operation"):
                raise ValueError("invalid value")

        mock_logger.log_error.assert_called_once()

    def test_log_start_option(self):
        """DatabaseOperation should log start when log_start=True."""
        mock_logger = MagicMock(spec=MementosLogger)

        with DatabaseOperation(mock_logger, "test_operation", log_start=True):
            pass

        assert "Starting test_operation" in mock_logger.log_debug.call_args[0][0]

    def test_failure_message_prefix(self):
        with pytest.raises(DatabaseError, match="^Schema reset failed: Database operation failed"):
            with DatabaseOperation(None, "drop_schema", "Schema reset failed"):
                raise SQLAlchemyError("locked")


class TestRejections:
    """Client-input rejections are warnings, not errors."""

    @pytest.mark.parametrize("error", [
        NotFoundError("Memory", 3),
        ValidationError("bad rating"),
        ConflictError("locked"),
    ])
    def test_rejection_logged_as_warning(self, error):
        mock_logger = MagicMock(spec=MementosLogger)

        with pytest.raises(type(error)):
            with DatabaseOperation(mock_logger, "set_memory_place"):
                raise error

        mock_logger.log_error.assert_not_called()
        name, details = mock_logger.log_warning.call_args[0]
        assert name == "set_memory_place_rejected"
        assert type(error).__name__ in details["error"]

    def test_decorated_method_rejection(self):
        mock_logger = MagicMock(spec=MementosLogger)
        manager = _Manager(mock_logger)

        with pytest.raises(ValidationError):
            manager.reject()

        mock_logger.log_error.assert_not_called()
        assert mock_logger.log_warning.call_args[0][0] == "reject_work_rejected"
