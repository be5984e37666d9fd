"""Tests for the exception hierarchy."""

import pytest

from stone_river.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    InputFileError,
    PortalError,
    ReferentialIntegrityError,
    SinkError,
    StoreError,
)


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    @pytest.mark.parametrize(
        "error",
        [ConfigurationError, EntityNotFoundError, InputFileError, SinkError, StoreError],
    )
    def test_portal_errors(self, error) -> None:
        assert issubclass(error, PortalError)

    def test_portal_error_is_exception(self) -> None:
        assert issubclass(PortalError, Exception)

    def test_referential_integrity_is_not_found(self) -> None:
        assert issubclass(ReferentialIntegrityError, EntityNotFoundError)

    def test_catch_base(self) -> None:
        with pytest.raises(PortalError, match="Customer 7"):
            raise ReferentialIntegrityError("Customer 7 not found")
