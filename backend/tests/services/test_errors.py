"""
Tests for store error translation.
"""

import pytest
from sqlalchemy.exc import DataError, IntegrityError, OperationalError

from lifestyle_cms.services.errors import (
    ConstraintViolationError,
    StoreUnavailableError,
    translate_store_error,
)


@pytest.mark.parametrize(
    "exc_type,expected,status",
    [
        (IntegrityError, ConstraintViolationError, 409),
        (DataError, ConstraintViolationError, 409),
        (OperationalError, StoreUnavailableError, 503),
    ],
)
def test_translate_store_error(exc_type, expected, status):
    exc = exc_type("INSERT INTO carousel_items ...", {}, Exception("value too long for type character varying(100)"))

    error = translate_store_error(exc, "create_item")

    assert isinstance(error, expected)
    assert error.status_code == status
    assert error.details["operation"] == "create_item"
