"""Status codes and default messages of the application errors."""

import pytest

from poiquery.core.exceptions import (
    AppException,
    DecryptionError,
    ForbiddenException,
    InvalidRadiusException,
    NotFoundException,
    ValidationException,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "exc_class, status_code",
    [
        (AppException, 500),
        (ValidationException, 400),
        (InvalidRadiusException, 400),
        (DecryptionError, 400),
        (ForbiddenException, 403),
        (NotFoundException, 404),
    ],
)
def test_status_codes(exc_class, status_code):
    assert exc_class().status_code == status_code


def test_default_and_custom_messages():
    assert ForbiddenException().message == "Unauthorized: Admin role required"
    assert NotFoundException("POI not found").message == "POI not found"
    assert str(ValidationException("bad")) == "bad"


def test_invalid_radius_is_a_validation_error():
    with pytest.raises(ValidationException):
        raise InvalidRadiusException()


def test_details_default_to_empty_dict():
    assert AppException().details == {}
    assert AppException(details={"field": "lat"}).details == {"field": "lat"}


def test_status_code_override_does_not_leak():
    AppException(status_code=418)
    assert AppException().status_code == 500
