# tests/test_schemas.py

"""Request and response bodies."""

import importlib
import warnings

import pytest
from pydantic import ValidationError as PydanticValidationError
from pydantic.warnings import PydanticDeprecatedSince20

import mrkim.schemas.auth as auth_schemas


def test_schemas_define_without_deprecated_config():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        module = importlib.reload(auth_schemas)

    assert not [w for w in caught if issubclass(w.category, PydanticDeprecatedSince20)]
    assert module.UserSummary(id=1, role="CUSTOMER").email is None


def test_email_fields_are_validated():
    assert auth_schemas.EmailOTPRequest(email="a@example.com").email == "a@example.com"
    assert auth_schemas.EmailOTPRequest().email is None

    with pytest.raises(PydanticValidationError):
        auth_schemas.EmailOTPRequest(email="not-an-email")
    with pytest.raises(PydanticValidationError):
        auth_schemas.RegisterRequest(email="a@", password="pw", role="CUSTOMER")
