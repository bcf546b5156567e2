"""Tests for request schemas."""

import pytest

from src.models.schemas import (
    AccountUpdate,
    LoginRequest,
    PlaylistUpdate,
    UserRegister,
    validate_model,
)
from src.utils.errors import ValidationError


class TestUserRegister:
    """Tests for registration validation."""

    def test_normalizes(self):
        data = validate_model(
            UserRegister,
            username="  Alice ",
            email="ALICE@Example.com",
            display_name="Alice",
            password="long-enough-1",
        )
        assert data.username == "alice"
        assert data.email == "alice@example.com"

    def test_blank_fields_are_listed(self):
        with pytest.raises(ValidationError) as exc:
            validate_model(
                UserRegister, username=" ", email="a@b.co", display_name="", password="long-enough-1"
            )
        assert exc.value.details == ["display_name", "username"]

    def test_bad_username(self):
        with pytest.raises(ValidationError):
            validate_model(
                UserRegister, username="a b", email="a@b.co", display_name="A", password="long-enough-1"
            )

    @pytest.mark.parametrize("email", ["not-an-email", "a@b", "two@@example.com", "a b@example.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError) as exc:
            validate_model(UserRegister, username="a", email=email, display_name="A", password="long-enough-1")
        assert exc.value.details == ["email"]

    def test_short_password(self):
        with pytest.raises(ValidationError) as exc:
            validate_model(UserRegister, username="a", email="a@b.co", display_name="A", password="short")
        assert exc.value.details == ["password"]


class TestUpdates:
    """At-least-one-field updates."""

    def test_login_needs_identifier(self):
        with pytest.raises(ValidationError):
            validate_model(LoginRequest, password="whatever")

    def test_account_update_needs_a_field(self):
        with pytest.raises(ValidationError):
            validate_model(AccountUpdate)

    def test_account_update_email(self):
        assert validate_model(AccountUpdate, email=" New@Mail.io ").email == "new@mail.io"

    def test_account_update_invalid_email(self):
        with pytest.raises(ValidationError) as exc:
            validate_model(AccountUpdate, email="nobody@localhost")
        assert exc.value.details == ["email"]

    def test_playlist_update_partial(self):
        data = validate_model(PlaylistUpdate, name="Renamed")
        assert data.name == "Renamed"
        assert data.description is None
