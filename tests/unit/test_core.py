"""Tests for settings, the error taxonomy, security helpers and logging setup."""

import logging
import uuid
from datetime import timedelta

import pytest

from changerawr.core.config import Settings
from changerawr.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ChangerawrError,
    ConflictError,
    DuplicateRequestError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from changerawr.core.logger import setup_logger
from changerawr.core.security import create_access_token, decode_token


class TestErrors:
    """Test each error maps to its HTTP status."""

    @pytest.mark.parametrize(
        "error_class,status_code",
        [
            (AuthenticationError, 401),
            (AuthorizationError, 403),
            (NotFoundError, 404),
            (DuplicateRequestError, 400),
            (ValidationError, 400),
            (ConflictError, 409),
            (UnexpectedError, 500),
        ],
    )
    def test_status_codes(self, error_class, status_code):
        error = error_class()
        assert isinstance(error, ChangerawrError)
        assert error.status_code == status_code
        assert error.message == error_class.default_message

    def test_custom_message_and_details(self):
        error = ValidationError("Bad input", details=[{"field": "title", "message": "required"}])
        assert str(error) == "Bad input"
        assert error.details == [{"field": "title", "message": "required"}]


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.request_duplicate_scope == "entry"
        assert settings.schedule_sweep_seconds == 60
        assert settings.celery_broker == settings.redis_url

    def test_cors_origins_list(self):
        settings = Settings(_env_file=None, cors_origins="https://a.example, https://b.example,")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_invalid_duplicate_scope(self):
        with pytest.raises(Exception):
            Settings(_env_file=None, request_duplicate_scope="project")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("REQUEST_DUPLICATE_SCOPE", "type")
        assert Settings(_env_file=None).request_duplicate_scope == "type"


class TestSecurity:
    """Test access tokens."""

    def test_token_round_trip(self):
        user_id = uuid.uuid4()
        assert decode_token(create_access_token(user_id)) == user_id

    def test_expired_token(self):
        token = create_access_token(uuid.uuid4(), expires_delta=timedelta(minutes=-1))
        assert decode_token(token) is None

    def test_garbage_token(self):
        assert decode_token("not-a-jwt") is None


class TestLogger:
    def test_setup_logger_without_files(self, tmp_path):
        logger = setup_logger("changerawr.test", log_dir=str(tmp_path), level="DEBUG", file_logging=False)
        assert logger.level == logging.DEBUG
        assert list(tmp_path.iterdir()) == []
