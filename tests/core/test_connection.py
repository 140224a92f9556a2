"""Tests for bossdesk.core.connection."""

import pytest
from pydantic import ValidationError

from bossdesk.core.connection import (
    AuthMethod,
    ConnectionConfig,
    SSLMode,
    is_valid_schema_name,
    validate_schema_name,
)
from bossdesk.core.errors import InvalidSchemaNameError
from bossdesk.core.settings import BossDeskSettings


class TestSchemaNames:
    @pytest.mark.parametrize(
        "name, valid",
        [
            ("pgboss", True),
            ("_abc123", True),
            ("boss$1", True),
            ("PgBoss", False),
            ("my schema", False),
            ("", False),
            ("1boss", False),
            ("boss;drop", False),
            ("boss\n", False),
        ],
    )
    def test_is_valid(self, name, valid):
        assert is_valid_schema_name(name) is valid

    def test_validate_raises(self):
        with pytest.raises(InvalidSchemaNameError) as exc_info:
            validate_schema_name("PgBoss")
        assert exc_info.value.code == "INVALID_SCHEMA_NAME"
        assert "lowercase" in exc_info.value.hint


class TestConnectionConfig:
    def test_rejects_bad_schema(self):
        with pytest.raises(ValidationError):
            ConnectionConfig(schema_name="Bad")

    def test_password_not_serialized(self):
        config = ConnectionConfig(password="secret")
        assert "password" not in config.model_dump()
        assert "secret" not in repr(config)

    def test_connect_kwargs(self):
        kwargs = ConnectionConfig(host="db", port=6543, database="app", username="u", password="p").connect_kwargs()
        assert kwargs["host"] == "db"
        assert kwargs["port"] == 6543
        assert kwargs["dbname"] == "app"
        assert kwargs["sslmode"] == SSLMode.ENABLED.libpq_mode
        assert "require_auth" not in kwargs
        assert "sslrootcert" not in kwargs

    def test_verify_ca_certificates(self):
        kwargs = ConnectionConfig(
            ssl_mode=SSLMode.VERIFY_CA,
            ca_certificate_path="/ca.pem",
            client_certificate_path="/client.pem",
            client_key_path="/client.key",
        ).connect_kwargs()
        assert kwargs["sslmode"] == "verify-ca"
        assert kwargs["sslrootcert"] == "/ca.pem"
        assert kwargs["sslcert"] == "/client.pem"
        assert kwargs["sslkey"] == "/client.key"

    def test_explicit_auth_method(self):
        kwargs = ConnectionConfig(auth_method=AuthMethod.MD5).connect_kwargs()
        assert kwargs["require_auth"] == "md5"

    def test_dsn_takes_precedence(self):
        kwargs = ConnectionConfig(dsn="postgresql://u@h/db", host="ignored").connect_kwargs()
        assert kwargs["dsn"] == "postgresql://u@h/db"
        assert "host" not in kwargs

    def test_from_settings(self):
        settings = BossDeskSettings(host="db", schema_name="jobs", password="pw", connection_id="prod")
        config = ConnectionConfig.from_settings(settings)
        assert config.id == "prod"
        assert config.host == "db"
        assert config.schema_name == "jobs"
        assert config.password == "pw"
