"""
Connection parameters and identifier validation.

``ConnectionConfig`` is the plaintext, already-resolved description of one
database target (credential storage lives outside this package). The schema
name is interpolated into every generated statement, so it is validated here
as a safe unquoted identifier before anything else touches it.
"""

from __future__ import annotations

import re
import uuid
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bossdesk.core.errors import InvalidSchemaNameError

if TYPE_CHECKING:
    from bossdesk.core.settings import BossDeskSettings

DEFAULT_SCHEMA = "pgboss"

# Lowercase letter or underscore, then lowercase letters, digits, underscore or dollar
_SAFE_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_$]*$")

SCHEMA_NAME_REQUIREMENTS = (
    "Schema names must start with a lowercase letter or underscore, and contain "
    "only lowercase letters, numbers, underscores, or dollar signs."
)


def is_valid_schema_name(schema: str) -> bool:
    """Return ``True`` if *schema* can be used in SQL without quoting.

    >>> is_valid_schema_name("pgboss")
    True
    >>> is_valid_schema_name("PgBoss")
    False
    """
    return bool(schema) and _SAFE_IDENTIFIER.fullmatch(schema) is not None


def validate_schema_name(schema: str) -> str:
    """Return *schema* unchanged or raise :class:`InvalidSchemaNameError`."""
    if not is_valid_schema_name(schema):
        raise InvalidSchemaNameError(schema)
    return schema


class SSLMode(str, Enum):
    DISABLED = "disabled"
    ENABLED = "enabled"
    VERIFY_CA = "verify_ca"

    @property
    def libpq_mode(self) -> str:
        match self:
            case SSLMode.DISABLED:
                return "disable"
            case SSLMode.ENABLED:
                return "require"
            case SSLMode.VERIFY_CA:
                return "verify-ca"


class AuthMethod(str, Enum):
    """Credential scheme the connection collaborator should use.

    ``AUTO`` leaves negotiation to the driver, which answers whichever
    challenge (SCRAM or MD5) the server sends.
    """

    AUTO = "auto"
    SCRAM_SHA_256 = "scram-sha-256"
    MD5 = "md5"


class ConnectionConfig(BaseModel):
    """Resolved parameters for one database target.

    The password is excluded from serialization so a dumped config can be
    persisted or logged without leaking the credential.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    username: str = "postgres"
    password: str = Field(default="", exclude=True, repr=False)
    ssl_mode: SSLMode = SSLMode.ENABLED
    auth_method: AuthMethod = AuthMethod.AUTO
    ca_certificate_path: str = ""
    client_certificate_path: str = ""
    client_key_path: str = ""
    schema_name: str = DEFAULT_SCHEMA
    connect_timeout: int = 30
    # libpq connection URI; when set it takes precedence over host/port/...
    dsn: str = Field(default="", exclude=True, repr=False)

    @field_validator("schema_name")
    @classmethod
    def _check_schema(cls, value: str) -> str:
        if not is_valid_schema_name(value):
            raise ValueError(SCHEMA_NAME_REQUIREMENTS)
        return value

    def connect_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``psycopg2.connect`` / the pool."""
        if self.dsn:
            return {
                "dsn": self.dsn,
                "connect_timeout": self.connect_timeout,
                "application_name": "bossdesk",
            }
        kwargs: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.username,
            "password": self.password,
            "sslmode": self.ssl_mode.libpq_mode,
            "connect_timeout": self.connect_timeout,
            "application_name": "bossdesk",
        }
        if self.ssl_mode is SSLMode.VERIFY_CA:
            if self.ca_certificate_path:
                kwargs["sslrootcert"] = self.ca_certificate_path
            if self.client_certificate_path:
                kwargs["sslcert"] = self.client_certificate_path
            if self.client_key_path:
                kwargs["sslkey"] = self.client_key_path
        if self.auth_method is not AuthMethod.AUTO:
            kwargs["require_auth"] = self.auth_method.value
        return kwargs

    @classmethod
    def from_settings(cls, settings: BossDeskSettings) -> ConnectionConfig:
        return cls(
            id=settings.connection_id,
            host=settings.host,
            port=settings.port,
            database=settings.database,
            username=settings.user,
            password=settings.password,
            ssl_mode=settings.ssl_mode,
            auth_method=settings.auth_method,
            ca_certificate_path=settings.ca_certificate_path,
            client_certificate_path=settings.client_certificate_path,
            client_key_path=settings.client_key_path,
            schema_name=settings.schema_name,
            connect_timeout=settings.connect_timeout_seconds,
            dsn=settings.database_url or "",
        )


__all__ = [
    "DEFAULT_SCHEMA",
    "SCHEMA_NAME_REQUIREMENTS",
    "is_valid_schema_name",
    "validate_schema_name",
    "SSLMode",
    "AuthMethod",
    "ConnectionConfig",
]
