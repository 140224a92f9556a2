"""Learn which pg-boss schema revision a database carries."""

from __future__ import annotations

from bossdesk.core.connection import validate_schema_name
from bossdesk.core.errors import (
    BossDeskError,
    DetectionConnectionError,
    ExecutorError,
    NoVersionFoundError,
    UnsupportedVersionError,
    VersionTableNotFoundError,
)
from bossdesk.core.logging import get_logger
from bossdesk.core.protocols import Executor
from bossdesk.schema.version import MAX_SUPPORTED, MIN_SUPPORTED, SchemaVersion

logger = get_logger(__name__)


def version_sql(schema: str) -> str:
    return f"SELECT version FROM {schema}.version ORDER BY version DESC LIMIT 1"


class SchemaDetector:
    """Run the single version query and classify the outcome.

    No retries here; callers retry the whole detect-then-adapt sequence.
    """

    def detect(self, executor: Executor, schema: str) -> SchemaVersion:
        schema = validate_schema_name(schema)
        try:
            rows = executor.execute(version_sql(schema))
        except ExecutorError as e:
            if e.is_undefined_table:
                logger.info("version_table_not_found", schema=schema)
                raise VersionTableNotFoundError(schema, cause=e) from e
            logger.warning("schema_detection_failed", schema=schema, error=e.message)
            raise DetectionConnectionError(e.message, cause=e) from e
        except (BossDeskError, OSError) as e:
            logger.warning("schema_detection_failed", schema=schema, error=str(e))
            raise DetectionConnectionError(getattr(e, "reason", str(e)), cause=e) from e

        if not rows or rows[0][0] is None:
            logger.info("no_version_found", schema=schema)
            raise NoVersionFoundError(schema)

        version = SchemaVersion(int(rows[0][0]))
        if not version.is_supported:
            logger.warning("unsupported_schema_version", schema=schema, version=version.value)
            raise UnsupportedVersionError(
                version.value, minimum=MIN_SUPPORTED, maximum=MAX_SUPPORTED
            )

        logger.info(
            "schema_detected",
            schema=schema,
            version=version.value,
            adapter_group=version.adapter_group.value,
        )
        return version


__all__ = ["SchemaDetector", "version_sql"]
