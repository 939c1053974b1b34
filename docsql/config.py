"""Runtime defaults for the convenience entry points and builders.

``DocSQLConfig`` holds the few knobs the engine exposes; the module-level
:data:`DEFAULT_CONFIG` is used wherever a caller passes no config.

Example — environment-driven logging::

    config = DocSQLConfig.from_env()   # reads DOCSQL_LOG_LEVEL
    configure_logging(config.log_level)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

#: Environment variable consulted by :meth:`DocSQLConfig.from_env`.
LOG_LEVEL_ENV = "DOCSQL_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DocSQLConfig:
    """Engine-wide defaults.

    Attributes:
        default_limit: LIMIT used by :func:`~docsql.mongo_to_sql` when the
            caller gives none.
        default_order_by: ORDER BY text used by :func:`~docsql.mongo_to_sql`
            when the caller gives none.
        id_field: Identity column for bulk updates.
        log_level: Level name applied by
            :func:`~docsql.logging_config.configure_logging`.
    """

    default_limit: int = 10
    default_order_by: str = "id DESC"
    id_field: str = "id"
    log_level: str = "ERROR"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DocSQLConfig:
        """Build a config whose log level comes from ``DOCSQL_LOG_LEVEL``.

        Unknown level names fall back to ``ERROR``.
        """
        env = os.environ if environ is None else environ
        level = env.get(LOG_LEVEL_ENV, "").strip().upper()
        return cls(log_level=level if level in _LOG_LEVELS else "ERROR")


DEFAULT_CONFIG = DocSQLConfig()
