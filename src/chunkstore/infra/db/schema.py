"""One-time schema bootstrap for a store table.

Creates the pgvector extension, the table and its HNSW index if missing.
Failures are logged, never raised: the table may already exist or be
provisioned by someone with more privileges.
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from chunkstore.domain.models import EmbeddingType, SimilarityMetric
from chunkstore.infra.search.statements import build_bootstrap

logger = logging.getLogger(__name__)

RAW_SQL = {"no_parameters": True}


def ensure_schema(
    engine: Engine,
    table_name: str,
    kind: EmbeddingType,
    dimension: int,
    metric: SimilarityMetric,
) -> bool:
    """Run the bootstrap DDL in one transaction; return False if it failed."""
    statements = build_bootstrap(table_name, kind, dimension, metric)
    try:
        with engine.begin() as conn:
            for statement in statements:
                conn.exec_driver_sql(statement, execution_options=RAW_SQL)
    except SQLAlchemyError as exc:
        logger.warning(
            "Schema bootstrap for table %s failed; assuming it is provisioned externally: %s",
            table_name,
            exc,
        )
        return False
    logger.info("Schema ready: table %s (%s, dim=%d, %s)", table_name, kind.value, dimension, metric.value)
    return True
