"""Pooled SQLAlchemy engine for the configured PostgreSQL database."""
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from chunkstore.config import Settings


def create_store_engine(settings: Settings) -> Engine:
    return create_engine(
        settings.sqlalchemy_url(),
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
        pool_pre_ping=settings.pool_pre_ping,
        connect_args=settings.connect_args(),
    )


__all__ = ["create_store_engine"]
