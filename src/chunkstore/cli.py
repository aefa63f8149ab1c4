import sys
import typer
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from chunkstore.config import settings
from chunkstore.domain.exceptions import VectorStoreError
from chunkstore.infra.db.engine import create_store_engine
from chunkstore.infra.db.schema import ensure_schema
from chunkstore.logging import configure_logging, logger

app = typer.Typer(no_args_is_help=True)

@app.callback()
def main():
    """
    chunkstore: chunk storage and similarity search on PostgreSQL + pgvector.
    """
    configure_logging(settings.log_level)

@app.command(name="doctor")
def doctor():
    """
    Print the effective configuration and check the database connection.
    """
    logger.info("Running doctor check...")

    print("\n[Environment]")
    print(f"  Python: {sys.version.split()[0]}")

    print("\n[Connection]")
    print(f"  URL:               {settings.sqlalchemy_url().render_as_string(hide_password=True)}")
    print(f"  Pool:              size={settings.pool_size} overflow={settings.max_overflow} "
          f"timeout={settings.pool_timeout}s")
    print(f"  Driver options:    {settings.connect_args()}")

    print("\n[Store]")
    print(f"  Table:             {settings.table_name}")
    print(f"  Dimension:         {settings.vector_dimension}")
    print(f"  Embedding type:    {settings.embedding_type.value}")
    print(f"  Similarity metric: {settings.similarity_metric.value}")
    print(f"  Default top_k:     {settings.top_k}")

    engine = create_store_engine(settings)
    try:
        with engine.connect() as conn:
            version = conn.execute(
                text("SELECT extversion FROM pg_extension WHERE extname = 'vector'")
            ).scalar()
    except SQLAlchemyError as e:
        print(f"\n  Database:          ❌ {e.__class__.__name__}: {e}")
        raise typer.Exit(code=1)
    finally:
        engine.dispose()

    print("\n  Database:          ✅ reachable")
    print(f"  pgvector:          {'✅ ' + version if version else '❌ extension not installed'}")

@app.command(name="bootstrap")
def bootstrap():
    """
    Create the pgvector extension, the table and its index if missing.
    """
    engine = create_store_engine(settings)
    try:
        ok = ensure_schema(
            engine,
            settings.table_name,
            settings.embedding_type,
            settings.vector_dimension,
            settings.similarity_metric,
        )
    finally:
        engine.dispose()
    if not ok:
        logger.error("Bootstrap failed; see the warning above.")
        raise typer.Exit(code=1)
    print(f"Table {settings.table_name} is ready.")

@app.command(name="count")
def count():
    """
    Print the number of stored entries.
    """
    from chunkstore.infra.search.vector_pg import PgVectorStore

    try:
        with PgVectorStore(settings, bootstrap=False) as store:
            print(store.count())
    except VectorStoreError as e:
        logger.error(f"Count failed: {e.message}")
        raise typer.Exit(code=1)

if __name__ == "__main__":
    app()
