from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from offer_service.core.config import settings


def _engine_kwargs(url: str) -> dict:
    kwargs = {"pool_pre_ping": True}
    if url.startswith("postgresql"):
        kwargs["pool_timeout"] = settings.DB_POOL_TIMEOUT
        # Bound every statement so a stuck query surfaces as an error.
        kwargs["connect_args"] = {
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
        }
    return kwargs


# The engine is the entry point to the database. It's configured with the
# database URL and handles the connection pooling.
engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

# SessionLocal is a factory for creating new Session objects.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        # Runs after the endpoint has finished, even if there was an error.
        db.close()
