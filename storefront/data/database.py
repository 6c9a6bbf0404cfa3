# storefront/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from storefront.utils.settings import DATABASE_URL, STORE_TIMEOUT_SECONDS


def engine_kwargs(url: str) -> dict:
    """Ustawienia polaczenia per dialekt; kazde wywolanie bazy ma timeout."""
    if url.startswith("sqlite"):
        kwargs = {
            "connect_args": {"check_same_thread": False, "timeout": STORE_TIMEOUT_SECONDS},
        }
        # jedna wspolna baza w pamieci dla wszystkich sesji
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs

    return {
        "pool_pre_ping": True,
        "pool_timeout": STORE_TIMEOUT_SECONDS,
        "connect_args": {
            "connect_timeout": STORE_TIMEOUT_SECONDS,
            "options": f"-c statement_timeout={STORE_TIMEOUT_SECONDS * 1000}",
        },
    }


engine = create_engine(DATABASE_URL, **engine_kwargs(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
