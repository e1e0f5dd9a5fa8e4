from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from rental_admin.config import settings
import os

# Tests must never reach a real database
if os.getenv("TESTING") == "true" and not settings.DATABASE_URL.startswith("sqlite"):
    import warnings
    warnings.warn(
        f"Tests are configured but DATABASE_URL points to non-SQLite: {settings.DATABASE_URL[:50]}...\n"
        "Set DATABASE_URL=sqlite:///:memory: before importing rental_admin modules.",
        RuntimeWarning,
        stacklevel=2,
    )

# SQLite needs check_same_thread, PostgreSQL doesn't
if settings.DATABASE_URL.startswith("sqlite"):
    from sqlalchemy.pool import NullPool

    engine_kwargs = {
        "connect_args": {"check_same_thread": False},
        "poolclass": NullPool,
        "echo": False,
    }
else:
    engine_kwargs = {
        "connect_args": {"connect_timeout": 10},
        "pool_size": 5,
        "max_overflow": 5,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "pool_timeout": 30,
        "echo": False,
    }

engine = create_engine(settings.DATABASE_URL, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
