from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from qrmenu.config import settings


class Base(DeclarativeBase):
    pass


def connect_args_for(url: str, timeout_s: float) -> dict:
    """Driver options that bound how long one statement may wait."""
    if url.startswith("sqlite"):
        # sqlite needs the same connection shared across FastAPI's worker threads
        return {"check_same_thread": False, "timeout": timeout_s}
    if url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={int(timeout_s * 1000)}"}
    return {}


engine = create_engine(
    settings.DB_URL,
    pool_pre_ping=True,
    connect_args=connect_args_for(settings.DB_URL, settings.DB_TIMEOUT_S),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
