from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, DBAPIError
from sqlalchemy.orm import sessionmaker, Session
from ..config import settings
from ..domain.errors import ValidationFailure, TransientStoreFailure

# SQLite: сессия открывается в пуле потоков FastAPI, а используется в резолвере
connect_args = {}
engine_kwargs = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
else:
    engine_kwargs = {"pool_size": 10, "max_overflow": 20, "pool_recycle": 3600}
if settings.DATABASE_URL.startswith("postgresql"):
    connect_args = {"client_encoding": "utf8"}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
    echo=False,
    **engine_kwargs,
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db():
    db = SessionLocal()
    try: yield db
    finally: db.close()


@contextmanager
def store_errors(db: Session):
    """Переводит ошибки драйвера в доменные, откатывая транзакцию."""
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        raise ValidationFailure(f"Constraint violated: {e.orig}") from e
    except DBAPIError as e:
        db.rollback()
        raise TransientStoreFailure(f"Store unavailable: {e.orig}") from e


def commit_or_raise(db: Session) -> None:
    with store_errors(db):
        db.commit()
