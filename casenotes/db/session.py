# casenotes/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from casenotes.core.config import settings


def build_engine(url: str, echo: bool = False, **kwargs):
    connect_args = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        # sessions are handed across FastAPI's threadpool
        connect_args.setdefault("check_same_thread", False)
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, echo=echo, connect_args=connect_args, **kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
