import logging
import re
from typing import Generator

from fastapi import Depends, Header
from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .config import get_settings

Base = declarative_base()

logger = logging.getLogger(__name__)

_engines: dict[str, Engine] = {}
_session_factories: dict[str, sessionmaker] = {}


def _sanitize_profile_name(name: str) -> str:
    return re.sub(r"[^a-z0-9_-]", "", name.lower())[:50]


def get_or_create_engine(profile: str) -> Engine:
    from . import models  # noqa: F401  (registers tables on Base.metadata)

    safe = _sanitize_profile_name(profile) or "default"
    if safe not in _engines:
        profiles_dir = get_settings().data_dir
        profiles_dir.mkdir(parents=True, exist_ok=True)
        db_path = profiles_dir / f"{safe}.db"
        engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(bind=engine)
        _engines[safe] = engine
        _session_factories[safe] = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info("Opened profile database %s", db_path)
    return _engines[safe]


def init_profile_db(name: str) -> str:
    """Create the profile's tables if needed. Returns the sanitized name."""
    safe = _sanitize_profile_name(name) or "default"
    get_or_create_engine(safe)
    return safe


def get_profile_name(x_profile: str = Header(default="default")) -> str:
    return _sanitize_profile_name(x_profile) or "default"


def get_session_factory(profile: str) -> sessionmaker:
    safe = _sanitize_profile_name(profile) or "default"
    get_or_create_engine(safe)
    return _session_factories[safe]


def get_db(
    profile: str = Depends(get_profile_name),
) -> Generator[Session, None, None]:
    db = get_session_factory(profile)()
    try:
        yield db
    finally:
        db.close()
