"""Database layer for Tax Scanner with async SQLAlchemy."""

from taxscanner.db.connection import get_db, get_session, init_db
from taxscanner.db.models import (
    Base,
    CityModel,
    CountyModel,
    ImportSourceModel,
    StateModel,
)
from taxscanner.db.repository import JurisdictionRepository

__all__ = [
    "Base",
    "StateModel",
    "CountyModel",
    "CityModel",
    "ImportSourceModel",
    "JurisdictionRepository",
    "get_db",
    "get_session",
    "init_db",
]
