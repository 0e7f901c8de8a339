"""SQLAlchemy async database models for Tax Scanner.

Jurisdictions form a strict State -> County -> City hierarchy. Rates are
decimal fractions (0.0625 means 6.25%). Rows are upserted by natural key
and never deleted by imports.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

RATE = Numeric(10, 6)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class StateModel(Base):
    """A state; single-rate unless food_tax_rate is set and differs."""

    __tablename__ = "states"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(2), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    general_tax_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("0"))
    food_tax_rate: Mapped[Decimal | None] = mapped_column(RATE)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    counties: Mapped[list[CountyModel]] = relationship(
        back_populates="state", cascade="all, delete-orphan", lazy="raise"
    )

    @property
    def has_dual_rates(self) -> bool:
        return self.food_tax_rate is not None and self.food_tax_rate != self.general_tax_rate


class CountyModel(Base):
    """A county, unique by name within its state."""

    __tablename__ = "counties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    state_id: Mapped[int] = mapped_column(
        ForeignKey("states.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)

    general_tax_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("0"))
    food_tax_rate: Mapped[Decimal | None] = mapped_column(RATE)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    state: Mapped[StateModel] = relationship(back_populates="counties", lazy="raise")
    cities: Mapped[list[CityModel]] = relationship(
        back_populates="county", cascade="all, delete-orphan", lazy="raise"
    )

    __table_args__ = (
        UniqueConstraint("state_id", "name", name="uq_counties_state_name"),
        Index("idx_counties_state", "state_id"),
    )


class CityModel(Base):
    """A city, unique by name within its county.

    local_tax_rate and total_tax_rate are precomputed by flat-file imports
    that publish them (Texas); otherwise they stay null and totals are
    computed on read.
    """

    __tablename__ = "cities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    county_id: Mapped[int] = mapped_column(
        ForeignKey("counties.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)

    general_tax_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("0"))
    food_tax_rate: Mapped[Decimal | None] = mapped_column(RATE)
    local_tax_rate: Mapped[Decimal | None] = mapped_column(RATE)
    total_tax_rate: Mapped[Decimal | None] = mapped_column(RATE)

    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    county: Mapped[CountyModel] = relationship(back_populates="cities", lazy="raise")

    __table_args__ = (
        UniqueConstraint("county_id", "name", name="uq_cities_county_name"),
        Index("idx_cities_county", "county_id"),
    )


class ImportSourceModel(Base):
    """Provenance of the latest import run for one data source.

    One row per source, overwritten on every run; not a history table.
    """

    __tablename__ = "import_sources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    records_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint(
            "status IN ('success', 'partial_success', 'no_data', 'error')",
            name="check_import_status_valid",
        ),
        CheckConstraint("records_count >= 0", name="check_records_count_non_negative"),
    )
