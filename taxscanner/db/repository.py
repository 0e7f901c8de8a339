"""Jurisdiction query interface.

The only module that builds SQL for the jurisdiction hierarchy. The rate
resolver reads through it and the importers write through it; both receive
a repository bound to a session owned by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taxscanner.db.models import (
    CityModel,
    CountyModel,
    ImportSourceModel,
    StateModel,
    utcnow,
)

logger = logging.getLogger(__name__)


class JurisdictionRepository:
    """Reads and upserts State/County/City rows and import provenance."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def find_state(self, code: str) -> StateModel | None:
        stmt = select(StateModel).where(StateModel.code == code.strip().upper())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_counties_by_state_and_name_contains(
        self, state_id: int, fragment: str
    ) -> Sequence[CountyModel]:
        """Counties of a state whose name contains fragment, any case.

        Returned in storage order; choosing among them is the caller's job.
        """
        stmt = (
            select(CountyModel)
            .where(
                CountyModel.state_id == state_id,
                CountyModel.name.icontains(fragment.strip(), autoescape=True),
            )
            .order_by(CountyModel.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_cities_by_county_and_name_contains(
        self, county_id: int, fragment: str
    ) -> Sequence[CityModel]:
        stmt = (
            select(CityModel)
            .where(
                CityModel.county_id == county_id,
                CityModel.name.icontains(fragment.strip(), autoescape=True),
            )
            .order_by(CityModel.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_states(self) -> Sequence[StateModel]:
        result = await self.session.execute(select(StateModel).order_by(StateModel.name))
        return result.scalars().all()

    async def list_counties(self, state_code: str) -> Sequence[CountyModel]:
        stmt = (
            select(CountyModel)
            .join(StateModel, CountyModel.state_id == StateModel.id)
            .where(StateModel.code == state_code.strip().upper())
            .order_by(CountyModel.name)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_cities(self, state_code: str, county_name: str) -> Sequence[CityModel]:
        stmt = (
            select(CityModel)
            .join(CountyModel, CityModel.county_id == CountyModel.id)
            .join(StateModel, CountyModel.state_id == StateModel.id)
            .where(
                StateModel.code == state_code.strip().upper(),
                func.lower(CountyModel.name) == county_name.strip().lower(),
            )
            .order_by(CityModel.name)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_city(self, county_id: int, name: str) -> CityModel | None:
        stmt = select(CityModel).where(CityModel.county_id == county_id, CityModel.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Upserts (natural keys: code; state+name; county+name; source_id)
    # ------------------------------------------------------------------

    async def upsert_state(
        self,
        code: str,
        name: str,
        general_tax_rate: Decimal,
        food_tax_rate: Decimal | None = None,
    ) -> tuple[StateModel, bool]:
        """Insert or update a state. The code itself is never rewritten."""
        state = await self.find_state(code)
        if state is None:
            state = StateModel(
                code=code.strip().upper(),
                name=name,
                general_tax_rate=general_tax_rate,
                food_tax_rate=food_tax_rate,
            )
            self.session.add(state)
            await self.session.flush()
            logger.debug(f"Inserted state {state.code}")
            return state, True

        state.name = name
        state.general_tax_rate = general_tax_rate
        state.food_tax_rate = food_tax_rate
        return state, False

    async def upsert_county(
        self,
        state: StateModel,
        name: str,
        general_tax_rate: Decimal,
        food_tax_rate: Decimal | None = None,
    ) -> tuple[CountyModel, bool]:
        stmt = select(CountyModel).where(
            CountyModel.state_id == state.id, CountyModel.name == name
        )
        county = (await self.session.execute(stmt)).scalar_one_or_none()
        if county is None:
            county = CountyModel(
                state_id=state.id,
                name=name,
                general_tax_rate=general_tax_rate,
                food_tax_rate=food_tax_rate,
            )
            self.session.add(county)
            await self.session.flush()
            return county, True

        county.general_tax_rate = general_tax_rate
        county.food_tax_rate = food_tax_rate
        return county, False

    async def upsert_city(
        self,
        county: CountyModel,
        name: str,
        general_tax_rate: Decimal,
        food_tax_rate: Decimal | None = None,
        local_tax_rate: Decimal | None = None,
        total_tax_rate: Decimal | None = None,
    ) -> tuple[CityModel, bool]:
        city = await self.find_city(county.id, name)
        if city is None:
            city = CityModel(
                county_id=county.id,
                name=name,
                general_tax_rate=general_tax_rate,
                food_tax_rate=food_tax_rate,
                local_tax_rate=local_tax_rate,
                total_tax_rate=total_tax_rate,
                last_updated=utcnow(),
            )
            self.session.add(city)
            await self.session.flush()
            return city, True

        city.general_tax_rate = general_tax_rate
        city.food_tax_rate = food_tax_rate
        city.local_tax_rate = local_tax_rate
        city.total_tax_rate = total_tax_rate
        city.last_updated = utcnow()
        await self.session.flush()
        return city, False

    # ------------------------------------------------------------------
    # Import provenance
    # ------------------------------------------------------------------

    async def get_import_source(self, source_id: str) -> ImportSourceModel | None:
        stmt = select(ImportSourceModel).where(ImportSourceModel.source_id == source_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_import_sources(self) -> Sequence[ImportSourceModel]:
        stmt = select(ImportSourceModel).order_by(ImportSourceModel.source_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def upsert_import_source(
        self,
        source_id: str,
        records_count: int,
        status: str,
        error_message: str | None = None,
    ) -> ImportSourceModel:
        """Overwrite the provenance record of a source with the latest run."""
        source = await self.get_import_source(source_id)
        if source is None:
            source = ImportSourceModel(source_id=source_id)
            self.session.add(source)

        source.last_updated = utcnow()
        source.records_count = records_count
        source.status = status
        source.error_message = error_message
        await self.session.flush()
        return source
