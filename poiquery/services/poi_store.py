"""
POI Store Accessor
==================

Create, update, delete and page through POI records. Every operation
that changes data or lists the whole table first re-checks that the
caller is an admin by looking the user up in the users table.

Pagination
----------
Cursor based, ordered by id. ``last_doc`` is the id of the last record
of the previous page. ``has_more`` is True when the page came back full;
this is an approximation and the following page may be empty.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from poiquery.core.exceptions import DatabaseException, NotFoundException
from poiquery.models.base import generate_uuid, utcnow
from poiquery.models.poi import POI
from poiquery.schemas.poi import POICreate, POIPage, POIResponse, POIUpdate
from poiquery.services.users import UserService

logger = logging.getLogger(__name__)


class POIStore:
    """POI persistence bound to one database session.

    Attributes:
        session: Async SQLAlchemy session.
        users: Used for the fresh admin lookup before privileged calls.
        default_page_size: Page size when the caller gives none.
        max_page_size: Upper bound for any requested page size.
    """

    def __init__(
        self,
        session,
        users: UserService,
        default_page_size: int = 10,
        max_page_size: int = 100,
    ) -> None:
        self.session = session
        self.users = users
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    async def _get_or_404(self, poi_id: str) -> POI:
        poi = await self.session.get(POI, poi_id, populate_existing=True)
        if poi is None:
            raise NotFoundException("POI not found")
        return poi

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"POI write failed: {e}")
            raise DatabaseException()

    async def create(self, data: POICreate, caller_id: str) -> POI:
        """Add a single POI.

        Args:
            data: POI fields with already encrypted coordinates.
            caller_id: Id of the authenticated caller.

        Returns:
            The stored record.
        """
        await self.users.require_admin(caller_id)

        now = utcnow()
        poi = POI(
            **data.model_dump(),
            created_by=caller_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(poi)
        await self._commit()
        await self.session.refresh(poi)

        logger.info(f"POI {poi.id} created by {caller_id}")
        return poi

    async def bulk_create(self, items: List[POICreate], caller_id: str) -> List[POI]:
        """Insert many POIs in a single transaction.

        Either every record is stored or none is. The stored records are
        read back afterwards and returned in input order.
        """
        await self.users.require_admin(caller_id)

        now = utcnow()
        ids: List[str] = []
        for item in items:
            poi_id = generate_uuid()
            ids.append(poi_id)
            self.session.add(POI(
                id=poi_id,
                **item.model_dump(),
                created_by=caller_id,
                created_at=now,
                updated_at=now,
            ))
        await self._commit()

        if not ids:
            return []

        result = await self.session.execute(
            select(POI)
            .where(POI.id.in_(ids))
            .execution_options(populate_existing=True)
        )
        by_id = {poi.id: poi for poi in result.scalars()}

        logger.info(f"Bulk insert of {len(ids)} POIs by {caller_id}")
        return [by_id[poi_id] for poi_id in ids]

    async def update(self, poi_id: str, data: POIUpdate, caller_id: str) -> POI:
        """Merge the provided fields into an existing POI.

        Raises:
            NotFoundException: If no POI has this id.
        """
        await self.users.require_admin(caller_id)
        poi = await self._get_or_404(poi_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(poi, field, value)
        poi.updated_at = utcnow()
        poi.updated_by = caller_id

        await self._commit()
        await self.session.refresh(poi)

        logger.info(f"POI {poi_id} updated by {caller_id}")
        return poi

    async def delete(self, poi_id: str, caller_id: str) -> None:
        """
        Raises:
            NotFoundException: If no POI has this id.
        """
        await self.users.require_admin(caller_id)
        poi = await self._get_or_404(poi_id)

        await self.session.delete(poi)
        await self._commit()

        logger.info(f"POI {poi_id} deleted by {caller_id}")

    async def list_page(
        self,
        caller_id: str,
        page_size: Optional[int] = None,
        last_doc: Optional[str] = None,
    ) -> POIPage:
        """Return one page of POIs ordered by id.

        Args:
            caller_id: Id of the authenticated caller.
            page_size: Requested size, clamped to [1, max_page_size].
            last_doc: Cursor returned by the previous page.

        Returns:
            POIPage with the records, the next cursor and has_more.
        """
        await self.users.require_admin(caller_id)

        if page_size is None:
            page_size = self.default_page_size
        page_size = max(1, min(page_size, self.max_page_size))

        query = select(POI).order_by(POI.id).limit(page_size)
        if last_doc:
            query = query.where(POI.id > last_doc)

        result = await self.session.execute(query)
        pois = list(result.scalars())

        return POIPage(
            pois=[POIResponse.model_validate(poi) for poi in pois],
            last_doc=pois[-1].id if pois else None,
            has_more=len(pois) == page_size,
        )

    async def scan_all(self) -> List[POI]:
        """Every stored POI, unordered. Used by the search full scan."""
        result = await self.session.execute(select(POI))
        return list(result.scalars())
