"""Repository for SKU cost masters."""

from typing import Any, Dict, Iterable, List, Tuple

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.models import SkuMaster


class SkuRepository:
    """Repository for SKU master database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = structlog.get_logger(__name__)

    async def list_all(self, *, active_only: bool = False) -> List[SkuMaster]:
        stmt = select(SkuMaster)
        if active_only:
            stmt = stmt.where(SkuMaster.is_active == True)
        result = await self.session.execute(stmt.order_by(SkuMaster.sku_code))
        return list(result.scalars().all())

    async def upsert_many(self, rows: Iterable[Dict[str, Any]]) -> Tuple[int, int]:
        """Insert new SKU codes and update existing ones; returns (created, updated)."""
        rows = list(rows)
        codes = [row["sku_code"] for row in rows]
        existing_result = await self.session.execute(
            select(SkuMaster).where(SkuMaster.sku_code.in_(codes))
        )
        existing = {sku.sku_code: sku for sku in existing_result.scalars().all()}

        created = updated = 0
        for row in rows:
            sku = existing.get(row["sku_code"])
            if sku is None:
                sku = SkuMaster(**row)
                self.session.add(sku)
                existing[sku.sku_code] = sku
                created += 1
            else:
                for key, value in row.items():
                    setattr(sku, key, value)
                updated += 1

        await self.session.flush()
        self.logger.info("SKU masters imported", created=created, updated=updated)
        return created, updated
