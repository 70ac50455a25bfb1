"""SKU cost master import and export."""

from datetime import date
from typing import Any, Dict, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.repositories.sku_repository import SkuRepository
from seedboard.services.csv_service import export_skus_csv, parse_sku_csv


class SkuService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = SkuRepository(session)
        self.logger = structlog.get_logger(__name__)

    async def import_csv(self, text: str, *, today: Optional[date] = None) -> Dict[str, Any]:
        """Upsert SKU masters from CSV text keyed by ``sku_code``."""
        parsed = parse_sku_csv(text, today=today)
        created = updated = 0
        if parsed.rows:
            created, updated = await self.repo.upsert_many(parsed.rows)

        return {
            "created": created,
            "updated": updated,
            "skipped": parsed.skipped,
        }

    async def export_csv(self, *, active_only: bool = False) -> bytes:
        skus = await self.repo.list_all(active_only=active_only)
        return export_skus_csv(skus)
