"""CSV export of influencer lists and CSV import of SKU masters."""

import csv
import io
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import structlog

from seedboard.models import Brand
from seedboard.services.status_machine import dm_sent, flag_mark, is_shipped, response_received
from seedboard.utils.parsing import parse_decimal, parse_int

logger = structlog.get_logger(__name__)

BOM = "\ufeff"

INFLUENCER_EXPORT_HEADERS = [
    "리스트업일",
    "계정",
    "팔로워",
    "팔로잉",
    "이메일",
    "DM발송",
    "응답",
    "수락일",
    "제품명",
    "제품단가",
    "발송",
    "업로드예정일",
    "비고",
]

SKU_HEADERS = [
    "SKU코드", "제품명", "브랜드", "카테고리", "원가", "판매가", "적용일",
    "바코드", "공급업체", "최소재고", "현재재고", "활성", "메모",
]


def generate_csv(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    """Comma-delimited text; fields with commas, quotes or newlines are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return buffer.getvalue()


def to_csv_bytes(content: str) -> bytes:
    """UTF-8 with a leading BOM so spreadsheet apps detect the encoding."""
    return (BOM + content).encode("utf-8")


def parse_csv(text: str) -> List[List[str]]:
    """Rows of a CSV document, tolerant of a leading BOM and blank lines."""
    if text.startswith(BOM):
        text = text[len(BOM):]
    return [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]


def _format_date(value: Any) -> str:
    if not value:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _format_number(value: Any) -> str:
    if value is None:
        return ""
    number = float(value)
    return str(int(number)) if number == int(number) else str(number)


def influencer_export_row(influencer: Any) -> List[str]:
    """One export line for an influencer."""
    return [
        _format_date(influencer.listed_at),
        influencer.account_id,
        _format_number(influencer.follower_count),
        _format_number(influencer.following_count),
        influencer.email or "",
        flag_mark(dm_sent(influencer.status)),
        flag_mark(response_received(influencer.status)),
        _format_date(influencer.accepted_at),
        influencer.product_name or "",
        _format_number(influencer.product_price),
        flag_mark(is_shipped(influencer.status)),
        _format_date(influencer.expected_posting_date),
        influencer.notes or "",
    ]


def export_influencers_csv(influencers: Sequence[Any]) -> bytes:
    """Download-ready CSV of an influencer list."""
    rows = [influencer_export_row(influencer) for influencer in influencers]
    return to_csv_bytes(generate_csv(INFLUENCER_EXPORT_HEADERS, rows))


@dataclass
class SkuImportResult:
    """Parsed SKU rows and the number of skipped data rows."""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    skipped: int = 0


def _cell(row: Sequence[str], index: int) -> str:
    return row[index].strip() if len(row) > index and row[index] else ""


def parse_sku_csv(text: str, *, today: Optional[date] = None) -> SkuImportResult:
    """Parse an SKU master CSV (header row first, fixed column order)."""
    today = today or date.today()
    result = SkuImportResult()

    for row in parse_csv(text)[1:]:
        sku_code = _cell(row, 0)
        product_name = _cell(row, 1)
        if not sku_code or not product_name:
            result.skipped += 1
            continue

        effective = _cell(row, 6)
        try:
            effective_date = date.fromisoformat(effective) if effective else today
        except ValueError:
            effective_date = today

        result.rows.append({
            "sku_code": sku_code,
            "product_name": product_name,
            "brand": Brand.NUCCIO.value if _cell(row, 2).lower() == Brand.NUCCIO.value else Brand.HOWPAPA.value,
            "category": _cell(row, 3) or None,
            "cost_price": parse_decimal(_cell(row, 4)),
            "selling_price": parse_decimal(_cell(row, 5)),
            "effective_date": effective_date,
            "barcode": _cell(row, 7) or None,
            "supplier": _cell(row, 8) or None,
            "min_stock": parse_int(_cell(row, 9)),
            "current_stock": parse_int(_cell(row, 10)),
            "is_active": _cell(row, 11).upper() == "Y",
            "notes": _cell(row, 12) or None,
        })

    logger.info("SKU CSV parsed", rows=len(result.rows), skipped=result.skipped)
    return result


def export_skus_csv(skus: Sequence[Any]) -> bytes:
    """Current SKU master list in the same column order as the import."""
    rows = [
        [
            sku.sku_code,
            sku.product_name,
            getattr(sku.brand, "value", sku.brand),
            sku.category or "",
            _format_number(sku.cost_price),
            _format_number(sku.selling_price),
            _format_date(sku.effective_date),
            sku.barcode or "",
            sku.supplier or "",
            str(sku.min_stock or 0),
            str(sku.current_stock or 0),
            "Y" if sku.is_active else "N",
            sku.notes or "",
        ]
        for sku in skus
    ]
    return to_csv_bytes(generate_csv(SKU_HEADERS, rows))
