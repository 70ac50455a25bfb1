"""Helpers for rendering seeding funnel reports and daily KPI alerts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytz

from seedboard.config import settings
from seedboard.models import SEEDING_STATUS_LABELS, SeedingStatus
from seedboard.services.status_machine import FORWARD_STAGES

KPI_OK = "ok"
KPI_WARNING = "warning"
KPI_CRITICAL = "critical"

# Below this share of the target a metric is critical regardless of threshold.
CRITICAL_RATIO = 0.5

KPI_HEADLINES = {
    KPI_OK: "✅ [{brand}] 시딩 목표 달성 중",
    KPI_WARNING: "⚠️ [{brand}] 시딩 진행률 주의",
    KPI_CRITICAL: "🔴 [{brand}] 시딩 목표 미달 경고",
}

KPI_FOOTERS = {
    KPI_OK: "👏 오늘도 순조롭게 진행되고 있습니다.",
    KPI_WARNING: "💡 남은 시간 내 달성을 위해 속도를 높여주세요.",
    KPI_CRITICAL: "⚠️ 오늘 목표 달성이 어려울 수 있습니다.",
}


Line = Tuple[str, bool]


def format_percent(value: Optional[float]) -> str:
    """Format a percentage value (already multiplied by 100)."""
    try:
        numeric = float(value or 0)
    except (TypeError, ValueError):
        numeric = 0.0
    return f"{numeric:.1f}%"


def format_won(value: Any) -> str:
    try:
        numeric = float(value or 0)
    except (TypeError, ValueError):
        numeric = 0.0
    return f"{numeric:,.0f}원"


def _append(lines: List[Line], text: str, *, bold: bool = False) -> None:
    lines.append((text, bold))


def _build_funnel_lines(project_name: str, counts: Dict[str, Any], stats: Dict[str, Any]) -> List[Line]:
    lines: List[Line] = []
    total = counts.get("total", 0)

    _append(lines, f"🌱 {project_name} 시딩 리포트", bold=True)
    _append(lines, "")
    _append(lines, "📊 퍼널", bold=True)
    _append(lines, f"• 전체: {total}")
    for stage in FORWARD_STAGES:
        count = counts.get(stage.value, 0)
        share = (count / total) * 100 if total else 0.0
        _append(lines, f"• {SEEDING_STATUS_LABELS[stage]}: {count} ({format_percent(share)})")
    _append(lines, f"• {SEEDING_STATUS_LABELS[SeedingStatus.REJECTED]}: {counts.get('rejected', 0)}")

    completed_at = counts.get("completed_at")
    if completed_at is not None and completed_at != counts.get(SeedingStatus.COMPLETED.value, 0):
        _append(lines, f"• ⚠️ 완료일 기준 완료: {completed_at}")

    if stats:
        _append(lines, "")
        _append(lines, "📈 전환율", bold=True)
        _append(lines, f"• 진행률: {format_percent(stats.get('progress_rate'))}")
        _append(lines, f"• 수락률: {format_percent(stats.get('acceptance_rate'))}")
        _append(lines, f"• 포스팅률: {format_percent(stats.get('posting_rate'))}")

        _append(lines, "")
        _append(lines, "💰 비용", bold=True)
        _append(lines, f"• 제품 원가: {format_won(stats.get('total_cost'))}")
        _append(lines, f"• 제품 가치: {format_won(stats.get('total_value'))}")
        _append(lines, f"• 원고료: {format_won(stats.get('total_fee'))}")

        _append(lines, "")
        _append(lines, "👀 성과", bold=True)
        _append(lines, f"• 조회수: {stats.get('total_reach', 0):,}")
        _append(lines, f"• 참여: {stats.get('total_engagement', 0):,}")

    return lines


def format_funnel_report(project_name: str, counts: Dict[str, Any], stats: Optional[Dict[str, Any]] = None) -> str:
    """Plain text funnel report for a project."""
    return "\n".join(text for text, _ in _build_funnel_lines(project_name, counts, stats or {}))


def format_funnel_report_html(project_name: str, counts: Dict[str, Any], stats: Optional[Dict[str, Any]] = None) -> str:
    """Funnel report with bold section headers as HTML tags."""
    parts = []
    for text, bold in _build_funnel_lines(project_name, counts, stats or {}):
        if not text:
            parts.append("")
            continue
        parts.append(f"<b>{text}</b>" if bold else text)
    return "\n".join(parts)


# ===== Daily KPI =====

@dataclass
class DailyKpi:
    brand: str
    day: date
    listup_actual: int
    listup_target: int
    acceptance_actual: int
    acceptance_target: int

    @property
    def listup_rate(self) -> float:
        return self.listup_actual / self.listup_target if self.listup_target else 1.0

    @property
    def acceptance_rate(self) -> float:
        return self.acceptance_actual / self.acceptance_target if self.acceptance_target else 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "brand": self.brand,
            "day": self.day.isoformat(),
            "listup": {"actual": self.listup_actual, "target": self.listup_target},
            "acceptance": {"actual": self.acceptance_actual, "target": self.acceptance_target},
            "listup_rate": round(self.listup_rate, 2),
            "acceptance_rate": round(self.acceptance_rate, 2),
        }


def local_day(value: Optional[datetime], tz_name: Optional[str] = None) -> Optional[date]:
    """Calendar day of a timestamp in the operating timezone; naive values are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(pytz.timezone(tz_name or settings.timezone)).date()


def local_today(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> date:
    """Today in the operating timezone, independent of the host clock's zone."""
    return local_day(now or datetime.now(pytz.utc), tz_name)


def compute_daily_kpi(
    records: Iterable[Any],
    day: date,
    *,
    brand: str = "",
    listup_target: Optional[int] = None,
    acceptance_target: Optional[int] = None,
    tz_name: Optional[str] = None,
) -> DailyKpi:
    """Count influencers listed and accepted on ``day``."""
    listed = accepted = 0
    for record in records:
        if local_day(record.listed_at, tz_name) == day:
            listed += 1
        if local_day(record.accepted_at, tz_name) == day:
            accepted += 1

    return DailyKpi(
        brand=brand,
        day=day,
        listup_actual=listed,
        listup_target=settings.kpi_listup_target if listup_target is None else listup_target,
        acceptance_actual=accepted,
        acceptance_target=settings.kpi_acceptance_target if acceptance_target is None else acceptance_target,
    )


def classify_kpi(kpi: DailyKpi, threshold: Optional[float] = None) -> str:
    """``ok`` when both metrics reach the threshold, ``critical`` under half of target."""
    threshold = settings.kpi_warning_threshold if threshold is None else threshold
    worst = min(kpi.listup_rate, kpi.acceptance_rate)
    if worst >= threshold:
        return KPI_OK
    if worst < CRITICAL_RATIO:
        return KPI_CRITICAL
    return KPI_WARNING


def status_emoji(rate: float, threshold: float) -> str:
    if rate >= threshold:
        return "✅"
    if rate >= CRITICAL_RATIO:
        return "⚠️"
    return "🔴"


def format_kpi_message(kpi: DailyKpi, threshold: Optional[float] = None) -> str:
    """Korean daily KPI summary for the team channel."""
    threshold = settings.kpi_warning_threshold if threshold is None else threshold
    level = classify_kpi(kpi, threshold)
    brand = kpi.brand.upper() or "ALL"

    lines = [
        KPI_HEADLINES[level].format(brand=brand),
        "",
        f"📅 {kpi.day.isoformat()} 기준",
        "📊 현재 현황",
        (
            f"- 리스트업: {kpi.listup_actual}/{kpi.listup_target} "
            f"({round(kpi.listup_rate * 100)}%) {status_emoji(kpi.listup_rate, threshold)}"
        ),
        (
            f"- 수락: {kpi.acceptance_actual}/{kpi.acceptance_target} "
            f"({round(kpi.acceptance_rate * 100)}%) {status_emoji(kpi.acceptance_rate, threshold)}"
        ),
        "",
        KPI_FOOTERS[level],
    ]
    return "\n".join(lines)


__all__ = [
    "DailyKpi",
    "KPI_CRITICAL",
    "KPI_OK",
    "KPI_WARNING",
    "classify_kpi",
    "compute_daily_kpi",
    "format_funnel_report",
    "format_funnel_report_html",
    "format_kpi_message",
    "format_percent",
    "local_day",
]
