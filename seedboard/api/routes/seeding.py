"""Seeding project API routes."""

from dataclasses import asdict
from datetime import date
from typing import List, Literal, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.config import settings
from seedboard.db import get_db
from seedboard.models import Brand, SeedingStatus
from seedboard.services.seeding_exceptions import (
    InfluencerNotFoundError,
    ProjectNotFoundError,
    SeedingError,
    TemplateNotFoundError,
    ValidationError,
)
from seedboard.services.seeding_report_formatter import (
    classify_kpi,
    format_funnel_report,
    format_kpi_message,
    local_today,
)
from seedboard.services.seeding_service import SeedingService
from seedboard.services.template_service import OutreachTemplateService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/seeding", tags=["seeding"])

NOT_FOUND_ERRORS = (InfluencerNotFoundError, ProjectNotFoundError, TemplateNotFoundError)


class BulkTrackingRequest(BaseModel):
    text: str = Field(..., description="붙여넣은 송장 데이터 (탭 또는 쉼표 구분)")
    carrier: Optional[str] = None


class StatusChangeRequest(BaseModel):
    influencer_ids: List[str] = Field(..., min_length=1)
    status: SeedingStatus
    rejection_reason: Optional[str] = None


class RenderRequest(BaseModel):
    assignee_name: Optional[str] = None
    guide_link: Optional[str] = None


def _raise_for(error: SeedingError) -> None:
    if isinstance(error, NOT_FOUND_ERRORS):
        raise HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationError):
        raise HTTPException(
            status_code=422,
            detail=[{"field": issue.field, "message": issue.message} for issue in error.issues],
        )
    raise HTTPException(status_code=400, detail=str(error))


@router.get("/projects/{project_id}/funnel", summary="Get project funnel")
async def get_project_funnel(
    project_id: str,
    *,
    view: Literal["json", "summary"] = Query("json", description="응답 형식: JSON 또는 텍스트 요약"),
    session: AsyncSession = Depends(get_db),
) -> dict:
    """Funnel counts, status tab counters and statistics of a project."""
    service = SeedingService(session)

    try:
        report = await service.get_project_report(project_id)
    except SeedingError as error:
        _raise_for(error)
    except Exception:
        logger.exception("Failed to build seeding funnel", project_id=project_id)
        raise HTTPException(status_code=503, detail="Seeding report unavailable")

    if view == "summary":
        summary = format_funnel_report(report["project_name"], report["funnel"], report["stats"])
        return {"summary": summary, "project_id": project_id}

    return report


@router.get("/projects/{project_id}/export", summary="Download influencers as CSV")
async def export_project_influencers(
    project_id: str,
    session: AsyncSession = Depends(get_db),
) -> Response:
    service = SeedingService(session)

    try:
        content = await service.export_project_csv(project_id)
    except SeedingError as error:
        _raise_for(error)
    except Exception:
        logger.exception("Failed to export influencers", project_id=project_id)
        raise HTTPException(status_code=503, detail="Export unavailable")

    filename = f"seeding_{project_id}_{local_today().isoformat()}.csv"
    return Response(
        content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/projects/{project_id}/bulk-tracking", summary="Apply pasted tracking numbers")
async def apply_bulk_tracking(
    project_id: str,
    payload: BulkTrackingRequest,
    session: AsyncSession = Depends(get_db),
) -> dict:
    """Match pasted rows to the project's influencers and store tracking numbers."""
    service = SeedingService(session)

    try:
        parsed, result = await service.apply_bulk_tracking(project_id, payload.text, carrier=payload.carrier)
    except SeedingError as error:
        _raise_for(error)
    except Exception:
        logger.exception("Failed to apply tracking numbers", project_id=project_id)
        raise HTTPException(status_code=503, detail="Tracking import unavailable")

    return {
        "valid": parsed.valid,
        "invalid": parsed.invalid,
        "preview": [asdict(row) for row in parsed.preview(settings.bulk_preview_limit)],
        "result": result.to_dict(),
    }


@router.post("/influencers/status", summary="Change status of influencers")
async def change_influencer_status(
    payload: StatusChangeRequest,
    session: AsyncSession = Depends(get_db),
) -> dict:
    service = SeedingService(session)

    if len(payload.influencer_ids) == 1:
        try:
            influencer = await service.update_status(
                payload.influencer_ids[0],
                payload.status,
                rejection_reason=payload.rejection_reason,
            )
        except SeedingError as error:
            _raise_for(error)
        except Exception:
            logger.exception("Failed to change influencer status", influencer_id=payload.influencer_ids[0])
            raise HTTPException(status_code=503, detail="Status change unavailable")
        return {"succeeded": 1, "failed": 0, "errors": {}, "status": influencer.status}

    try:
        result = await service.bulk_update_status(
            payload.influencer_ids,
            payload.status,
            rejection_reason=payload.rejection_reason,
        )
    except Exception:
        logger.exception("Failed to change influencer statuses", count=len(payload.influencer_ids))
        raise HTTPException(status_code=503, detail="Status change unavailable")
    return result.to_dict()


@router.post(
    "/templates/{template_id}/render/{influencer_id}",
    summary="Render an outreach template for an influencer",
)
async def render_template(
    template_id: str,
    influencer_id: str,
    payload: Optional[RenderRequest] = None,
    session: AsyncSession = Depends(get_db),
) -> dict:
    payload = payload or RenderRequest()
    service = OutreachTemplateService(session)

    try:
        message = await service.render_for_influencer(
            template_id,
            influencer_id,
            assignee_name=payload.assignee_name,
            guide_link=payload.guide_link,
        )
    except SeedingError as error:
        _raise_for(error)
    except Exception:
        logger.exception(
            "Failed to render template",
            template_id=template_id,
            influencer_id=influencer_id,
        )
        raise HTTPException(status_code=503, detail="Template rendering unavailable")

    return {"template_id": template_id, "influencer_id": influencer_id, "message": message}


@router.get("/kpi", summary="Daily list-up and acceptance KPI")
async def get_daily_kpi(
    *,
    brand: Brand = Query(..., description="브랜드"),
    day: Optional[date] = Query(None, description="기준일 (기본값: 오늘)"),
    session: AsyncSession = Depends(get_db),
) -> dict:
    service = SeedingService(session)
    day = day or local_today()

    try:
        kpi = await service.get_daily_kpi(brand.value, day)
    except Exception:
        logger.exception("Failed to compute seeding KPI", brand=brand.value, day=day.isoformat())
        raise HTTPException(status_code=503, detail="KPI unavailable")

    return {
        **kpi.to_dict(),
        "level": classify_kpi(kpi),
        "message": format_kpi_message(kpi),
    }
