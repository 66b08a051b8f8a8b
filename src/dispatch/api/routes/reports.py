"""Zone report endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Path, status
from fastapi.responses import Response

from ...persistence.database import (
    fetch_active_orders,
    fetch_active_returns,
    fetch_customers,
    fetch_driver_name,
    fetch_group_name,
    fetch_replacement_messages,
    fetch_schedule,
)
from ...schemas.reports import ZoneReportResponse
from ...services.reports import build_zone_report, export_zone_report_xlsx
from ...services.scheduling import build_replacement_map

router = APIRouter(prefix="/reports", tags=["reports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _zone_report(schedule_id: int) -> dict:
    schedule = fetch_schedule(schedule_id)
    if schedule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Schedule {schedule_id} not found")
    replacement_map = build_replacement_map(fetch_replacement_messages(), fetch_customers())
    return build_zone_report(
        schedule,
        fetch_active_orders(),
        fetch_active_returns(),
        replacement_map,
        group_name=fetch_group_name(schedule.groups_id),
        driver_name=fetch_driver_name(schedule.driver_id),
    )


@router.get("/zone/{schedule_id}", response_model=ZoneReportResponse, status_code=status.HTTP_200_OK)
def get_zone_report(schedule_id: int = Path(..., ge=1)) -> ZoneReportResponse:
    return ZoneReportResponse.model_validate(_zone_report(schedule_id))


@router.get("/zone/{schedule_id}/export", status_code=status.HTTP_200_OK)
def export_zone_report(schedule_id: int = Path(..., ge=1)) -> Response:
    payload = export_zone_report_xlsx(_zone_report(schedule_id))
    filename = f"zone_report_{schedule_id}.xlsx"
    return Response(
        content=payload,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
