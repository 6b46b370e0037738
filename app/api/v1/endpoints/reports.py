"""Reporting endpoints."""

from datetime import date

from fastapi import APIRouter, Query, Response, status

from app.dependencies import ReportingServiceDep
from app.schemas.reports import (
    PatientFlowReport,
    ReportExportRequest,
    ReportType,
    RevenueReport,
)

router = APIRouter()


@router.get(
    "/patient-flow",
    response_model=PatientFlowReport,
    status_code=status.HTTP_200_OK,
    tags=["Reports"],
    summary="Patient flow report",
)
async def patient_flow_report(
    service: ReportingServiceDep,
    start: date = Query(...),
    end: date = Query(...),
) -> PatientFlowReport:
    """Summarize appointment volume between two dates, inclusive."""
    return await service.patient_flow_report(start, end)


@router.get(
    "/revenue",
    response_model=RevenueReport,
    status_code=status.HTTP_200_OK,
    tags=["Reports"],
    summary="Revenue report",
)
async def revenue_report(
    service: ReportingServiceDep,
    start: date = Query(...),
    end: date = Query(...),
) -> RevenueReport:
    """Summarize payments created between two dates, inclusive."""
    return await service.revenue_report(start, end)


@router.post(
    "/export",
    response_class=Response,
    status_code=status.HTTP_200_OK,
    tags=["Reports"],
    summary="Export a report",
)
async def export_report(
    export_request: ReportExportRequest,
    service: ReportingServiceDep,
) -> Response:
    """Export a patient flow or revenue report as a CSV download."""
    if export_request.report_type == ReportType.PATIENT_FLOW:
        report = await service.patient_flow_report(export_request.start, export_request.end)
    else:
        report = await service.revenue_report(export_request.start, export_request.end)

    content = service.export_report(report, export_request.format)
    filename = (
        f"{export_request.report_type.value}_{export_request.start}_{export_request.end}.csv"
    )
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
