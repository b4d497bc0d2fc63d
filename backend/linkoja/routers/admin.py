from typing import List, Optional
from fastapi import APIRouter, Depends
from ..dependencies import require_admin, get_admin_service
from ..enums import BusinessStatus, ReportStatus
from ..schemas import (
    ApproveBusinessRequest,
    BasicResponse,
    BusinessAnalytics,
    BusinessResponse,
    ResolveReportRequest,
    ReviewReportResponse,
    success
)
from ..services.admin_service import AdminService

# every route here is admin-only
router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/businesses/pending", response_model=BasicResponse[List[BusinessResponse]])
def pending_businesses(service: AdminService = Depends(get_admin_service)):
    return success([BusinessResponse.from_business(b) for b in service.list_pending()])


@router.post("/businesses/{business_id}/approve", response_model=BasicResponse[BusinessResponse])
def approve_business(
    business_id: int,
    request: ApproveBusinessRequest,
    service: AdminService = Depends(get_admin_service)
):
    """Mark a business verified or rejected and tell the owner"""
    business = service.approve(business_id, request.status, request.reason)
    return success(BusinessResponse.from_business(business), f"Business {business.status.value} successfully")


@router.get("/analytics", response_model=BasicResponse[BusinessAnalytics])
def analytics(service: AdminService = Depends(get_admin_service)):
    return success(service.analytics())


@router.get("/businesses", response_model=BasicResponse[List[BusinessResponse]])
def all_businesses(
    status: Optional[BusinessStatus] = None,
    service: AdminService = Depends(get_admin_service)
):
    return success([BusinessResponse.from_business(b) for b in service.list_all(status)])


@router.delete("/businesses/{business_id}", response_model=BasicResponse[None])
def delete_business(
    business_id: int,
    service: AdminService = Depends(get_admin_service)
):
    service.delete_business(business_id)
    return success(None, "Business deleted successfully")


@router.get("/reports/reviews", response_model=BasicResponse[List[ReviewReportResponse]])
def review_reports(
    status: Optional[ReportStatus] = None,
    service: AdminService = Depends(get_admin_service)
):
    return success([ReviewReportResponse.from_report(r) for r in service.list_reports(status)])


@router.put("/reports/reviews/{report_id}/resolve", response_model=BasicResponse[ReviewReportResponse])
def resolve_report(
    report_id: int,
    request: ResolveReportRequest,
    service: AdminService = Depends(get_admin_service)
):
    report = service.resolve_report(report_id, request.action)
    return success(ReviewReportResponse.from_report(report), f"Report {report.status.value}")
