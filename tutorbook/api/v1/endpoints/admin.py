# tutorbook/api/v1/endpoints/admin.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tutorbook.api.v1.endpoints.teachers import teacher_to_admin_view
from tutorbook.core.security import get_current_admin
from tutorbook.db.session import get_db
from tutorbook.models.user import User
from tutorbook.schemas.common import ApiResponse, ok
from tutorbook.schemas.report import ActivityItem, AdminStats, RevenueReport
from tutorbook.schemas.teacher import TeacherAdminView
from tutorbook.schemas.user import AdminUserUpdate, UserPublic
from tutorbook.services import report_service, teacher_service, user_service

router = APIRouter(tags=["admin"])


@router.get("/stats", response_model=ApiResponse[AdminStats])
def get_stats(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return ok(report_service.admin_stats(db))


@router.get("/verifications/pending", response_model=ApiResponse[List[TeacherAdminView]])
def list_pending_verifications(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    profiles = teacher_service.list_pending_verifications(db)
    return ok([teacher_to_admin_view(p) for p in profiles], with_count=True)


@router.get("/recent-activity", response_model=ApiResponse[List[ActivityItem]])
def get_recent_activity(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return ok(report_service.recent_activity(db), with_count=True)


@router.get("/users", response_model=ApiResponse[List[UserPublic]])
def list_users(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    users = user_service.list_users(db)
    return ok([UserPublic.model_validate(u) for u in users], with_count=True)


@router.put("/users/{user_id}", response_model=ApiResponse[UserPublic])
def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = user_service.admin_update_user(db, user_id=user_id, obj_in=payload)
    return ok(UserPublic.model_validate(user), "User updated successfully")


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user_service.delete_user(db, acting_user=current_admin, user_id=user_id)
    return ok(message="User deleted successfully")


@router.get("/revenue", response_model=ApiResponse[RevenueReport])
def get_revenue(
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Revenue of confirmed and completed bookings; the window needs both dates."""
    report = report_service.revenue_report(db, start_date=start_date, end_date=end_date)
    return ok(report)
