from fastapi import APIRouter, Depends, Query, Request, Response, status
from typing import List, Optional
from datetime import datetime

from ..services.attendance_service import AttendanceService
from ..services.errors import ServiceError
from .schemas.attendance import (
    AttendanceMarkRequest,
    AttendanceResponse,
    EnrichedAttendanceResponse,
    StudentAttendanceResponse,
    TodaySummaryResponse,
)
from .auth import get_current_user
from .dependencies import get_attendance_service
from .utilities.errors import parse_id, to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/attendance", tags=["Attendance"], dependencies=[Depends(get_current_user)])


@router.post("", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED, summary="Mark a student present or absent for a day")
@limiter.limit("200/minute")
async def mark_attendance(request: Request, response: Response, mark_request: AttendanceMarkRequest, service: AttendanceService = Depends(get_attendance_service)):
    """
    Creates the mark for (student, day) with 201, or overwrites the status of
    the existing mark for that day with 200.
    """
    try:
        record, created = await service.mark_attendance(mark_request.student_id, mark_request.date, mark_request.status)
    except ServiceError as e:
        raise to_http_exception(e)
    if not created:
        response.status_code = status.HTTP_200_OK
    return record


@router.get("", response_model=List[EnrichedAttendanceResponse], summary="List attendance records, optionally for one day")
@limiter.limit("120/minute")
async def list_attendance(request: Request, day: Optional[datetime] = Query(None, alias="date"), service: AttendanceService = Depends(get_attendance_service)):
    return await service.list_attendance(day)


# Declared before /{student_id} so that "today" is not taken for an id.
@router.get("/today/summary", response_model=TodaySummaryResponse, summary="Today's attendance counts")
@limiter.limit("120/minute")
async def get_today_summary(request: Request, service: AttendanceService = Depends(get_attendance_service)):
    return await service.today_summary()


@router.get("/{student_id}", response_model=StudentAttendanceResponse, summary="A student's attendance history with statistics")
@limiter.limit("120/minute")
async def get_student_attendance(
    request: Request,
    student_id: str,
    month: Optional[int] = Query(None, description="1-12; used together with year."),
    year: Optional[int] = Query(None),
    service: AttendanceService = Depends(get_attendance_service)
):
    try:
        return await service.get_student_attendance(parse_id(student_id, "Student not found"), month=month, year=year)
    except ServiceError as e:
        raise to_http_exception(e)
