from fastapi import APIRouter, Depends, Request, status
from typing import List

from ..services.student_service import StudentService
from ..services.errors import ServiceError
from .schemas.common import CamelModel, MessageResponse
from .schemas.student import StudentCreateRequest, StudentUpdateRequest, StudentResponse
from .schemas.payment import PaymentResponse
from .auth import get_current_user
from .dependencies import get_student_service
from .utilities.errors import parse_id, to_http_exception
from .utilities.limiter import limiter


# --- Endpoint'e Özel Yanıt Modelleri ---
class StudentAttendanceSummaryResponse(CamelModel):
    total: int
    present: int
    absent: int
    percentage: float


class StudentPaymentSummaryResponse(CamelModel):
    records: List[PaymentResponse]
    total_paid: float


class StudentDetailResponse(CamelModel):
    student: StudentResponse
    attendance: StudentAttendanceSummaryResponse
    payments: StudentPaymentSummaryResponse


router = APIRouter(prefix="/students", tags=["Students"], dependencies=[Depends(get_current_user)])

NOT_FOUND = "Student not found"


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED, summary="Register a new student")
@limiter.limit("60/minute")
async def create_student(request: Request, create_request: StudentCreateRequest, service: StudentService = Depends(get_student_service)):
    try:
        return await service.create_student(**create_request.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("", response_model=List[StudentResponse], summary="List all students, newest first")
@limiter.limit("120/minute")
async def list_students(request: Request, service: StudentService = Depends(get_student_service)):
    return await service.list_students()


@router.get("/{student_id}", response_model=StudentDetailResponse, summary="Get a student with attendance and payment summaries")
@limiter.limit("120/minute")
async def get_student(request: Request, student_id: str, service: StudentService = Depends(get_student_service)):
    try:
        return await service.get_student_detail(parse_id(student_id, NOT_FOUND))
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("/{student_id}", response_model=StudentResponse, summary="Update some fields of a student")
@limiter.limit("60/minute")
async def update_student(request: Request, student_id: str, update_request: StudentUpdateRequest, service: StudentService = Depends(get_student_service)):
    try:
        fields = update_request.model_dump(exclude_unset=True, exclude_none=True)
        return await service.update_student(parse_id(student_id, NOT_FOUND), fields)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/{student_id}", response_model=MessageResponse, summary="Delete a student and all of its records")
@limiter.limit("30/minute")
async def delete_student(request: Request, student_id: str, service: StudentService = Depends(get_student_service)):
    try:
        message = await service.delete_student(parse_id(student_id, NOT_FOUND))
        return MessageResponse(message=message)
    except ServiceError as e:
        raise to_http_exception(e)
