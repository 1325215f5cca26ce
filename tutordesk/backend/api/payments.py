from fastapi import APIRouter, Depends, Query, Request, status
from typing import Optional

from ..services.payment_service import PaymentService
from ..services.errors import ServiceError
from .schemas.common import MessageResponse
from .schemas.payment import (
    PaymentCreateRequest,
    PaymentUpdateRequest,
    PaymentResponse,
    PaymentListResponse,
    StudentPaymentsResponse,
    MonthlySummaryResponse,
)
from .auth import get_current_user
from .dependencies import get_payment_service
from .utilities.errors import parse_id, to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/payments", tags=["Payments"], dependencies=[Depends(get_current_user)])

NOT_FOUND = "Payment not found"


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED, summary="Record a payment")
@limiter.limit("60/minute")
async def record_payment(request: Request, create_request: PaymentCreateRequest, service: PaymentService = Depends(get_payment_service)):
    try:
        return await service.record_payment(**create_request.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("", response_model=PaymentListResponse, summary="List payments, optionally for one month label")
@limiter.limit("120/minute")
async def list_payments(
    request: Request,
    month: Optional[str] = Query(None, description="Exact month label, e.g. 'January 2024'."),
    service: PaymentService = Depends(get_payment_service)
):
    return await service.list_payments(month)


@router.get("/summary/monthly", response_model=MonthlySummaryResponse, summary="Income of the current calendar month")
@limiter.limit("120/minute")
async def get_monthly_summary(request: Request, service: PaymentService = Depends(get_payment_service)):
    return await service.monthly_summary()


@router.get("/student/{student_id}", response_model=StudentPaymentsResponse, summary="All payments of a student")
@limiter.limit("120/minute")
async def get_student_payments(request: Request, student_id: str, service: PaymentService = Depends(get_payment_service)):
    try:
        return await service.get_student_payments(parse_id(student_id, "Student not found"))
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("/{payment_id}", response_model=PaymentResponse, summary="Update some fields of a payment")
@limiter.limit("60/minute")
async def update_payment(request: Request, payment_id: str, update_request: PaymentUpdateRequest, service: PaymentService = Depends(get_payment_service)):
    try:
        fields = update_request.model_dump(exclude_unset=True, exclude_none=True)
        return await service.update_payment(parse_id(payment_id, NOT_FOUND), fields)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/{payment_id}", response_model=MessageResponse, summary="Delete a payment")
@limiter.limit("30/minute")
async def delete_payment(request: Request, payment_id: str, service: PaymentService = Depends(get_payment_service)):
    try:
        message = await service.delete_payment(parse_id(payment_id, NOT_FOUND))
        return MessageResponse(message=message)
    except ServiceError as e:
        raise to_http_exception(e)
