"""
Inquiry endpoints. Anyone may submit; agents and admins read and manage.
"""

from fastapi import APIRouter, Depends, Path, Query, Response, status
from typing import Optional, List

from homeverse.models.user import User
from homeverse.services.inquiry import InquiryService
from homeverse.schemas.inquiry import InquiryCreate, InquiryUpdate, InquiryResponse
from homeverse.schemas.error import get_error_responses
from homeverse.utils.dependencies import (
    get_optional_current_user,
    get_current_staff_user,
    get_inquiry_service,
)


router = APIRouter(prefix="/inquiries", tags=["Inquiries"])


@router.post(
    "",
    response_model=InquiryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an inquiry",
    description="Contact form submission; linked to the user when logged in",
    responses=get_error_responses(400, 404)
)
async def create_inquiry(
    inquiry_data: InquiryCreate,
    current_user: Optional[User] = Depends(get_optional_current_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> InquiryResponse:
    inquiry = await inquiry_service.create_inquiry(inquiry_data, current_user)
    return InquiryResponse.model_validate(inquiry)


@router.get(
    "",
    response_model=List[InquiryResponse],
    summary="List inquiries",
    description=(
        "Inquiries for a property when property_id is given, for a user when user_id "
        "is given (admins only), otherwise the caller's own. Agents and admins only."
    ),
    responses=get_error_responses(401, 403)
)
async def list_inquiries(
    property_id: Optional[int] = Query(None, description="Filter by property"),
    user_id: Optional[int] = Query(None, description="Filter by submitting user (admin only)"),
    current_user: User = Depends(get_current_staff_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> List[InquiryResponse]:
    inquiries = await inquiry_service.list_inquiries(current_user, property_id, user_id)
    return [InquiryResponse.model_validate(i) for i in inquiries]


@router.put(
    "/{inquiry_id}",
    response_model=InquiryResponse,
    summary="Update inquiry status",
    responses=get_error_responses(400, 401, 403, 404)
)
async def update_inquiry(
    update_data: InquiryUpdate,
    inquiry_id: int = Path(..., description="Inquiry ID"),
    current_user: User = Depends(get_current_staff_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> InquiryResponse:
    inquiry = await inquiry_service.update_inquiry(inquiry_id, update_data, current_user)
    return InquiryResponse.model_validate(inquiry)


@router.delete(
    "/{inquiry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete inquiry",
    responses=get_error_responses(401, 403, 404)
)
async def delete_inquiry(
    inquiry_id: int = Path(..., description="Inquiry ID"),
    current_user: User = Depends(get_current_staff_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> Response:
    await inquiry_service.delete_inquiry(inquiry_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
