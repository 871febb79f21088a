"""
Property API endpoints for browsing, featured listings and listing management.
Create and update accept multipart forms so images can be uploaded alongside the fields.
"""

from fastapi import APIRouter, Depends, File, Form, Path, Query, Response, UploadFile, status
from typing import Optional, List

from homeverse.models.user import User
from homeverse.models.property import PropertyType, PropertyStatus
from homeverse.repositories.interface import PropertyFilters
from homeverse.services.property import PropertyService
from homeverse.schemas.property import PropertyCreate, PropertyUpdate, PropertyResponse
from homeverse.schemas.error import get_crud_error_responses, get_error_responses
from homeverse.utils.dependencies import (
    get_current_user,
    get_current_lister,
    get_property_service,
)


router = APIRouter(prefix="/properties", tags=["Properties"])


def get_property_filters(
    location: Optional[str] = Query(None, description="Case-insensitive match on city or state"),
    property_type: Optional[PropertyType] = Query(None, description="Kind of dwelling"),
    status: Optional[PropertyStatus] = Query(None, description="Market status"),
    price_min: Optional[int] = Query(None, ge=0, description="Minimum price"),
    price_max: Optional[int] = Query(None, ge=0, description="Maximum price"),
    bedrooms: Optional[int] = Query(None, ge=0, description="Minimum number of bedrooms"),
    bathrooms: Optional[int] = Query(None, ge=0, description="Minimum number of bathrooms"),
    area_min: Optional[int] = Query(None, ge=0, description="Minimum area in square feet"),
    area_max: Optional[int] = Query(None, ge=0, description="Maximum area in square feet"),
) -> PropertyFilters:
    """Collect browse filters from the query string."""
    return PropertyFilters(
        location=location.strip() if location and location.strip() else None,
        property_type=property_type,
        status=status,
        price_min=price_min,
        price_max=price_max,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        area_min=area_min,
        area_max=area_max,
    )


@router.get(
    "",
    response_model=List[PropertyResponse],
    summary="List properties",
    description="All properties matching the filters, in creation order",
    responses=get_error_responses(400)
)
async def list_properties(
    filters: PropertyFilters = Depends(get_property_filters),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.list_properties(filters)
    return [PropertyResponse.model_validate(p) for p in properties]


@router.get(
    "/featured",
    response_model=List[PropertyResponse],
    summary="Featured properties",
    description="Most recently created properties, newest first"
)
async def list_featured_properties(
    limit: Optional[int] = Query(None, ge=1, le=50, description="Number of properties (default 6)"),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_featured_properties(limit)
    return [PropertyResponse.model_validate(p) for p in properties]


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get property details",
    responses=get_error_responses(404)
)
async def get_property(
    property_id: int = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.get_property(property_id)
    return PropertyResponse.model_validate(property_obj)


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a listing from a multipart form. Requires seller, agent or admin role.",
    responses=get_crud_error_responses()
)
async def create_property(
    title: str = Form(...),
    description: str = Form(...),
    price: int = Form(...),
    address: str = Form(...),
    city: str = Form(...),
    state: str = Form(...),
    zip_code: str = Form(...),
    country: str = Form(...),
    property_type: PropertyType = Form(...),
    status: PropertyStatus = Form(PropertyStatus.FOR_SALE),
    bedrooms: int = Form(...),
    bathrooms: int = Form(...),
    area: int = Form(...),
    year_built: Optional[int] = Form(None),
    features: Optional[str] = Form(None, description="JSON array or comma-separated list"),
    images: Optional[List[UploadFile]] = File(None, description="Up to 10 images"),
    current_user: User = Depends(get_current_lister),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Create a new property listing.

    Returns:
        Created property with image URLs

    Raises:
        InsufficientPermissionsError: If the user's role may not list properties
        ValidationError: If form fields are invalid
        FileUploadError: If an image is rejected
    """
    property_data = PropertyCreate(
        title=title,
        description=description,
        price=price,
        address=address,
        city=city,
        state=state,
        zip_code=zip_code,
        country=country,
        property_type=property_type,
        status=status,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        area=area,
        year_built=year_built,
        features=features,
    )
    property_obj = await property_service.create_property(property_data, current_user, images)
    return PropertyResponse.model_validate(property_obj)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    description=(
        "Partially update a listing. Only the owner or an admin may update; new images are appended. "
        "Omitted or empty fields are left unchanged, so an optional field such as year_built "
        "cannot be cleared once set."
    ),
    responses=get_crud_error_responses()
)
async def update_property(
    property_id: int = Path(..., description="Property ID"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[int] = Form(None),
    address: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    state: Optional[str] = Form(None),
    zip_code: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    property_type: Optional[PropertyType] = Form(None),
    status: Optional[PropertyStatus] = Form(None),
    bedrooms: Optional[int] = Form(None),
    bathrooms: Optional[int] = Form(None),
    area: Optional[int] = Form(None),
    year_built: Optional[int] = Form(None),
    features: Optional[str] = Form(None, description="JSON array or comma-separated list"),
    images: Optional[List[UploadFile]] = File(None, description="Images to append"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    submitted = {
        "title": title,
        "description": description,
        "price": price,
        "address": address,
        "city": city,
        "state": state,
        "zip_code": zip_code,
        "country": country,
        "property_type": property_type,
        "status": status,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "area": area,
        "year_built": year_built,
        "features": features,
    }
    property_data = PropertyUpdate(**{k: v for k, v in submitted.items() if v is not None})
    property_obj = await property_service.update_property(property_id, property_data, current_user, images)
    return PropertyResponse.model_validate(property_obj)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Delete a listing with its inquiries, favorites and images. Owner or admin only.",
    responses=get_error_responses(401, 403, 404)
)
async def delete_property(
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Response:
    await property_service.delete_property(property_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
