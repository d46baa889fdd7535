"""
CarVault Backend — Cars Route Handlers
=======================================

What:  CRUD endpoints for car records under /api/cars.
Why:   The frontend's car list, create modal and detail/edit page.
How:   Resolves the caller through the authorization gate, unpacks the
       multipart form, delegates to CarService, returns JSON.

Route Summary:
    POST   /api/cars          create (multipart)
    GET    /api/cars          list the caller's cars (?keyword=)
    GET    /api/cars/{id}     one car, images as base64
    PUT    /api/cars/{id}     replace fields, merge kept + new images (multipart)
    DELETE /api/cars/{id}     delete

Every route requires `Authorization: Bearer <token>`; missing or invalid
tokens are rejected with 401 before the handler body runs.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.routes.forms import collect_list_field, collect_tags, read_uploads
from app.schemas.car import CarResponse, DeleteResponse
from app.schemas.common import ErrorResponse
from app.security import CurrentUser, get_current_user
from app.services.car_service import car_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cars", tags=["Cars"])

_AUTH_ERRORS = {401: {"description": "Missing or invalid token", "model": ErrorResponse}}


@router.post(
    "",
    response_model=CarResponse,
    responses={
        400: {"description": "Invalid fields, tags or images", "model": ErrorResponse},
        **_AUTH_ERRORS,
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a car with images",
    description=(
        "Creates a car owned by the caller. Tags may be sent as a `tags` JSON "
        "string or as `tags[car_type]`, `tags[company]`, `tags[dealer]` fields. "
        "Up to 10 images, 5MB each."
    ),
)
async def create_car(
    request: Request,
    title: str = Form(default="", description="Car title (required)"),
    description: str = Form(default="", description="Car description (required)"),
    tags: Optional[str] = Form(default=None, description="Tag record as a JSON object string"),
    images: Optional[List[UploadFile]] = File(default=None, description="Image files, in display order"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CarResponse:
    form = await request.form()
    blobs = await read_uploads(images)

    logger.info("Create car request: images=%d", len(blobs))

    return await car_service.create_car(
        db=db,
        owner=current_user,
        title=title,
        description=description,
        tags=collect_tags(form, tags),
        images=blobs,
    )


@router.get(
    "",
    response_model=List[CarResponse],
    responses={**_AUTH_ERRORS, 500: {"description": "Server error", "model": ErrorResponse}},
    summary="List the caller's cars",
    description=(
        "Returns the caller's cars. `keyword` filters case-insensitively on "
        "title, description and the car_type, company and dealer tags."
    ),
)
async def list_cars(
    keyword: str = Query(default="", description="Case-insensitive search text"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[CarResponse]:
    return await car_service.list_cars(db=db, owner=current_user, keyword=keyword)


@router.get(
    "/{car_id}",
    response_model=CarResponse,
    responses={
        **_AUTH_ERRORS,
        404: {"description": "Car not found", "model": ErrorResponse},
    },
    summary="Get a single car",
)
async def get_car(
    car_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CarResponse:
    """
    car_id is taken as a plain string: a malformed id is simply a car that
    does not exist (404), not a request validation error.
    """
    return await car_service.get_car(db=db, owner=current_user, car_id=car_id)


@router.put(
    "/{car_id}",
    response_model=CarResponse,
    responses={
        400: {"description": "Invalid fields, tags or images", "model": ErrorResponse},
        **_AUTH_ERRORS,
        404: {"description": "Car not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update a car and merge its images",
    description=(
        "Replaces title, description and tags. The new image list is the "
        "base64 strings sent as `existing_images` (kept, in the order sent) "
        "followed by newly uploaded `images` files."
    ),
)
async def update_car(
    car_id: str,
    request: Request,
    title: str = Form(default=""),
    description: str = Form(default=""),
    tags: Optional[str] = Form(default=None, description="Tag record as a JSON object string"),
    images: Optional[List[UploadFile]] = File(default=None, description="New image files to append"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CarResponse:
    form = await request.form()
    kept = collect_list_field(form, "existing_images")
    blobs = await read_uploads(images, kept_count=len(kept))

    logger.info("Update car %s request: kept=%d new=%d", car_id, len(kept), len(blobs))

    return await car_service.update_car(
        db=db,
        owner=current_user,
        car_id=car_id,
        title=title,
        description=description,
        tags=collect_tags(form, tags),
        kept_images=kept,
        new_images=blobs,
    )


@router.delete(
    "/{car_id}",
    response_model=DeleteResponse,
    responses={
        **_AUTH_ERRORS,
        404: {"description": "Car not found", "model": ErrorResponse},
    },
    summary="Delete a car",
)
async def delete_car(
    car_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResponse:
    await car_service.delete_car(db=db, owner=current_user, car_id=car_id)
    return DeleteResponse(message="Car deleted")
