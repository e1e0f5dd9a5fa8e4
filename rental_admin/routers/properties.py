from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from typing import Annotated, List, Optional

from pydantic import ValidationError
from starlette import status
from rental_admin.models.property import PropertyStatus
from rental_admin.schemas.property import (
    ImageOrder,
    ImageUploadResponse,
    PropertyCreate,
    PropertyResponse,
    PropertyUpdate,
)
from rental_admin.dependencies import (
    AdminUser,
    CurrentUser,
    activity_log_dependency,
    db_dependency,
    image_service_dependency,
)
from rental_admin.services.image_service import NewUpload
from rental_admin.services.property_service import PropertyService

router = APIRouter(prefix="/properties", tags=["properties"])


def get_property_service(
    image_service: image_service_dependency, activity_log: activity_log_dependency
) -> PropertyService:
    return PropertyService(image_service, activity_log)


service_dependency = Annotated[PropertyService, Depends(get_property_service)]


def _validate(schema, **data):
    try:
        return schema(**data)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        )


async def _read_uploads(files: Optional[List[UploadFile]]) -> List[NewUpload]:
    uploads = []
    for file in files or []:
        content = await file.read()
        # Browsers submit an empty part when no file was picked
        if not content or not file.filename:
            continue
        if not (file.content_type or "").startswith("image/"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{file.filename} is not an image",
            )
        uploads.append(NewUpload(filename=file.filename, content=content))
    return uploads


@router.get("/", response_model=List[PropertyResponse])
async def list_properties(
    db: db_dependency,
    user: CurrentUser,
    service: service_dependency,
    query: Optional[str] = Query(None, description="Search in title and address"),
    status_filter: Optional[PropertyStatus] = Query(
        None, alias="status", description="Filter by availability"
    ),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    return await service.get_properties(
        db, query=query, status=status_filter, skip=skip, limit=limit
    )


@router.post("/", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    db: db_dependency,
    user: AdminUser,
    service: service_dependency,
    title: str = Form(...),
    address: str = Form(...),
    rental: Optional[str] = Form(None),
    rental_duration: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
):
    property_data = _validate(
        PropertyCreate,
        title=title,
        address=address,
        rental=rental,
        rental_duration=rental_duration,
    )
    uploads = await _read_uploads(images)
    return await service.create_property(db, property_data, uploads)


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    db: db_dependency, user: CurrentUser, service: service_dependency, property_id: int
):
    return await service.get_property(db, property_id)


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    db: db_dependency,
    user: AdminUser,
    service: service_dependency,
    property_id: int,
    title: str = Form(...),
    address: str = Form(...),
    property_status: str = Form(PropertyStatus.AVAILABLE.value, alias="status"),
    rental: Optional[str] = Form(None),
    rental_duration: Optional[str] = Form(None),
    rental_start: Optional[str] = Form(None),
    existing_images: List[str] = Form([]),
    new_images: Optional[List[UploadFile]] = File(None),
):
    """Replace the editable fields and reconcile the gallery.

    ``existing_images`` is the kept list in display order; anything the
    property had that is missing from it is deleted from disk. New uploads are
    appended after the kept images.
    """
    property_data = _validate(
        PropertyUpdate,
        title=title,
        address=address,
        status=property_status,
        rental=rental,
        rental_duration=rental_duration,
        rental_start=rental_start,
    )
    uploads = await _read_uploads(new_images)
    return await service.update_property(
        db, property_id, property_data, existing_images, uploads
    )


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    db: db_dependency, user: AdminUser, service: service_dependency, property_id: int
):
    await service.delete_property(db, property_id)


@router.post(
    "/{property_id}/images",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_property_image(
    db: db_dependency,
    user: AdminUser,
    service: service_dependency,
    property_id: int,
    file: UploadFile = File(...),
):
    uploads = await _read_uploads([file])
    if not uploads:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty"
        )
    url, property = await service.add_image(db, property_id, uploads[0])
    return {"url": url, "images": property.images}


@router.put("/{property_id}/images/order", response_model=PropertyResponse)
async def reorder_property_images(
    db: db_dependency,
    user: AdminUser,
    service: service_dependency,
    property_id: int,
    order: ImageOrder,
):
    return await service.reorder_images(db, property_id, order.images)
