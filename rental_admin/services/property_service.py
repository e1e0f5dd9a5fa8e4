import logging
from sqlalchemy import select, and_, or_, func
from rental_admin.models.property import Property, PropertyStatus
from rental_admin.schemas.property import PropertyCreate, PropertyUpdate
from rental_admin.services.activity_log import ActivityLog
from rental_admin.services.image_service import ImageService, NewUpload
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


class PropertyService:
    def __init__(self, image_service: ImageService, activity_log: ActivityLog):
        self.image_service = image_service
        self.activity_log = activity_log

    async def create_property(
        self,
        db: Session,
        property_data: PropertyCreate,
        uploads: Iterable[NewUpload] = (),
    ):
        image_paths = self.image_service.save_uploads(uploads)
        new_property = Property(
            **property_data.model_dump(),
            images=image_paths,
            status=PropertyStatus.AVAILABLE,
        )

        db.add(new_property)
        db.commit()
        db.refresh(new_property)

        self.activity_log.append(
            f"Property created: '{new_property.title}' (#{new_property.id}) "
            f"with {len(image_paths)} image(s)"
        )
        return new_property

    async def get_properties(
        self,
        db: Session,
        query: Optional[str] = None,
        status: Optional[PropertyStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Property]:
        """List properties newest first.

        ``query`` matches title or address case-insensitively; ``status``
        narrows to one availability state.
        """
        stmt = select(Property)
        conditions = []
        if query:
            conditions.append(
                or_(
                    func.lower(Property.title).contains(query.lower(), autoescape=True),
                    func.lower(Property.address).contains(query.lower(), autoescape=True),
                )
            )
        if status:
            conditions.append(Property.status == status)
        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = (
            stmt.order_by(Property.created_at.desc(), Property.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return db.execute(stmt).scalars().all()

    async def get_property(self, db: Session, property_id: int) -> Property:
        result = db.execute(select(Property).where(Property.id == property_id))
        property = result.scalar_one_or_none()

        if not property:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Property with ID {property_id} not found",
            )
        return property

    async def update_property(
        self,
        db: Session,
        property_id: int,
        property_data: PropertyUpdate,
        kept_images: Iterable[str],
        uploads: Iterable[NewUpload] = (),
    ):
        property = await self.get_property(db, property_id)

        result = self.image_service.reconcile(
            list(property.images or []), kept_images, uploads
        )

        for key, value in property_data.model_dump().items():
            setattr(property, key, value)
        property.images = result.images

        db.commit()
        db.refresh(property)

        self.activity_log.append(
            f"Property updated: '{property.title}' (#{property.id}), "
            f"{len(result.images)} image(s), {len(result.uploaded)} new, "
            f"{len(result.deleted) + len(result.failed)} removed"
        )
        return property

    async def add_image(self, db: Session, property_id: int, upload: NewUpload):
        """Instant upload: write one file and append it to the gallery."""
        property = await self.get_property(db, property_id)
        paths = self.image_service.save_uploads([upload])
        if not paths:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded file is empty",
            )

        property.images = list(property.images or []) + paths
        db.commit()
        db.refresh(property)

        self.activity_log.append(
            f"Image uploaded to '{property.title}' (#{property.id}): {paths[0]}"
        )
        return paths[0], property

    async def reorder_images(self, db: Session, property_id: int, images: List[str]):
        property = await self.get_property(db, property_id)
        current = list(property.images or [])

        if len(images) != len(set(images)) or sorted(images) != sorted(current):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="New order must contain exactly the property's current images",
            )

        property.images = list(images)
        db.commit()
        db.refresh(property)

        self.activity_log.append(
            f"Images reordered for '{property.title}' (#{property.id})"
        )
        return property

    async def delete_property(self, db: Session, property_id: int):
        property = await self.get_property(db, property_id)
        title = property.title

        deleted, failed = self.image_service.delete_images(list(property.images or []))

        db.delete(property)
        db.commit()

        self.activity_log.append(
            f"Property deleted: '{title}' (#{property_id}), "
            f"{len(deleted)} file(s) removed, {len(failed)} failed"
        )
        return {"detail": "Property deleted successfully"}
