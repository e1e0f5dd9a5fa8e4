from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    Date,
    DateTime,
    JSON,
    Enum,
)
from sqlalchemy.sql import func
from rental_admin.database import Base
import enum


class PropertyStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    address = Column(String(500), nullable=False)
    status = Column(
        Enum(PropertyStatus),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True,
    )

    # Rental terms
    rental = Column(Numeric(12, 2), nullable=True)
    rental_duration = Column(Integer, nullable=True)  # months
    rental_start = Column(Date, nullable=True)

    # Ordered public paths, index 0 is the cover image
    images = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def cover_image(self):
        return self.images[0] if self.images else None
