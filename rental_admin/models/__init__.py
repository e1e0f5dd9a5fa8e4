# Import all models so they're registered with Base.metadata
from rental_admin.models.user import User, UserRole
from rental_admin.models.property import Property, PropertyStatus

__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyStatus",
]
