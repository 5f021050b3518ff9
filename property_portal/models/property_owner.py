"""
Property owner aggregate.
Properties and owner-scoped users are embedded as JSON arrays on the owner row.
"""

from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column
from property_portal.database import Base
import enum
from typing import Any, Dict, List


class PropertyType(str, enum.Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    HOUSE = "house"


class PropertyStatus(str, enum.Enum):
    AVAILABLE = "available"
    RENTED = "rented"
    UNDER_REMODEL = "under-remodel"
    MAINTENANCE = "maintenance"


class PropertyOwner(Base):
    """
    Owner aggregate holding its embedded properties and users.

    Embedded entries are plain dicts with their own ``id``, ``createdAt``
    and ``updatedAt``. Arrays only grow by append; callers must assign a
    new list so the JSON column is flagged dirty.
    """

    __tablename__ = "property_owners"

    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Owner name, used as the public identifier"
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)

    phone: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    properties: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    users: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<PropertyOwner(id={self.id}, name={self.name})>"

    def has_user_email(self, email: str) -> bool:
        """Check whether an embedded user already uses this email."""
        email = email.lower()
        return any((user.get("email") or "").lower() == email for user in self.users or [])

    def formatted_addresses(self) -> List[str]:
        """Addresses of every embedded property in ``street, city, state zip`` form."""
        return [format_address(prop.get("address") or {}) for prop in self.properties or []]


def format_address(address: Dict[str, Any]) -> str:
    """Render an address dict the way manager requests store it."""
    return (
        f"{address.get('street', '')}, {address.get('city', '')}, "
        f"{address.get('state', '')} {address.get('zip', '')}"
    ).strip()
