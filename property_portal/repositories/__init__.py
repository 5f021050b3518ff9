"""
Repository layer for data access operations.
"""

from property_portal.repositories.base import BaseRepository
from property_portal.repositories.user import UserRepository
from property_portal.repositories.property_owner import PropertyOwnerRepository
from property_portal.repositories.payment import PaymentRepository
from property_portal.repositories.payment_request import PaymentRequestRepository
from property_portal.repositories.manager_request import ManagerRequestRepository
from property_portal.repositories.rental_application import RentalApplicationRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PropertyOwnerRepository",
    "PaymentRepository",
    "PaymentRequestRepository",
    "ManagerRequestRepository",
    "RentalApplicationRepository",
]
