"""
Property owner service: owner aggregates, their embedded properties and
owner-scoped users, the flattened public listing, and the admin review of
property-owner signups.
"""

from typing import Optional, List, Dict, Any, Tuple
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from property_portal.database import utcnow
from property_portal.models.property_owner import PropertyOwner, PropertyStatus, PropertyType
from property_portal.models.user import User, UserType, VerificationStatus, OwnerVerificationStatus
from property_portal.repositories.property_owner import PropertyOwnerRepository
from property_portal.repositories.user import UserRepository
from property_portal.schemas.property_owner import PropertyOwnerCreate, PropertyCreate, PropertyOwnerUserCreate
from property_portal.services.notifications import NotificationService
from property_portal.utils.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    InsufficientPermissionsError,
    PropertyOwnerNotFoundError,
    UserNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def embedded_entry(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Give an embedded array entry its own id and timestamps."""
    now = utcnow().isoformat()
    return {"id": str(uuid.uuid4()), **fields, "createdAt": now, "updatedAt": now}


def owner_user_entry(
    name: str,
    email: str,
    user_type: UserType,
    password_hash: Optional[str] = None,
    selected_property: Optional[str] = None,
) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        "name": name,
        "email": email.lower(),
        "userType": user_type.value,
        "selectedProperty": selected_property,
        "isVerified": False,
        "identityVerificationStatus": VerificationStatus.PENDING.value,
    }
    if password_hash:
        fields["passwordHash"] = password_hash
    return embedded_entry(fields)


class PropertyOwnerService:
    """Owner aggregate operations. Embedded arrays only grow by append."""

    def __init__(self, db_session: AsyncSession, notifications: Optional[NotificationService] = None):
        self.db = db_session
        self.owner_repo = PropertyOwnerRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.notifications = notifications

    async def create_owner(self, data: PropertyOwnerCreate) -> PropertyOwner:
        """
        Create an owner aggregate.

        Raises:
            DuplicateResourceError: If the name is taken
        """
        if await self.owner_repo.get_by_name(data.name):
            raise DuplicateResourceError(
                "Property owner", data.name, detail="Property owner with this name already exists"
            )

        owner = await self.owner_repo.create({
            "name": data.name,
            "email": (data.email or "").lower(),
            "phone": data.phone or "",
            "properties": [],
            "users": [],
        })
        logger.info(f"Property owner created: {owner.name} (ID: {owner.id})")
        return owner

    async def list_owners(self) -> List[PropertyOwner]:
        return await self.owner_repo.list_by_name()

    async def get_owner(self, name: str) -> PropertyOwner:
        owner = await self.owner_repo.get_by_name(name)
        if not owner:
            raise PropertyOwnerNotFoundError(name)
        return owner

    async def find_owner_for_user(self, user: User) -> Optional[PropertyOwner]:
        """The aggregate a property-owner account belongs to, by owner name then email."""
        owner = None
        if user.owner_name:
            owner = await self.owner_repo.get_by_name(user.owner_name)
        if owner is None:
            owner = await self.owner_repo.get_by_email(user.email)
        return owner

    @staticmethod
    def _check_can_manage(owner: PropertyOwner, user: User, action: str) -> None:
        if user.is_admin:
            return
        if user.is_property_owner and (user.owner_name == owner.name or owner.has_user_email(user.email)):
            return
        raise InsufficientPermissionsError(action)

    async def add_property(self, name: str, data: PropertyCreate, current_user: User) -> PropertyOwner:
        owner = await self.get_owner(name)
        self._check_can_manage(owner, current_user, "add properties for this owner")

        entry = embedded_entry({
            "name": data.name,
            "type": data.type.value,
            "sqft": data.sqft,
            "description": data.description,
            "rent": float(data.rent),
            "extraAdult": float(data.extra_adult),
            "amenities": data.amenities,
            "status": data.status.value,
            "picture": data.picture,
            "address": data.address.model_dump(),
        })
        owner = await self.owner_repo.append_property(owner, entry)
        logger.info(f"Property '{data.name}' added to owner {owner.name}")
        return owner

    async def add_user(self, name: str, data: PropertyOwnerUserCreate, current_user: User) -> PropertyOwner:
        """
        Append an owner-scoped user.

        Raises:
            BadRequestError: If the email is already present for this owner
        """
        owner = await self.get_owner(name)
        self._check_can_manage(owner, current_user, "add users for this owner")

        if owner.has_user_email(data.email):
            raise BadRequestError("User with this email already exists for this property owner")

        password_hash = User.hash_password(data.password) if data.password else None
        entry = owner_user_entry(
            data.name,
            data.email,
            data.user_type,
            password_hash=password_hash,
            selected_property=data.selected_property,
        )
        owner = await self.owner_repo.append_user(owner, entry)
        logger.info(f"User {data.email} added to owner {owner.name}")
        return owner

    async def list_properties(
        self,
        status: Optional[PropertyStatus] = None,
        property_type: Optional[PropertyType] = None,
    ) -> List[Dict[str, Any]]:
        """Every embedded property flattened with its owner, sorted by name."""
        listings = []
        for owner in await self.owner_repo.list_by_name():
            for prop in owner.properties or []:
                if status is not None and prop.get("status") != status.value:
                    continue
                if property_type is not None and prop.get("type") != property_type.value:
                    continue
                listings.append({**prop, "ownerName": owner.name, "ownerId": owner.id})

        listings.sort(key=lambda p: (p.get("name") or "").lower())
        return listings

    # Signup review

    async def list_pending_owners(self) -> List[User]:
        return await self.user_repo.list_pending_owners()

    async def _get_owner_account(self, user_id: uuid.UUID) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise UserNotFoundError()
        if not user.is_property_owner:
            raise BadRequestError("User is not a property owner")
        return user

    async def approve_owner(self, user_id: uuid.UUID, phone: Optional[str], admin: User) -> Tuple[User, PropertyOwner]:
        """
        Approve a property-owner signup.

        Accounts from before review existed have no status and are treated
        as pending. The owner aggregate and the embedded user are created if
        signup did not create them; the embedded user is marked verified.

        Raises:
            ValidationError: If no phone number is given
            UserNotFoundError: If the account does not exist
            BadRequestError: If the account is not an owner or is not pending
        """
        phone = (phone or "").strip()
        if not phone:
            raise ValidationError(
                "Phone number is required for approval",
                field_errors=[{"field": "phone", "message": "required"}],
            )

        user = await self._get_owner_account(user_id)
        status = user.owner_verification_status
        if status is not None and status != OwnerVerificationStatus.PENDING:
            raise BadRequestError(f"User verification status is '{status.value}', not pending")

        owner_name = user.owner_name or user.name
        owner = await self.owner_repo.get_by_name(owner_name)
        if owner is None:
            owner = await self.owner_repo.create({
                "name": owner_name,
                "email": user.email.lower(),
                "phone": phone,
                "properties": [],
                "users": [],
            })
            logger.info(f"Property owner created at approval: {owner_name}")

        if owner.has_user_email(user.email):
            users = [
                {**entry, "isVerified": True, "identityVerificationStatus": VerificationStatus.VERIFIED.value}
                if (entry.get("email") or "").lower() == user.email.lower() else entry
                for entry in owner.users
            ]
            owner = await self.owner_repo.update(owner, {"users": users})
        else:
            entry = owner_user_entry(user.name, user.email, UserType.PROPERTY_OWNER, password_hash=user.hashed_password)
            entry.update({"isVerified": True, "identityVerificationStatus": VerificationStatus.VERIFIED.value})
            owner = await self.owner_repo.append_user(owner, entry)

        user = await self.user_repo.update(user, {
            "owner_verification_status": OwnerVerificationStatus.APPROVED,
            "owner_verified_by": admin.email,
            "owner_verified_at": utcnow(),
            "owner_name": owner_name,
            "phone": phone,
        })
        logger.info(f"Property owner {user.email} approved by {admin.email}")
        return user, owner

    async def reject_owner(self, user_id: uuid.UUID, reason: Optional[str], admin: User) -> User:
        """
        Reject a pending property-owner signup and delete the account.

        The applicant is emailed the reason first; a failed email does not
        stop the deletion.

        Raises:
            ValidationError: If no reason is given
            UserNotFoundError: If the account does not exist
            BadRequestError: If the account is not an owner or is not pending
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(
                "Rejection reason is required",
                field_errors=[{"field": "reason", "message": "required"}],
            )

        user = await self._get_owner_account(user_id)
        if user.owner_verification_status != OwnerVerificationStatus.PENDING:
            raise BadRequestError("User is not pending verification")

        if self.notifications is not None:
            await self.notifications.notify_owner_rejected(user.email, user.name, reason)

        await self.user_repo.delete(user.id)
        logger.info(f"Property owner signup {user.email} rejected by {admin.email}")
        return user
