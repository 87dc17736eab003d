"""
Authorization gate.

Every mutating action is checked against a policy in a fixed order:

1. an authenticated principal is required         -> Unauthenticated
2. email verification, when the policy needs it    -> EmailNotVerified
3. phone verification, when the policy needs it    -> PhoneNotVerified
4. ownership of the target resource                -> NotOwner /
                                                      CannotFavouriteOwnListing

Read-only actions skip the verification steps: unverified users may browse
but not transact. The target resource is loaded lazily, only after steps 1-3
pass, so an unverified caller learns nothing about the resource.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TypeVar
from core.exceptions import (Unauthenticated, EmailNotVerified, PhoneNotVerified,
    NotOwner, CannotFavouriteOwnListing)
from models.users import User
from services.ownership import is_owner
from utils.logger import get_logger

logger = get_logger(__name__)

ResourceT = TypeVar("ResourceT")


class Action(str, Enum):
    BROWSE_LISTINGS = "browse_listings"
    VIEW_LISTING = "view_listing"
    LIST_FAVOURITES = "list_favourites"
    LIST_FAVOURITE_IDS = "list_favourite_ids"
    CREATE_LISTING = "create_listing"
    UPDATE_LISTING = "update_listing"
    DELETE_LISTING = "delete_listing"
    CREATE_FAVOURITE = "create_favourite"
    DELETE_FAVOURITE = "delete_favourite"


class Ownership(str, Enum):
    ANY = "any"
    OWNER_ONLY = "owner_only"
    NON_OWNER_ONLY = "non_owner_only"


@dataclass(frozen=True)
class Policy:
    requires_principal: bool = False
    requires_email: bool = False
    requires_phone: bool = False
    ownership: Ownership = Ownership.ANY


POLICIES: dict[Action, Policy] = {
    Action.BROWSE_LISTINGS: Policy(),
    Action.VIEW_LISTING: Policy(),
    Action.LIST_FAVOURITES: Policy(requires_principal=True),
    Action.LIST_FAVOURITE_IDS: Policy(requires_principal=True),
    Action.CREATE_LISTING: Policy(requires_principal=True, requires_email=True, requires_phone=True),
    Action.UPDATE_LISTING: Policy(requires_principal=True, requires_email=True, requires_phone=True,
                                  ownership=Ownership.OWNER_ONLY),
    Action.DELETE_LISTING: Policy(requires_principal=True, requires_email=True, requires_phone=True,
                                  ownership=Ownership.OWNER_ONLY),
    Action.CREATE_FAVOURITE: Policy(requires_principal=True, requires_email=True,
                                    ownership=Ownership.NON_OWNER_ONLY),
    Action.DELETE_FAVOURITE: Policy(requires_principal=True, requires_email=True),
}


def authorize(
    principal: Optional[User],
    action: Action,
    load: Optional[Callable[[], ResourceT]] = None
) -> Optional[ResourceT]:
    """
    Decide whether ``principal`` may perform ``action``.

    Args:
        principal: The authenticated user, or None for anonymous requests
        action: The action being attempted
        load: Zero-argument callable returning the target resource. It is
            invoked after the verification checks and may itself raise
            InvalidIdentifier / NotFound.

    Returns:
        The loaded resource (or None when no loader was given)
    """
    policy = POLICIES[action]

    if policy.requires_principal and principal is None:
        raise Unauthenticated()

    if policy.requires_email and not principal.email_verified:
        logger.info(
            "Action blocked - email not verified",
            extra={"user_id": principal.id, "action": action.value}
        )
        raise EmailNotVerified()

    if policy.requires_phone and not principal.phone_verified:
        logger.info(
            "Action blocked - phone not verified",
            extra={"user_id": principal.id, "action": action.value}
        )
        raise PhoneNotVerified()

    resource = load() if load is not None else None

    if resource is not None and principal is not None:
        if policy.ownership is Ownership.OWNER_ONLY and not is_owner(principal, resource):
            logger.warning(
                "Action blocked - not owner",
                extra={"user_id": principal.id, "action": action.value, "resource_id": resource.id}
            )
            raise NotOwner()

        if policy.ownership is Ownership.NON_OWNER_ONLY and is_owner(principal, resource):
            raise CannotFavouriteOwnListing()

    return resource
