"""
Resource ownership check.

Identifier validation always happens before the database is consulted, so a
malformed id is reported as ``InvalidIdentifier`` (400) and can never leak
whether some record exists (404).
"""

import re
from typing import TypeVar
from sqlalchemy.orm import Session
from core.exceptions import InvalidIdentifier, NotFound
from models.users import User

_IDENTIFIER_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE
)

ModelT = TypeVar("ModelT")


def parse_identifier(raw: str, label: str = "resource") -> str:
    if not isinstance(raw, str) or not _IDENTIFIER_RE.match(raw):
        raise InvalidIdentifier(f"Invalid {label} ID")
    return raw.lower()


def fetch_resource(db: Session, model: type[ModelT], raw_id: str, label: str = "resource") -> ModelT:
    resource_id = parse_identifier(raw_id, label)
    resource = db.get(model, resource_id)
    if resource is None:
        raise NotFound(f"{label.capitalize()} not found")
    return resource


def owner_id_of(resource) -> str:
    # Products are owned by their seller; anything else by its user
    for attr in ("seller_id", "user_id"):
        owner = getattr(resource, attr, None)
        if owner is not None:
            return owner
    raise TypeError(f"{type(resource).__name__} has no owner reference")


def is_owner(principal: User, resource) -> bool:
    return owner_id_of(resource) == principal.id
