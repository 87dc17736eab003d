from typing import Annotated, Optional
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from core.config import Settings
from core.exceptions import Unauthenticated
from models.products import Product
from models.users import User
from services.authorization import Action, authorize
from services.ownership import fetch_resource
from services.token_service import TokenService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings

settings_dependency = Annotated[Settings, Depends(get_settings)]


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def get_optional_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    db: db_dependency,
    settings: settings_dependency
) -> Optional[User]:
    """
    Resolve the bearer token to a principal.

    No Authorization header means an anonymous request (None). A header that
    does not resolve to an existing user is rejected outright.
    """
    if not token:
        return None

    user_id = TokenService.decode_access_token(token, settings)
    user = db.get(User, user_id)

    if user is None:
        raise Unauthenticated("Not authorized, user no longer exists")

    return user


def get_current_user(user: Annotated[Optional[User], Depends(get_optional_user)]) -> User:
    if user is None:
        raise Unauthenticated()
    return user


principal_dependency = Annotated[Optional[User], Depends(get_optional_user)]
user_dependency = Annotated[User, Depends(get_current_user)]


def gated_principal(action: Action):
    """Dependency: the principal, after the gate's verification checks for ``action``."""
    def dependency(principal: principal_dependency) -> User:
        authorize(principal, action)
        return principal
    return dependency


def gated_product(action: Action):
    """Dependency: the product named by the ``product_id`` path param, after the full gate."""
    def dependency(product_id: str, principal: principal_dependency, db: db_dependency) -> Product:
        return authorize(
            principal,
            action,
            load=lambda: fetch_resource(db, Product, product_id, "product")
        )
    return dependency
