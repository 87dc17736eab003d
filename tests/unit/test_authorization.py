from types import SimpleNamespace
import pytest

from core.exceptions import (Unauthenticated, EmailNotVerified, PhoneNotVerified, NotOwner,
    CannotFavouriteOwnListing, InvalidIdentifier, NotFound)
from services.authorization import Action, authorize

OWNER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_ID = "22222222-2222-4222-8222-222222222222"


def principal(user_id=OWNER_ID, email_verified=True, phone_verified=True):
    return SimpleNamespace(id=user_id, email_verified=email_verified, phone_verified=phone_verified)


def listing(seller_id=OWNER_ID):
    return SimpleNamespace(id="33333333-3333-4333-8333-333333333333", seller_id=seller_id)


def failing_loader():
    raise AssertionError("resource must not be loaded")


def test_public_actions_allow_anonymous():
    assert authorize(None, Action.BROWSE_LISTINGS) is None

    product = listing()
    assert authorize(None, Action.VIEW_LISTING, load=lambda: product) is product


def test_mutation_requires_principal():
    with pytest.raises(Unauthenticated):
        authorize(None, Action.CREATE_LISTING)


def test_email_checked_before_phone():
    with pytest.raises(EmailNotVerified):
        authorize(principal(email_verified=False, phone_verified=False), Action.CREATE_LISTING)


def test_phone_required_for_listings():
    with pytest.raises(PhoneNotVerified):
        authorize(principal(phone_verified=False), Action.CREATE_LISTING)


def test_phone_not_required_for_favourites():
    product = listing(seller_id=OTHER_ID)
    user = principal(phone_verified=False)

    assert authorize(user, Action.CREATE_FAVOURITE, load=lambda: product) is product
    assert authorize(user, Action.DELETE_FAVOURITE) is None


def test_read_only_actions_skip_verification():
    user = principal(email_verified=False, phone_verified=False)

    authorize(user, Action.LIST_FAVOURITES)
    authorize(user, Action.LIST_FAVOURITE_IDS)
    authorize(user, Action.BROWSE_LISTINGS)


@pytest.mark.parametrize("user", [
    principal(email_verified=False),
    principal(phone_verified=False),
])
def test_resource_not_loaded_for_unverified_principal(user):
    with pytest.raises((EmailNotVerified, PhoneNotVerified)):
        authorize(user, Action.UPDATE_LISTING, load=failing_loader)


def test_loader_errors_surface_after_verification():
    def missing():
        raise NotFound("Product not found")

    def malformed():
        raise InvalidIdentifier("Invalid product ID")

    with pytest.raises(NotFound):
        authorize(principal(), Action.DELETE_LISTING, load=missing)
    with pytest.raises(InvalidIdentifier):
        authorize(principal(), Action.DELETE_LISTING, load=malformed)


@pytest.mark.parametrize("action", [Action.UPDATE_LISTING, Action.DELETE_LISTING])
def test_owner_only_actions(action):
    product = listing(seller_id=OWNER_ID)

    assert authorize(principal(OWNER_ID), action, load=lambda: product) is product
    with pytest.raises(NotOwner):
        authorize(principal(OTHER_ID), action, load=lambda: product)


def test_cannot_favourite_own_listing():
    product = listing(seller_id=OWNER_ID)

    with pytest.raises(CannotFavouriteOwnListing):
        authorize(principal(OWNER_ID), Action.CREATE_FAVOURITE, load=lambda: product)


@pytest.mark.parametrize("action", [
    Action.CREATE_LISTING,
    Action.UPDATE_LISTING,
    Action.DELETE_LISTING,
    Action.CREATE_FAVOURITE,
    Action.DELETE_FAVOURITE,
])
def test_every_mutation_requires_verified_email(action):
    user = principal(email_verified=False, phone_verified=False)

    with pytest.raises(EmailNotVerified):
        authorize(user, action, load=failing_loader)
