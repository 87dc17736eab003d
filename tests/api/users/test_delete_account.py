from models.favourites import Favourite
from models.products import Product
from models.users import User
from tests.conftest import TEST_PASSWORD


async def test_delete_account_cascades(client, session, make_user, make_product, auth_headers):
    """Deleting an account removes its listings and every favourite touching them."""
    seller = make_user()
    buyer = make_user()
    seller_id, buyer_id = seller.id, buyer.id

    seller_product = make_product(seller)
    buyer_product = make_product(buyer, title="Desk lamp")
    seller_product_id, buyer_product_id = seller_product.id, buyer_product.id

    session.add_all([
        Favourite(user_id=buyer_id, product_id=seller_product_id),
        Favourite(user_id=seller_id, product_id=buyer_product_id),
    ])
    session.commit()

    response = await client.request(
        "DELETE", "/users/me",
        headers=auth_headers(seller),
        json={"password": TEST_PASSWORD}
    )

    assert response.status_code == 200

    assert session.get(User, seller_id) is None
    assert session.query(Product).filter(Product.seller_id == seller_id).count() == 0
    assert session.query(Favourite).count() == 0

    # Other users' data is untouched
    assert session.get(User, buyer_id) is not None
    assert session.get(Product, buyer_product_id) is not None


async def test_delete_account_wrong_password(client, session, verified_user, auth_headers):
    user_id = verified_user.id

    response = await client.request(
        "DELETE", "/users/me",
        headers=auth_headers(verified_user),
        json={"password": "WrongPassword123!"}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INCORRECT_PASSWORD"
    assert session.get(User, user_id) is not None


async def test_delete_account_token_no_longer_works(client, verified_user, auth_headers):
    headers = auth_headers(verified_user)

    await client.request("DELETE", "/users/me", headers=headers, json={"password": TEST_PASSWORD})
    response = await client.get("/users/me", headers=headers)

    assert response.status_code == 401


async def test_delete_account_requires_auth(client):
    response = await client.request("DELETE", "/users/me", json={"password": TEST_PASSWORD})

    assert response.status_code == 401
