import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session
from typing import Generator

from main import create_app
from core.config import Settings
from core.database import Base
from models.products import Product
from models.users import User
from services.token_service import TokenService
from utils.deps import get_db
from utils.hashing import get_password_hash

TEST_PASSWORD = "TestPassword123!"

# Smallest byte string that passes the JPEG signature check
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64

test_settings = Settings(
    ENV="testing",
    DATABASE_URL="sqlite:///./test.db",
    SECRET_KEY="test-secret-key",
    RATE_LIMIT_ENABLED=False,
    AUTO_CREATE_TABLES=False,
    LOG_LEVEL="WARNING",
)

app = create_app(test_settings)
engine = app.state.engine
TestingSessionLocal = app.state.session_factory


@pytest.fixture
def settings() -> Settings:
    return test_settings


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(session: Session):
    """
    Yields an HTTP client that talks to the app using the test database.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def outbox(monkeypatch):
    """
    Captures verification emails and SMS instead of delivering them.

    Each entry is ``(channel, recipient, secret)`` with the plaintext token
    or code, which is otherwise never stored.
    """
    sent = []

    async def fake_email(settings, to_email, token):
        sent.append(("email", to_email, token))

    async def fake_sms(settings, to_number, code):
        sent.append(("sms", to_number, code))

    monkeypatch.setattr("services.auth_service.send_verification_email", fake_email)
    monkeypatch.setattr("services.verification_service.send_verification_email", fake_email)
    monkeypatch.setattr("services.verification_service.send_verification_sms", fake_sms)
    return sent


@pytest.fixture
def make_user(session: Session):
    """Factory that inserts a user directly, bypassing registration."""
    counter = {"n": 0}

    def _make_user(email_verified: bool = True, phone_verified: bool = True,
                   username: str | None = None, email: str | None = None) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=f"Test User {n}",
            username=username or f"user{n}",
            email=email or f"user{n}@example.com",
            phone="+201111111111",
            hashed_password=get_password_hash(TEST_PASSWORD),
            email_verified=email_verified,
            phone_verified=phone_verified
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def verified_user(make_user) -> User:
    return make_user()


@pytest.fixture
def other_user(make_user) -> User:
    return make_user()


@pytest.fixture
def auth_headers(settings):
    """Bearer header for a user."""
    def _auth_headers(user: User) -> dict:
        token = TokenService.create_access_token(user, settings)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def make_product(session: Session):
    """Factory that inserts a listing directly for a seller."""
    def _make_product(seller: User, title: str = "Vintage bicycle", price: float = 120.0,
                      category: str = "Sports", description: str = "A well kept road bike",
                      images: list[str] | None = None) -> Product:
        product = Product(
            seller_id=seller.id,
            title=title,
            description=description,
            price=price,
            category=category,
            condition="Good",
            images=images or ["https://res.cloudinary.com/test/image/upload/sellit/products/a.jpg"]
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make_product


def product_fields(**overrides) -> dict:
    fields = {
        "title": "Vintage bicycle",
        "description": "A well kept road bike",
        "price": "120.50",
        "category": "Sports",
        "condition": "Good",
    }
    fields.update(overrides)
    return fields


def jpeg_files(count: int = 1) -> list:
    return [("images", (f"photo{i}.jpg", JPEG_BYTES, "image/jpeg")) for i in range(count)]


@pytest.fixture
def listing_form():
    """(data, files) builders for multipart listing requests."""
    return product_fields, jpeg_files
