from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from models.products import Product
from models.users import User

Condition = Literal["New", "Like New", "Good", "Fair"]


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


class ProductForm(BaseModel):
    """Listing fields submitted as multipart form data."""
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=10, max_length=2000)
    price: float = Field(gt=0, le=99_999_999.99, allow_inf_nan=False)
    category: str = Field(min_length=1, max_length=50)
    condition: Condition

    @field_validator('title', 'description', 'category', mode='before')
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


# A listing's seller is either a bare reference or the expanded user record.
# The discriminator keeps callers from treating one as the other.

class SellerReference(BaseModel):
    kind: Literal["reference"] = "reference"
    id: str


class SellerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: Literal["expanded"] = "expanded"
    id: str
    name: str
    username: str
    email: str
    phone: str
    profile_photo: Optional[str] = None


Seller = Annotated[Union[SellerReference, SellerSummary], Field(discriminator="kind")]


class ProductResponse(BaseModel):
    id: str
    title: str
    description: str
    price: float
    images: list[str]
    category: str
    condition: Condition
    seller: Seller
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_product(cls, product: Product, expand_seller: bool = True) -> "ProductResponse":
        if expand_seller:
            seller = SellerSummary.model_validate(product.seller)
        else:
            seller = SellerReference(id=product.seller_id)

        return cls(
            id=product.id,
            title=product.title,
            description=product.description,
            price=product.price,
            images=list(product.images),
            category=product.category,
            condition=product.condition,
            seller=seller,
            created_at=product.created_at,
            updated_at=product.updated_at
        )


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_products: int
    limit: int
    has_more: bool


class ProductPage(BaseModel):
    products: list[ProductResponse]
    pagination: Pagination


class PublicUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    username: str
    profile_photo: Optional[str] = None
    created_at: datetime


class UserProductPage(ProductPage):
    user: PublicUser

    @classmethod
    def build(cls, user: User, products: list[Product], pagination: dict) -> "UserProductPage":
        return cls(
            user=PublicUser.model_validate(user),
            products=[ProductResponse.from_product(p, expand_seller=False) for p in products],
            pagination=Pagination(**pagination)
        )


class FavouriteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    created_at: datetime
