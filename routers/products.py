from typing import Annotated, Optional
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from utils.deps import db_dependency, settings_dependency, gated_principal, gated_product
from models.products import Product
from models.users import User
from schemas.product_schemas import (ProductForm, ProductPage, ProductResponse, SortOrder,
    UserProductPage, Pagination)
from services.authorization import Action
from services.ownership import fetch_resource
from services.product_service import ProductService, parse_existing_images
from middleware.rate_limiter import limiter
from utils.pagination import resolve_page


router = APIRouter(
    prefix="/products",
    tags=["products"]
)


def product_form(
    title: str = Form(...),
    description: str = Form(...),
    price: str = Form(...),
    category: str = Form(...),
    condition: str = Form(...)
) -> ProductForm:
    """Multipart fields validated through the ProductForm schema (422 on failure)."""
    try:
        return ProductForm(
            title=title,
            description=description,
            price=price,
            category=category,
            condition=condition
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))


@router.get("", response_model=ProductPage)
async def browse_products(
    db: db_dependency,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort: SortOrder = SortOrder.NEWEST
):
    products, meta = ProductService.browse(db, resolve_page(page, limit), search, category, sort)

    return ProductPage(
        products=[ProductResponse.from_product(p) for p in products],
        pagination=Pagination(**meta)
    )


@router.get("/categories")
async def list_categories(db: db_dependency):
    return {"data": ProductService.categories(db)}


@router.get("/user/{username}", response_model=UserProductPage)
async def products_by_user(username: str, db: db_dependency,
    page: Optional[str] = None, limit: Optional[str] = None):
    user, products, meta = ProductService.by_username(db, username, resolve_page(page, limit))
    return UserProductPage.build(user, products, meta)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: db_dependency):
    product = fetch_resource(db, Product, product_id, "product")
    return ProductResponse.from_product(product)


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("20/hour")
async def create_product(
    request: Request,
    seller: Annotated[User, Depends(gated_principal(Action.CREATE_LISTING))],
    form: Annotated[ProductForm, Depends(product_form)],
    db: db_dependency,
    settings: settings_dependency,
    images: Optional[list[UploadFile]] = File(None)
):
    product = await ProductService.create(seller, form, images or [], db, settings)

    return {
        "message": "Product created successfully",
        "data": ProductResponse.from_product(product)
    }


@router.put("/{product_id}", status_code=status.HTTP_200_OK)
@limiter.limit("30/hour")
async def update_product(
    request: Request,
    product: Annotated[Product, Depends(gated_product(Action.UPDATE_LISTING))],
    form: Annotated[ProductForm, Depends(product_form)],
    db: db_dependency,
    settings: settings_dependency,
    existing_images: Optional[str] = Form(None),
    images: Optional[list[UploadFile]] = File(None)
):
    product = await ProductService.update(
        product,
        form,
        parse_existing_images(existing_images),
        images or [],
        db,
        settings
    )

    return {
        "message": "Product updated successfully",
        "data": ProductResponse.from_product(product)
    }


@router.delete("/{product_id}", status_code=status.HTTP_200_OK)
async def delete_product(
    product: Annotated[Product, Depends(gated_product(Action.DELETE_LISTING))],
    db: db_dependency
):
    ProductService.delete(product, db)
    return {"message": "Product deleted successfully"}
