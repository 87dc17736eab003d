from typing import Annotated, Optional
from fastapi import APIRouter, Depends, status
from utils.deps import db_dependency, gated_principal, gated_product
from models.products import Product
from models.users import User
from schemas.product_schemas import FavouriteResponse, Pagination, ProductPage, ProductResponse
from services.authorization import Action
from services.favourite_service import FavouriteService
from utils.pagination import resolve_page


router = APIRouter(
    prefix="/favourites",
    tags=["favourites"]
)


@router.get("", response_model=ProductPage)
async def list_favourites(
    user: Annotated[User, Depends(gated_principal(Action.LIST_FAVOURITES))],
    db: db_dependency,
    page: Optional[str] = None,
    limit: Optional[str] = None
):
    products, meta = FavouriteService.list_for_user(user, resolve_page(page, limit), db)

    return ProductPage(
        products=[ProductResponse.from_product(p) for p in products],
        pagination=Pagination(**meta)
    )


@router.get("/ids")
async def list_favourite_ids(
    user: Annotated[User, Depends(gated_principal(Action.LIST_FAVOURITE_IDS))],
    db: db_dependency
):
    return {"data": FavouriteService.product_ids_for_user(user, db)}


@router.post("/{product_id}", status_code=status.HTTP_201_CREATED)
async def add_favourite(
    user: Annotated[User, Depends(gated_principal(Action.CREATE_FAVOURITE))],
    product: Annotated[Product, Depends(gated_product(Action.CREATE_FAVOURITE))],
    db: db_dependency
):
    favourite = FavouriteService.add(user, product, db)

    return {
        "message": "Product added to favourites",
        "data": FavouriteResponse.model_validate(favourite)
    }


@router.delete("/{product_id}", status_code=status.HTTP_200_OK)
async def remove_favourite(
    product_id: str,
    user: Annotated[User, Depends(gated_principal(Action.DELETE_FAVOURITE))],
    db: db_dependency
):
    FavouriteService.remove(user, product_id, db)
    return {"message": "Product removed from favourites"}
