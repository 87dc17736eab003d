import json
from fastapi import UploadFile
from sqlalchemy import delete, or_
from sqlalchemy.orm import Session, joinedload
from core.config import Settings
from core.exceptions import ImageRejected, NotFound
from models.favourites import Favourite
from models.products import Product
from models.users import User
from schemas.product_schemas import ProductForm, SortOrder
from services.image_service import ImageService, MAX_IMAGES
from utils.logger import get_logger
from utils.pagination import Page, pagination_meta

logger = get_logger(__name__)

SORT_COLUMNS = {
    SortOrder.NEWEST: (Product.created_at.desc(),),
    SortOrder.OLDEST: (Product.created_at.asc(),),
    SortOrder.PRICE_ASC: (Product.price.asc(), Product.created_at.desc()),
    SortOrder.PRICE_DESC: (Product.price.desc(), Product.created_at.desc()),
}


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def parse_existing_images(raw: str | None) -> list[str]:
    if raw is None or not raw.strip():
        return []
    try:
        urls = json.loads(raw)
    except json.JSONDecodeError:
        raise ImageRejected("existing_images must be a JSON array of URLs")
    if not isinstance(urls, list) or not all(isinstance(url, str) for url in urls):
        raise ImageRejected("existing_images must be a JSON array of URLs")
    return urls


class ProductService:

    @staticmethod
    def browse(db: Session, page: Page, search: str | None = None, category: str | None = None,
               sort: SortOrder = SortOrder.NEWEST) -> tuple[list[Product], dict]:
        query = db.query(Product)

        if category:
            query = query.filter(Product.category == category)

        if search and search.strip():
            pattern = _like_pattern(search.strip())
            query = query.filter(or_(
                Product.title.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\")
            ))

        total = query.count()
        products = (
            query.options(joinedload(Product.seller))
            .order_by(*SORT_COLUMNS[sort])
            .offset(page.offset)
            .limit(page.limit)
            .all()
        )

        return products, pagination_meta(page, total)

    @staticmethod
    def categories(db: Session) -> list[str]:
        rows = db.query(Product.category).distinct().all()
        return sorted((row[0] for row in rows), key=str.lower)

    @staticmethod
    def by_username(db: Session, username: str, page: Page) -> tuple[User, list[Product], dict]:
        user = db.query(User).filter(User.username == username.lower()).first()
        if not user:
            raise NotFound("User not found")

        query = db.query(Product).filter(Product.seller_id == user.id)
        total = query.count()
        products = (
            query.order_by(Product.created_at.desc())
            .offset(page.offset)
            .limit(page.limit)
            .all()
        )

        return user, products, pagination_meta(page, total)

    @staticmethod
    async def create(seller: User, form: ProductForm, images: list[UploadFile],
                     db: Session, settings: Settings) -> Product:
        if not images:
            raise ImageRejected("At least one image is required")
        if len(images) > MAX_IMAGES:
            raise ImageRejected(f"Too many files. Maximum is {MAX_IMAGES} images")

        urls = await ImageService(settings).upload_many(images, folder="products")

        product = Product(
            title=form.title,
            description=form.description,
            price=form.price,
            images=urls,
            category=form.category,
            condition=form.condition,
            seller_id=seller.id
        )
        db.add(product)
        db.commit()
        db.refresh(product)

        logger.info(
            "Product created",
            extra={"user_id": seller.id, "product_id": product.id, "image_count": len(urls)}
        )
        return product

    @staticmethod
    async def update(product: Product, form: ProductForm, existing_images: list[str],
                     new_images: list[UploadFile], db: Session, settings: Settings) -> Product:
        """
        Replace listing fields. ``existing_images`` lists the current URLs to
        keep (in order); ``new_images`` are appended after them.
        """
        current = set(product.images or [])
        if any(url not in current for url in existing_images):
            logger.warning(
                "Product update rejected - foreign image URL",
                extra={"product_id": product.id}
            )
            raise ImageRejected("existing_images may only reference this product's images")

        kept = list(dict.fromkeys(existing_images))
        total = len(kept) + len(new_images)
        if total < 1:
            raise ImageRejected("At least one image is required")
        if total > MAX_IMAGES:
            raise ImageRejected(f"Too many files. Maximum is {MAX_IMAGES} images")

        uploaded = await ImageService(settings).upload_many(new_images, folder="products") if new_images else []

        product.title = form.title
        product.description = form.description
        product.price = form.price
        product.category = form.category
        product.condition = form.condition
        product.images = kept + uploaded
        db.commit()
        db.refresh(product)

        logger.info("Product updated", extra={"product_id": product.id})
        return product

    @staticmethod
    def delete(product: Product, db: Session) -> None:
        product_id = product.id

        db.execute(
            delete(Favourite)
            .where(Favourite.product_id == product_id)
            .execution_options(synchronize_session=False)
        )
        db.delete(product)
        db.commit()

        logger.info("Product deleted", extra={"product_id": product_id})

