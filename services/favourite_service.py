from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from core.exceptions import Conflict, NotFound
from models.favourites import Favourite
from models.products import Product
from models.users import User
from services.ownership import parse_identifier
from utils.logger import get_logger
from utils.pagination import Page, pagination_meta

logger = get_logger(__name__)


class FavouriteService:

    @staticmethod
    def add(user: User, product: Product, db: Session) -> Favourite:
        """Bookmark a product. Ownership of the product was checked by the gate."""
        existing = db.query(Favourite).filter(
            Favourite.user_id == user.id,
            Favourite.product_id == product.id
        ).first()

        if existing:
            raise Conflict("Product is already in your favourites")

        favourite = Favourite(user_id=user.id, product_id=product.id)
        db.add(favourite)
        try:
            db.commit()
        except IntegrityError:
            # Unique (user_id, product_id) constraint caught a concurrent insert
            db.rollback()
            raise Conflict("Product is already in your favourites")

        db.refresh(favourite)
        logger.info("Favourite added", extra={"user_id": user.id, "product_id": product.id})
        return favourite

    @staticmethod
    def remove(user: User, raw_product_id: str, db: Session) -> None:
        product_id = parse_identifier(raw_product_id, "product")

        deleted = db.query(Favourite).filter(
            Favourite.user_id == user.id,
            Favourite.product_id == product_id
        ).delete(synchronize_session=False)

        if not deleted:
            db.rollback()
            raise NotFound("Favourite not found")

        db.commit()
        logger.info("Favourite removed", extra={"user_id": user.id, "product_id": product_id})

    @staticmethod
    def list_for_user(user: User, page: Page, db: Session) -> tuple[list[Product], dict]:
        query = db.query(Favourite).filter(Favourite.user_id == user.id)
        total = query.count()

        favourites = (
            query.options(joinedload(Favourite.product).joinedload(Product.seller))
            .order_by(Favourite.created_at.desc())
            .offset(page.offset)
            .limit(page.limit)
            .all()
        )

        products = [fav.product for fav in favourites if fav.product is not None]
        return products, pagination_meta(page, total)

    @staticmethod
    def product_ids_for_user(user: User, db: Session) -> list[str]:
        rows = (
            db.query(Favourite.product_id)
            .filter(Favourite.user_id == user.id)
            .order_by(Favourite.created_at.desc())
            .all()
        )
        return [row[0] for row in rows]
