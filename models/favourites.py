from core.database import Base
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .mixins import UUIDPrimaryKeyMixin, CreatedAtMixin


class Favourite(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "favourites"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_favourites_user_product"),
    )

    #fk
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User")
    product = relationship("Product")
