from core.database import Base
from sqlalchemy import (Column, String, Text, ForeignKey, Numeric, Enum, JSON, Index)
from sqlalchemy.orm import relationship
from .mixins import UUIDPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin

CONDITIONS = ("New", "Like New", "Good", "Fair")


class Product(Base, UUIDPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_category_created_at", "category", "created_at"),
    )

    #fk
    seller_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    seller = relationship("User")

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    images = Column(JSON, nullable=False, default=list)
    category = Column(String(50), nullable=False)
    condition = Column(Enum(*CONDITIONS, name="product_condition"), nullable=False)
