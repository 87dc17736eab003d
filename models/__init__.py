from models.users import User
from models.products import Product, CONDITIONS
from models.favourites import Favourite

__all__ = ["User", "Product", "Favourite", "CONDITIONS"]
