from .base import Base
from .wishes import WishDb

__all__ = ["Base", "WishDb"]
