# Makes 'models' a package and simplifies imports

from .base import BaseModel, metadata
from .interaction import Interaction
from .listing import Listing
from .user import User

__all__ = [
    "BaseModel",
    "metadata",
    "User",
    "Listing",
    "Interaction",
]
