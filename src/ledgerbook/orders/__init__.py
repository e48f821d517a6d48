"""Order intake collaborator: request/response models and validation."""

from .intake import make_limit, place_order, validate_order
from .model import OrderRequest, OrderResponse, new_id

__all__ = ["OrderRequest", "OrderResponse", "make_limit", "new_id", "place_order", "validate_order"]
