from .base import BaseOrderPlacer
from .factory import get_order_placer

__all__ = ["BaseOrderPlacer", "get_order_placer"]
