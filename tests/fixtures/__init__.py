"""Shared test domain objects."""

from .catalog import Product, make_products
from .clock import FakeClock, SleepRecorder

__all__ = [
    "FakeClock",
    "Product",
    "SleepRecorder",
    "make_products",
]
