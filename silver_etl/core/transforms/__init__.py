"""
Per-entity bronze -> silver transforms.

Each transform is a pure DataFrame -> DataFrame function.
"""

from .customer import clean_customers
from .erp import clean_customer_attributes, clean_customer_locations, clean_product_categories
from .product import clean_products
from .sales import clean_sales

__all__ = [
    "clean_customers",
    "clean_products",
    "clean_sales",
    "clean_customer_attributes",
    "clean_customer_locations",
    "clean_product_categories",
]
