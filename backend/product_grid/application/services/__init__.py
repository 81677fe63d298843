from .product_table_service import ProductTableService
from .product_mutation_service import FieldRules, ProductMutationService

__all__ = [
    "ProductTableService",
    "FieldRules",
    "ProductMutationService",
]
