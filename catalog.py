from typing import Any, Dict, List, Optional

from database import get_documents, serialize_doc, to_object_id
from errors import NotFoundError, ValidationError

HORIZONTAL_LIMIT = 10


class CatalogService:
    def __init__(self, db):
        self.db = db
        self.products = db["product"]

    def horizontal_products(self, category: Optional[str]) -> List[Dict[str, Any]]:
        """Newest products of a category for the home page carousels."""
        items = get_documents(self.db, "product", {"category": category}, sort="created_at", limit=HORIZONTAL_LIMIT)
        return [serialize_doc(p) for p in items]

    def category_products(self, category: str) -> List[Dict[str, Any]]:
        return [serialize_doc(p) for p in self.products.find({"category": category})]

    def find(self, product_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(product_id)
        return self.products.find_one({"_id": oid}) if oid else None

    def product_details(self, product_id: str) -> Dict[str, Any]:
        product = self.find(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return serialize_doc(product)

    def search(self, query: Optional[str]) -> List[Dict[str, Any]]:
        if not query:
            raise ValidationError("Query parameter is required")
        criteria = {"$or": [
            {"product_name": {"$regex": query, "$options": "i"}},
            {"brand_name": {"$regex": query, "$options": "i"}},
            {"category": {"$regex": query, "$options": "i"}},
        ]}
        return [serialize_doc(p) for p in self.products.find(criteria)]
