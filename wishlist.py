from typing import Any, Dict, List

from catalog import CatalogService
from database import create_document, serialize_doc
from errors import NotFoundError
from schemas import WishlistEntry


class WishlistService:
    """Wishlist entries. Like the cart, removal deletes by product id only."""

    def __init__(self, db, catalog: CatalogService):
        self.db = db
        self.entries = db["wishlist"]
        self.catalog = catalog

    def add(self, user_id: str, product_id: str) -> str:
        if not self.catalog.find(product_id):
            raise NotFoundError("Product not found")
        entry = WishlistEntry(user_id=user_id, product_id=product_id)
        return create_document(self.db, "wishlist", entry.model_dump())

    def remove(self, user_id: str, product_id: str) -> None:
        if not self.entries.find_one({"product_id": product_id, "user_id": user_id}):
            raise NotFoundError("Product not found in wishlist")
        self.entries.delete_one({"product_id": product_id})

    def list(self, user_id: str) -> List[Dict[str, Any]]:
        entries = self.entries.find({"user_id": user_id}).sort("created_at", -1)
        # Products deleted since being wishlisted come back as None.
        products = []
        for entry in entries:
            product = self.catalog.find(entry["product_id"])
            products.append(serialize_doc(product) if product else None)
        return products

    def contains(self, user_id: str, product_id: str) -> bool:
        return self.entries.find_one({"product_id": product_id, "user_id": user_id}) is not None
