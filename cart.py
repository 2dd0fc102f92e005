"""Cart entries: one document per add, quantity adjusted in place.

An entry never holds quantity 0; decreasing to 0 deletes instead. Entries are
not unique per (user, product), and two deletes use a narrower filter than
the lookup before them:

* ``remove`` checks (user, product) but deletes by product only;
* ``decrease`` reaching 0 deletes by user only.

Both deletes act on whatever matches the narrower filter.
"""
import logging
from typing import Any, Dict, List

from database import create_document, serialize_doc, to_object_id
from errors import NotFoundError
from schemas import CartEntry

logger = logging.getLogger(__name__)

REMOVED = "removed"
DECREASED = "decreased"


class CartService:
    def __init__(self, db):
        self.db = db
        self.entries = db["cart"]
        self.products = db["product"]

    def _entry(self, user_id: str, entry_id: str):
        oid = to_object_id(entry_id)
        entry = self.entries.find_one({"user_id": user_id, "_id": oid}) if oid else None
        if not entry:
            raise NotFoundError("Product not found in cart")
        return entry

    def add(self, user_id: str, product_id: str) -> str:
        oid = to_object_id(product_id)
        if not oid or not self.products.find_one({"_id": oid}):
            raise NotFoundError("Product not found")
        entry = CartEntry(user_id=user_id, product_id=product_id)
        return create_document(self.db, "cart", entry.model_dump())

    def remove(self, user_id: str, product_id: str) -> None:
        if not self.entries.find_one({"product_id": product_id, "user_id": user_id}):
            raise NotFoundError("Product not found in cart")
        self.entries.delete_one({"product_id": product_id})

    def increase(self, user_id: str, entry_id: str) -> int:
        entry = self._entry(user_id, entry_id)
        quantity = entry["quantity"] + 1
        self.entries.update_one({"_id": entry["_id"]}, {"$set": {"quantity": quantity}})
        return quantity

    def decrease(self, user_id: str, entry_id: str) -> str:
        entry = self._entry(user_id, entry_id)
        quantity = entry["quantity"] - 1
        if quantity == 0:
            result = self.entries.delete_many({"user_id": user_id})
            logger.info(f"Cleared {result.deleted_count} cart entries of user {user_id}")
            return REMOVED
        self.entries.update_one({"_id": entry["_id"]}, {"$set": {"quantity": quantity}})
        return DECREASED

    def contains(self, user_id: str, product_id: str) -> bool:
        return self.entries.find_one({"product_id": product_id, "user_id": user_id}) is not None

    def list(self, user_id: str) -> List[Dict[str, Any]]:
        return [serialize_doc(e) for e in self.entries.find({"user_id": user_id})]

    def clear(self, user_id: str) -> int:
        return self.entries.delete_many({"user_id": user_id}).deleted_count
