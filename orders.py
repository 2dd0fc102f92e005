from typing import Any, Dict, List

from database import create_document, serialize_doc, to_object_id
from errors import NotFoundError, ValidationError
from schemas import Order


class OrderService:
    """Orders embed snapshots of products and address at checkout.

    Cancelling sets ``cancelled`` but leaves ``status`` untouched, while the
    already-cancelled check reads ``status``; an order can be cancelled again.
    """

    def __init__(self, db):
        self.db = db
        self.orders = db["order"]
        self.users = db["user"]

    def place(self, user_id: str, products: List[Dict[str, Any]], shipping_address: Dict[str, Any], total_price: float, payment_method: str) -> str:
        oid = to_object_id(user_id)
        if not oid or not self.users.find_one({"_id": oid}):
            raise NotFoundError("User not found")
        order = Order(
            user=user_id,
            products=products,
            total_price=total_price,
            shipping_address=shipping_address,
            payment_method=payment_method,
        )
        return create_document(self.db, "order", order.model_dump())

    def list(self, user_id: str) -> List[Dict[str, Any]]:
        return [serialize_doc(o) for o in self.orders.find({"user": user_id}).sort("created_at", -1)]

    def cancel(self, order_id: str) -> None:
        oid = to_object_id(order_id)
        order = self.orders.find_one({"_id": oid}) if oid else None
        if not order:
            raise NotFoundError("Order not found")
        if order.get("status") == "cancelled":
            raise ValidationError("Order already cancelled")
        self.orders.update_one({"_id": oid}, {"$set": {"cancelled": True}})
