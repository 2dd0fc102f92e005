from typing import Any, Dict, List, Optional

from bson import ObjectId

from database import serialize_doc, to_object_id
from errors import NotFoundError, ValidationError
from schemas import Address

# Checked in this order, first missing one is reported.
REQUIRED_ADDRESS_FIELDS = (
    ("name", "Please provide your name."),
    ("street", "Please provide your street address."),
    ("landmark", "Please provide your landmark."),
    ("postal_code", "Please provide your postal code."),
    ("mobile_no", "Please provide your mobile number."),
)


class ProfileService:
    def __init__(self, db):
        self.users = db["user"]

    def _user(self, user_id: str) -> Dict[str, Any]:
        oid = to_object_id(user_id)
        user = self.users.find_one({"_id": oid}) if oid else None
        if not user:
            raise NotFoundError("User not found")
        return user

    def edit_user(self, user_id: str, name: str, profile_pic: Optional[str]) -> None:
        user = self._user(user_id)
        if not name:
            raise ValidationError("Name cannot be empty")
        self.users.update_one({"_id": user["_id"]}, {"$set": {"name": name, "profile_pic": profile_pic}})

    def add_address(self, user_id: str, **fields) -> str:
        for field, message in REQUIRED_ADDRESS_FIELDS:
            if not fields.get(field):
                raise ValidationError(message)
        user = self._user(user_id)
        address = {"_id": ObjectId(), **Address(**fields).model_dump()}
        self.users.update_one({"_id": user["_id"]}, {"$push": {"addresses": address}})
        return str(address["_id"])

    def addresses(self, user_id: str) -> List[Dict[str, Any]]:
        return [serialize_doc(a) for a in self._user(user_id).get("addresses", [])]

    def delete_address(self, user_id: str, address_id: str) -> None:
        user = self._user(user_id)
        remaining = [a for a in user.get("addresses", []) if str(a.get("_id")) != address_id]
        self.users.update_one({"_id": user["_id"]}, {"$set": {"addresses": remaining}})
