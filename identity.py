"""Registration, OTP verification, login and password reset.

A user moves from pending verification to verified once the OTP mailed at
registration comes back through ``verify_registration``. Only verified users
can log in. Password reset is a separate three step flow: ``forgot_password``
mails a reset OTP, ``verify_reset_otp`` lets the client check it, and
``reset_password`` writes the new password.

Known gaps kept as-is:

* passwords are stored and compared in plaintext;
* ``reset_password`` finds the user by email only and ignores the OTP;
* OTPs are not checked for uniqueness across users.
"""
import logging
import random
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from config import Settings
from database import create_document, serialize_doc
from errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from mailer import Mailer, reset_done_mail, reset_mail, verification_mail
from schemas import User

logger = logging.getLogger(__name__)

OTP_ALPHABET = "012345"
OTP_LENGTH = 6

PRIVATE_FIELDS = ("password", "verification_token", "reset_token")


def generate_otp() -> str:
    return "".join(random.choice(OTP_ALPHABET) for _ in range(OTP_LENGTH))


class IdentityService:
    def __init__(self, db, settings: Settings, mailer: Mailer):
        self.users = db["user"]
        self.db = db
        self.settings = settings
        self.mailer = mailer

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str], profile_pic: Optional[str] = None) -> str:
        if not name:
            raise ValidationError("Please provide your name.")
        if not email:
            raise ValidationError("Email is required!")
        if not password:
            raise ValidationError("Please provide a password.")

        if self.users.find_one({"email": email}):
            raise ConflictError("User already exists")

        user = User(
            name=name,
            email=email,
            password=password,
            profile_pic=profile_pic,
            verification_token=generate_otp(),
        )
        user_id = create_document(self.db, "user", user.model_dump())
        logger.info(f"Registered user {user_id}")

        self.mailer.dispatch(email, *verification_mail(user.verification_token))
        return user_id

    def verify_registration(self, token: str) -> None:
        # A second attempt with a used token is "not found", not "already verified".
        user = self.users.find_one({"verification_token": token})
        if not user:
            raise NotFoundError("User not found.")
        self.users.update_one(
            {"_id": user["_id"]},
            {"$set": {"verified": True, "verification_token": None}},
        )

    def resend_otp(self, email: Optional[str]) -> None:
        user = self.users.find_one({"email": email})
        if not user:
            raise NotFoundError("User not found")
        token = generate_otp()
        self.users.update_one({"_id": user["_id"]}, {"$set": {"verification_token": token}})
        self.mailer.dispatch(email, *verification_mail(token))

    def login(self, email: Optional[str], password: Optional[str]) -> str:
        user = self.users.find_one({"email": email})
        if not user:
            raise NotFoundError("User not found")
        if not user.get("verified"):
            raise ForbiddenError("User not verified")
        if not password or user.get("password") != password:
            raise UnauthorizedError("Invalid Password")
        return self.create_token(email)

    def create_token(self, email: str) -> str:
        return jwt.encode({"email": email}, self.settings.SECRET_KEY, algorithm=self.settings.JWT_ALGORITHM)

    def decode_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.settings.SECRET_KEY, algorithms=[self.settings.JWT_ALGORITHM])
        except JWTError:
            raise UnauthorizedError("Invalid token")

    def current_user(self, authorization: Optional[str]) -> Dict[str, Any]:
        if not authorization or not authorization.startswith("Bearer "):
            raise UnauthorizedError("Not authenticated")
        payload = self.decode_token(authorization.split(" ", 1)[1])
        email = payload.get("email")
        if not email:
            raise UnauthorizedError("Invalid token")
        user = self.users.find_one({"email": email})
        if not user:
            raise NotFoundError("User not found")
        for field in PRIVATE_FIELDS:
            user.pop(field, None)
        return serialize_doc(user)

    def forgot_password(self, email: Optional[str]) -> None:
        user = self.users.find_one({"email": email})
        if not user:
            raise NotFoundError("User not found")
        token = generate_otp()
        self.users.update_one({"_id": user["_id"]}, {"$set": {"reset_token": token}})
        # Blocking: a failed send fails the request.
        self.mailer.send(email, *reset_mail(token))

    def verify_reset_otp(self, otp: Optional[str]) -> None:
        if not otp or not self.users.find_one({"reset_token": otp}):
            raise NotFoundError("Invalid OTP")

    def reset_password(self, email: Optional[str], otp: Optional[str], password: Optional[str]) -> None:
        if not password:
            raise ValidationError("Please provide a password.")
        user = self.users.find_one({"email": email})
        if not user:
            raise NotFoundError("Invalid OTP")
        self.users.update_one(
            {"_id": user["_id"]},
            {"$set": {"password": password, "reset_token": None}},
        )
        self.mailer.dispatch(email, *reset_done_mail())
