import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from accounts import ProfileService
from cart import REMOVED, CartService
from catalog import CatalogService
from config import Settings
from database import connect
from errors import InternalError, StoreError, internal_failure
from identity import IdentityService
from mailer import Mailer
from orders import OrderService
from schemas import (
    AddressInput,
    CancelOrderInput,
    CategoryInput,
    DeleteAddressInput,
    EditUserInput,
    EmailInput,
    LoginInput,
    OtpInput,
    PlaceOrderInput,
    RegisterInput,
    ResetPasswordInput,
    UserInput,
    UserProductInput,
)
from wishlist import WishlistService

logger = logging.getLogger(__name__)


class Services:
    def __init__(self, db, settings: Settings, mailer: Mailer):
        self.db = db
        self.identity = IdentityService(db, settings, mailer)
        self.catalog = CatalogService(db)
        self.wishlist = WishlistService(db, self.catalog)
        self.profile = ProfileService(db)
        self.cart = CartService(db)
        self.orders = OrderService(db)


def get_services(request: Request) -> Services:
    services = request.app.state.services
    if services is None:
        raise InternalError("Database not configured")
    return services


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


router = APIRouter()


@router.get("/")
def read_root(request: Request):
    return {"message": f"{request.app.title} running"}


@router.get("/test")
def test_database(request: Request):
    db = request.app.state.db
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        if db is not None:
            response["database"] = "✅ Available"
            response["connection_status"] = "Connected"
            response["database_name"] = db.name
            response["collections"] = db.list_collection_names()
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# Auth

@router.post("/register")
def register(payload: RegisterInput, svc: Services = Depends(get_services)):
    with internal_failure("Registration Failed."):
        svc.identity.register(payload.name, payload.email, payload.password, payload.profile_pic)
    return {"message": "Registration successful!"}


@router.get("/verify/{token}")
def verify(token: str, svc: Services = Depends(get_services)):
    with internal_failure("Error verifying email."):
        svc.identity.verify_registration(token)
    return {"message": "OTP Verified"}


@router.post("/send-otp")
def send_otp(payload: EmailInput, svc: Services = Depends(get_services)):
    with internal_failure("Error sending OTP"):
        svc.identity.resend_otp(payload.email)
    return {"message": "OTP sent successfully!"}


@router.post("/login")
def login(payload: LoginInput, svc: Services = Depends(get_services)):
    with internal_failure("Error logging in"):
        token = svc.identity.login(payload.email, payload.password)
    return {"message": "Login successful", "token": token}


@router.get("/user")
def get_user(authorization: Optional[str] = Header(default=None), svc: Services = Depends(get_services)):
    with internal_failure("Error getting user details"):
        user = svc.identity.current_user(authorization)
    return {"user": user}


@router.post("/forgot-password")
def forgot_password(payload: EmailInput, svc: Services = Depends(get_services)):
    with internal_failure("Error sending forgot password email"):
        svc.identity.forgot_password(payload.email)
    return {"message": "Forgot password email sent successfully"}


@router.post("/verify-reset-pass-otp")
def verify_reset_pass_otp(payload: OtpInput, svc: Services = Depends(get_services)):
    with internal_failure("Error verifying OTP"):
        svc.identity.verify_reset_otp(payload.otp)
    return {"message": "OTP verified successfully"}


@router.post("/reset-password")
def reset_password(payload: ResetPasswordInput, svc: Services = Depends(get_services)):
    with internal_failure("Error resetting password"):
        svc.identity.reset_password(payload.email, payload.otp, payload.password)
    return {"message": "Password reset successfully"}


# Profile

@router.post("/edit-user")
def edit_user(payload: EditUserInput, svc: Services = Depends(get_services)):
    with internal_failure("Error editing user details"):
        svc.profile.edit_user(payload.user_id, payload.name, payload.profile_pic)
    return {"message": "User details updated successfully"}


@router.post("/add-address")
def add_address(payload: AddressInput, svc: Services = Depends(get_services)):
    with internal_failure("Error adding address"):
        svc.profile.add_address(payload.user_id, **payload.model_dump(exclude={"user_id"}))
    return {"message": "Address added successfully"}


@router.get("/addresses/{user_id}")
def get_addresses(user_id: str, svc: Services = Depends(get_services)):
    with internal_failure("Error getting addresses"):
        return svc.profile.addresses(user_id)


@router.post("/delete-address")
def delete_address(payload: DeleteAddressInput, svc: Services = Depends(get_services)):
    with internal_failure("Error deleting address"):
        svc.profile.delete_address(payload.user_id, payload.address_id)
    return {"message": "Address deleted successfully"}


# Products

@router.post("/horizontal-products")
def horizontal_products(payload: Optional[CategoryInput] = None, category: Optional[str] = None, svc: Services = Depends(get_services)):
    if payload and payload.category:
        category = payload.category
    with internal_failure("Error getting horizontal products"):
        return {"products": svc.catalog.horizontal_products(category)}


@router.get("/category-products/{category}")
def category_products(category: str, svc: Services = Depends(get_services)):
    with internal_failure("Error getting category products"):
        return svc.catalog.category_products(category)


@router.get("/product-details/{product_id}")
def product_details(product_id: str, svc: Services = Depends(get_services)):
    with internal_failure("Error getting product details"):
        return svc.catalog.product_details(product_id)


@router.get("/search")
def search(query: Optional[str] = None, svc: Services = Depends(get_services)):
    with internal_failure("Server error"):
        return {"products": svc.catalog.search(query)}


# Wishlist

@router.post("/add-to-wishlist")
def add_to_wishlist(payload: UserProductInput, svc: Services = Depends(get_services)):
    with internal_failure("Error adding product to wishlist"):
        svc.wishlist.add(payload.user_id, payload.product_id)
    return {"message": "Product added to wishlist"}


@router.post("/remove-from-wishlist")
def remove_from_wishlist(payload: UserProductInput, svc: Services = Depends(get_services)):
    with internal_failure("Error removing product from wishlist"):
        svc.wishlist.remove(payload.user_id, payload.product_id)
    return {"message": "Product removed from wishlist"}


@router.get("/wishlist/{user_id}")
def get_wishlist(user_id: str, svc: Services = Depends(get_services)):
    with internal_failure("Error fetching wishlist"):
        return svc.wishlist.list(user_id)


@router.post("/check-wishlist")
def check_wishlist(payload: UserProductInput, svc: Services = Depends(get_services)):
    with internal_failure("Error checking wishlist"):
        return {"inWishlist": svc.wishlist.contains(payload.user_id, payload.product_id)}


# Cart

@router.post("/add-to-cart")
def add_to_cart(payload: UserProductInput, svc: Services = Depends(get_services)):
    with internal_failure("Error adding product to cart"):
        svc.cart.add(payload.user_id, payload.product_id)
    return {"message": "Product added to cart"}


@router.post("/remove-from-cart")
def remove_from_cart(payload: UserProductInput, svc: Services = Depends(get_services)):
    with internal_failure("Error removing product from cart"):
        svc.cart.remove(payload.user_id, payload.product_id)
    return {"message": "Product removed from cart"}


@router.post("/cart")
def get_cart(payload: UserInput, svc: Services = Depends(get_services)):
    with internal_failure("Error fetching cart"):
        return svc.cart.list(payload.user_id)


# productId carries the cart entry id on the quantity endpoints.
@router.post("/increase-qty")
def increase_qty(payload: UserProductInput, svc: Services = Depends(get_services)):
    with internal_failure("Error increasing quantity"):
        svc.cart.increase(payload.user_id, payload.product_id)
    return {"message": "Quantity increased successfully"}


@router.post("/decrease-qty")
def decrease_qty(payload: UserProductInput, svc: Services = Depends(get_services)):
    with internal_failure("Error decreasing quantity"):
        outcome = svc.cart.decrease(payload.user_id, payload.product_id)
    if outcome == REMOVED:
        return {"message": "Product removed from cart"}
    return {"message": "Quantity decreased successfully"}


@router.post("/check-cart")
def check_cart(payload: UserProductInput, svc: Services = Depends(get_services)):
    with internal_failure("Error checking cart"):
        return {"inCart": svc.cart.contains(payload.user_id, payload.product_id)}


@router.post("/clear-cart")
def clear_cart(payload: UserInput, svc: Services = Depends(get_services)):
    with internal_failure("Error clearing cart"):
        svc.cart.clear(payload.user_id)
    return {"message": "Cart cleared successfully"}


# Orders

@router.post("/place-order")
def place_order(payload: PlaceOrderInput, svc: Services = Depends(get_services)):
    with internal_failure("Error ordering products"):
        svc.orders.place(
            payload.user_id,
            payload.products,
            payload.shipping_address,
            payload.total_price,
            payload.payment_method,
        )
    return {"message": "Order placed successfully"}


@router.get("/all-orders/{user_id}")
def all_orders(user_id: str, svc: Services = Depends(get_services)):
    with internal_failure("Error fetching orders"):
        return svc.orders.list(user_id)


@router.post("/cancel-order")
def cancel_order(payload: CancelOrderInput, svc: Services = Depends(get_services)):
    with internal_failure("Error cancelling order"):
        svc.orders.cancel(payload.order_id)
    return {"message": "Order cancelled successfully"}


def create_app(settings: Optional[Settings] = None, db=None, mailer=None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)
    if db is None:
        db = connect(settings)
    mailer = mailer or Mailer(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if hasattr(mailer, "shutdown"):
            mailer.shutdown()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    app.state.services = Services(db, settings, mailer) if db is not None else None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        if exc.status_code < 500:
            logger.info(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"{request.method} {request.url.path}: invalid request {exc.errors()}")
        return JSONResponse(status_code=400, content={"message": "Invalid request"})

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.PORT)
