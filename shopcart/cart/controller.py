from typing import Any

from fastapi import APIRouter, Body, status
from fastapi.responses import JSONResponse

from ..auth.service import CurrentUser
from ..database.core import DbSession
from .service import CartService

router = APIRouter(prefix="/user/cart", tags=["cart"])


@router.get("")
def get_cart(current_user: CurrentUser, db: DbSession):
    """Get user's cart"""
    lines = CartService.get_cart(db, current_user.user_id)
    return {"message": [line.model_dump() for line in lines]}


@router.post("")
def add_to_cart(current_user: CurrentUser, db: DbSession, payload: Any = Body(...)):
    """Add a product to the cart; repeated adds of one product merge into its line"""
    result = CartService.add_item(db, current_user.user_id, payload)
    if result.created:
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={"message": f"Cart with ID {result.cart_id} created successfully", "id": result.cart_id},
        )
    return {"message": "Cart updated successfully"}


@router.delete("")
def clear_cart(current_user: CurrentUser, db: DbSession):
    CartService.clear_cart(db, current_user.user_id)
    return {"message": "All carts are successfully deleted"}


@router.put("/{cart_id}")
def update_cart_line(cart_id: str, current_user: CurrentUser, db: DbSession, payload: Any = Body(...)):
    CartService.update_line(db, current_user.user_id, cart_id, payload)
    return {"message": f"Cart with ID {cart_id} updated successfully"}


@router.delete("/{cart_id}")
def remove_cart_line(cart_id: str, current_user: CurrentUser, db: DbSession):
    CartService.remove_line(db, current_user.user_id, cart_id)
    return {"message": f"Cart with ID {cart_id} deleted successfully"}
