# shopcart/products/controller.py
from typing import List, Optional

from fastapi import APIRouter, Query, status

from ..auth.service import CurrentUser
from ..database.core import DbSession
from . import models
from .service import ProductFilterService, ProductService

router = APIRouter(prefix="/product", tags=["product"])


# Filter routes are declared ahead of /{product_id} so "price" and "keyword" are not read as ids
@router.get("/price", response_model=List[models.ProductResponse])
def get_products_by_price_range(
    db: DbSession,
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
):
    return ProductFilterService.filter_by_price_range(db, min_price, max_price)


@router.get("/price/{price}", response_model=List[models.ProductResponse])
def get_products_by_price(price: str, db: DbSession):
    return ProductFilterService.filter_by_price(db, price)


@router.get("/keyword", response_model=List[models.ProductResponse])
def get_products_by_keyword(db: DbSession, keyword: str = ""):
    return ProductFilterService.search_by_keyword(db, keyword)


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_product(product: models.ProductCreate, current_user: CurrentUser, db: DbSession):
    product_id = ProductService.create_product(db, product)
    return {"message": "Product created successfully", "id": product_id}


@router.get("/{product_id}", response_model=models.ProductResponse)
def get_product(product_id: str, db: DbSession):
    return ProductService.get_product(db, product_id)


@router.put("/{product_id}")
def update_product(product_id: str, changes: models.ProductUpdate, current_user: CurrentUser, db: DbSession):
    ProductService.update_product(db, product_id, changes)
    return {"message": "Product updated successfully"}


@router.delete("/{product_id}")
def delete_product(product_id: str, current_user: CurrentUser, db: DbSession):
    ProductService.delete_product(db, product_id)
    return {"message": "Product deleted successfully"}
