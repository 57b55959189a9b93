# backend/routes/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, Role
from services.product_service import ProductService
from utils.audit import write_log, client_ip
from utils.tokenJWT import get_current_user, role_required
import schemas.product as product_schemas

router = APIRouter(prefix="/products", tags=["Products"])

# Catalogue changes are reserved for Admin / Manager
can_edit = role_required(Role.ADMIN, Role.MANAGER)


@router.get("", response_model=product_schemas.ProductList)
def list_products(
    category: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search in name, description and category"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = ProductService(db).list_products(category=category, q=q)
    return {"items": items, "total": len(items)}


@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ProductService(db).get_categories()


@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ProductService(db).get_product(product_id)


@router.post("", response_model=product_schemas.ProductOut, status_code=201)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_edit),
):
    product = ProductService(db).create_product(**payload.model_dump())
    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              resource_id=product.id, ip=client_ip(request), meta={"name": product.name})
    return product


@router.put("/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_edit),
):
    product = ProductService(db).update_product(product_id, **payload.model_dump())
    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              resource_id=product_id, ip=client_ip(request))
    return product


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_edit),
):
    ProductService(db).delete_product(product_id)
    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              resource_id=product_id, ip=client_ip(request))
