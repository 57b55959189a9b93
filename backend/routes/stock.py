# backend/routes/stock.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from models.stock import TransactionType
from models.users import User, Role
from services.stock_service import StockService
from utils.audit import write_log, client_ip
from utils.tokenJWT import get_current_user, role_required
import schemas.stock as stock_schemas

router = APIRouter(tags=["Stock"])

# Structural changes (create/delete items, adjustments) need Admin or Manager
can_manage = role_required(Role.ADMIN, Role.MANAGER)
admin_only = role_required(Role.ADMIN)


def _tx_response(db, current_user, request, action, tx):
    write_log(
        db, user_id=current_user.id, action=action, resource="stock", resource_id=tx.id,
        ip=client_ip(request),
        meta={"product_id": tx.product_id, "warehouse_id": tx.warehouse_id, "quantity": tx.quantity},
    )
    return stock_schemas.StockTransactionResponse.from_transaction(tx)


# ---- Stock items ----

@router.get("/items", response_model=List[stock_schemas.StockItemResponse])
def list_stock_items(
    product_id: Optional[int] = Query(None),
    warehouse_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = StockService(db).list_stock_items(product_id=product_id, warehouse_id=warehouse_id)
    return [stock_schemas.StockItemResponse.from_item(i) for i in items]


@router.get("/items/{item_id}", response_model=stock_schemas.StockItemResponse)
def get_stock_item(item_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return stock_schemas.StockItemResponse.from_item(StockService(db).get_stock_item(item_id))


@router.post("/items", response_model=stock_schemas.StockItemResponse, status_code=201)
def create_stock_item(
    payload: stock_schemas.StockItemCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    service = StockService(db)
    item = service.create_stock_item(payload.product_id, payload.warehouse_id, payload.quantity)
    write_log(db, user_id=current_user.id, action="STOCK_ITEM_CREATE", resource="stock",
              resource_id=item.id, ip=client_ip(request), meta=payload.model_dump())
    return stock_schemas.StockItemResponse.from_item(service.get_stock_item(item.id))


@router.delete("/items/{item_id}", status_code=204)
def delete_stock_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    StockService(db).delete_stock_item(item_id)
    write_log(db, user_id=current_user.id, action="STOCK_ITEM_DELETE", resource="stock",
              resource_id=item_id, ip=client_ip(request))


@router.post("/items/{item_id}/add", response_model=stock_schemas.StockTransactionResponse)
def add_stock(
    item_id: int,
    payload: stock_schemas.StockAmount,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tx = StockService(db).add_stock(item_id, payload.amount, current_user.id, payload.reason)
    return _tx_response(db, current_user, request, "STOCK_IMPORT", tx)


@router.post("/items/{item_id}/remove", response_model=stock_schemas.StockTransactionResponse)
def remove_stock(
    item_id: int,
    payload: stock_schemas.StockAmount,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tx = StockService(db).remove_stock(item_id, payload.amount, current_user.id, payload.reason)
    return _tx_response(db, current_user, request, "STOCK_EXPORT", tx)


@router.put("/items/{item_id}/quantity", response_model=stock_schemas.StockTransactionResponse)
def set_stock_quantity(
    item_id: int,
    payload: stock_schemas.StockQuantity,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    tx = StockService(db).set_stock_quantity(item_id, payload.quantity, current_user.id, payload.reason)
    return _tx_response(db, current_user, request, "STOCK_ADJUSTMENT", tx)


# ---- Business operations ----

@router.post("/import", response_model=stock_schemas.StockTransactionResponse, status_code=201)
def import_stock(
    payload: stock_schemas.StockMovementCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tx = StockService(db).import_stock(
        payload.product_id, payload.warehouse_id, payload.quantity, current_user.id, payload.reason
    )
    return _tx_response(db, current_user, request, "STOCK_IMPORT", tx)


@router.post("/export", response_model=stock_schemas.StockTransactionResponse, status_code=201)
def export_stock(
    payload: stock_schemas.StockMovementCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tx = StockService(db).export_stock(
        payload.product_id, payload.warehouse_id, payload.quantity, current_user.id, payload.reason
    )
    return _tx_response(db, current_user, request, "STOCK_EXPORT", tx)


@router.post("/adjust", response_model=stock_schemas.StockTransactionResponse, status_code=201)
def adjust_stock(
    payload: stock_schemas.StockAdjustmentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    tx = StockService(db).adjust_stock(
        payload.product_id, payload.warehouse_id, payload.quantity, current_user.id, payload.reason
    )
    return _tx_response(db, current_user, request, "STOCK_ADJUSTMENT", tx)


# ---- Queries ----

@router.get("/available", response_model=stock_schemas.StockAvailability)
def get_available_stock(
    product_id: int = Query(...),
    warehouse_id: int = Query(...),
    required: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = StockService(db)
    available = service.get_available_stock(product_id, warehouse_id)
    result = {"product_id": product_id, "warehouse_id": warehouse_id, "available": available}
    if required is not None:
        result.update(required=required, sufficient=service.has_sufficient_stock(product_id, warehouse_id, required))
    return result


@router.get("/low", response_model=List[stock_schemas.StockItemResponse])
def get_low_stock(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [stock_schemas.StockItemResponse.from_item(i) for i in StockService(db).get_low_stock_items()]


@router.get("/over", response_model=List[stock_schemas.StockItemResponse])
def get_over_stock(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [stock_schemas.StockItemResponse.from_item(i) for i in StockService(db).get_over_stock_items()]


# ---- Transactions ----

@router.get("/transactions", response_model=stock_schemas.StockTransactionPage)
def list_transactions(
    product_id: Optional[int] = Query(None),
    warehouse_id: Optional[int] = Query(None),
    user_id: Optional[int] = Query(None),
    type: Optional[TransactionType] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = StockService(db).list_transactions(
        product_id=product_id, warehouse_id=warehouse_id, user_id=user_id, type=type,
        date_from=date_from, date_to=date_to, page=page, page_size=page_size,
    )
    return {
        "items": [stock_schemas.StockTransactionResponse.from_transaction(t) for t in items],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.get("/transactions/{transaction_id}", response_model=stock_schemas.StockTransactionResponse)
def get_transaction(transaction_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return stock_schemas.StockTransactionResponse.from_transaction(StockService(db).get_transaction(transaction_id))


@router.patch("/transactions/{transaction_id}", response_model=stock_schemas.StockTransactionResponse)
def amend_transaction(
    transaction_id: int,
    payload: stock_schemas.StockTransactionAmend,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    tx = StockService(db).amend_transaction(transaction_id, payload.reason, payload.quantity)
    return _tx_response(db, current_user, request, "STOCK_TRANSACTION_AMEND", tx)
