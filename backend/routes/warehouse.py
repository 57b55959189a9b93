# backend/routes/warehouse.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, Role
from services.stock_service import StockService
from services.warehouse_service import WarehouseService
from utils.audit import write_log, client_ip
from utils.tokenJWT import get_current_user, role_required
import schemas.warehouse as warehouse_schemas
import schemas.stock as stock_schemas

router = APIRouter(prefix="/warehouses", tags=["Warehouses"])

can_edit = role_required(Role.ADMIN, Role.MANAGER)


@router.get("", response_model=warehouse_schemas.WarehouseList)
def list_warehouses(
    q: Optional[str] = Query(None, description="Search in name and address"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = WarehouseService(db).list_warehouses(q=q)
    return {"items": items, "total": len(items)}


@router.get("/{warehouse_id}", response_model=warehouse_schemas.WarehouseOut)
def get_warehouse(warehouse_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return WarehouseService(db).get_warehouse(warehouse_id)


# Current stock levels held in the warehouse
@router.get("/{warehouse_id}/stock", response_model=List[stock_schemas.StockItemResponse])
def get_warehouse_stock(warehouse_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    items = WarehouseService(db).get_warehouse_stock(warehouse_id)
    return [stock_schemas.StockItemResponse.from_item(i) for i in items]


@router.get("/{warehouse_id}/summary", response_model=warehouse_schemas.WarehouseSummary)
def get_warehouse_summary(warehouse_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return StockService(db).get_stock_summary_by_warehouse(warehouse_id)


@router.post("", response_model=warehouse_schemas.WarehouseOut, status_code=201)
def create_warehouse(
    payload: warehouse_schemas.WarehouseCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_edit),
):
    warehouse = WarehouseService(db).create_warehouse(payload.name, payload.address)
    write_log(db, user_id=current_user.id, action="WAREHOUSE_CREATE", resource="warehouses",
              resource_id=warehouse.id, ip=client_ip(request), meta={"name": warehouse.name})
    return warehouse


@router.put("/{warehouse_id}", response_model=warehouse_schemas.WarehouseOut)
def update_warehouse(
    warehouse_id: int,
    payload: warehouse_schemas.WarehouseUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_edit),
):
    warehouse = WarehouseService(db).update_warehouse(warehouse_id, payload.name, payload.address)
    write_log(db, user_id=current_user.id, action="WAREHOUSE_UPDATE", resource="warehouses",
              resource_id=warehouse_id, ip=client_ip(request))
    return warehouse


@router.delete("/{warehouse_id}", status_code=204)
def delete_warehouse(
    warehouse_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_edit),
):
    WarehouseService(db).delete_warehouse(warehouse_id)
    write_log(db, user_id=current_user.id, action="WAREHOUSE_DELETE", resource="warehouses",
              resource_id=warehouse_id, ip=client_ip(request))
