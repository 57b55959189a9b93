# backend/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import init_db
from exceptions import WarehouseAppError

# Router imports
from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.logs import router as logs_router
from routes.products import router as products_router
from routes.warehouse import router as warehouse_router
from routes.stock import router as stock_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialisation
init_db()

app = FastAPI(title="Warehouse App API", version="1.0.0")

# CORS: local dev frontends plus the deployed one from settings
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain errors map to their HTTP status with a stable error code
@app.exception_handler(WarehouseAppError)
def handle_domain_error(request: Request, exc: WarehouseAppError):
    logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Router registration
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(logs_router)
app.include_router(products_router)
app.include_router(warehouse_router)
app.include_router(stock_router, prefix="/stock")


@app.get("/")
def read_root():
    return {"message": "Warehouse App API is running"}
