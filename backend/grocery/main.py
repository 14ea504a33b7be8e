import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from grocery import __version__
from grocery.api import products, categories, inventory, sales, orders
from grocery.core.config import settings
from grocery.core.exceptions import GroceryError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Grocery storefront and back-office: catalogue, inventory and walk-in sales",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GroceryError)
async def grocery_error_handler(request: Request, exc: GroceryError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Routers
app.include_router(products.router)
app.include_router(categories.router)
app.include_router(inventory.router)
app.include_router(sales.router)
app.include_router(orders.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": __version__}
