from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from scentvend.errors import KioskError
from scentvend.routers import admin_dashboard, admin_products, admin_slots, auth, orders, payments, products

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="ScentVend Kiosk API")


@app.on_event("startup")
def on_startup():
    # Ensure all DB tables exist after all models are imported
    from scentvend.models.base import Base, SessionLocal, engine
    import scentvend.models.product  # register Product model
    import scentvend.models.order  # register Order/OrderItem models
    import scentvend.models.slot  # register SlotAssignment/SlotUsage models
    import scentvend.models.admin_session  # register AdminSession model
    import scentvend.models.sales  # register SalesSummary/ProductSales models
    from scentvend.services.sessions import purge_expired

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        removed = purge_expired(db)
        if removed:
            logger.info("Purged %s expired admin sessions", removed)
    finally:
        db.close()


@app.exception_handler(KioskError)
async def kiosk_error_handler(request: Request, exc: KioskError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# CORS configuration for the kiosk and admin frontends
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(payments.router, prefix="/api/payments", tags=["payments"])
app.include_router(auth.router, prefix="/api/admin", tags=["admin-auth"])
app.include_router(admin_products.router, prefix="/api/admin/products", tags=["admin-products"])
app.include_router(orders.admin_router, prefix="/api/admin/orders", tags=["admin-orders"])
app.include_router(admin_slots.router, prefix="/api/admin", tags=["admin-slots"])
app.include_router(admin_dashboard.router, prefix="/api/admin", tags=["admin-dashboard"])


# --- Entry point for local runs ---
if __name__ == "__main__":
    import uvicorn, os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("scentvend.main:app", host="0.0.0.0", port=port, reload=False)
