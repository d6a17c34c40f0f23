from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_settings
from core.deps import get_order_broadcaster
from core.exceptions import register_exception_handlers
from app.startup import configure_startup_logging, run_startup_checks

# ========== Orders ==========
from modules.orders.routes.order_routes import router as order_router
from modules.orders.routes.order_stream_routes import router as order_stream_router
from modules.orders.services.order_event_broadcaster import (
    OrderEventBroadcaster,
    order_event_broadcaster,
)

settings = get_settings()
configure_startup_logging(settings.log_level)

app = FastAPI(
    title="Order Relay - Point of Sale API",
    description="""
    Waiters submit orders, the kitchen display follows them live.

    ## Features

    * **Orders** - Create orders per table and move them through `new`, `preparing` and `ready`
    * **Live stream** - Server-Sent Events feed of every order change at `/api/stream`
    """,
    version="1.0.0",
)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(order_router)
app.include_router(order_stream_router)


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Validate configuration and prepare storage"""
    run_startup_checks(settings)


@app.on_event("shutdown")
async def shutdown_event():
    """Close every open order stream"""
    order_event_broadcaster.close_all()


@app.get("/health", tags=["Health"])
async def health(broadcaster: OrderEventBroadcaster = Depends(get_order_broadcaster)):
    return {"status": "ok", "subscribers": broadcaster.subscriber_count}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
