from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from qrmenu.middleware import RequestIdMiddleware
from qrmenu.db import Base, engine
from qrmenu.errors import ConfirmationRequired, MenuError, StoreError, ValidationError
from qrmenu.util.logger import MenuLogger
import qrmenu.models  # noqa: F401  (registers tables on Base.metadata)

from qrmenu.routers import auth, cart, checkout, menu, reservations

logger = MenuLogger("qrmenu")

app = FastAPI(title="QR Menu API", version="0.1.0")

@app.on_event("startup")
def init_db():
    Base.metadata.create_all(bind=engine)

# Middlewares
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(MenuError)
async def menu_error_handler(request: Request, exc: MenuError):
    body = {"detail": exc.message, "kind": exc.kind, "retry": exc.retry}
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    if isinstance(exc, ConfirmationRequired):
        body.update(line_id=exc.line_id, product_name=exc.product_name, quantity=exc.quantity)
    return JSONResponse(status_code=exc.status_code, content=body)

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path}: store failure: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Something went wrong on our side. Please try again.", "kind": "load_failed", "retry": True},
    )

app.include_router(auth.router)
app.include_router(menu.router)
app.include_router(cart.router)
app.include_router(checkout.router)
app.include_router(reservations.router)

@app.get("/healthz")
def healthz():
    return {"ok": True}
