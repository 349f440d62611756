import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stockbook import __version__
from stockbook.config import settings
from stockbook.database import engine
from stockbook.models import Base
from stockbook.routers import auth, users, inventory, sales, dashboard, realtime

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("stockbook")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1. CREACIÓN AUTOMÁTICA DE TABLAS
    Base.metadata.create_all(bind=engine)
    logger.info("Stockbook %s started (database: %s)", __version__, engine.url.render_as_string(hide_password=True))
    yield


app = FastAPI(
    title="Stockbook",
    description="Inventory, sales and user management API",
    version=__version__,
    lifespan=lifespan,
)

# 2. CONFIGURACIÓN DE CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 3. REGISTRO DE ROUTERS (API)
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(inventory.router, prefix="/api/inventory", tags=["Inventory"])
app.include_router(sales.router, prefix="/api/sales", tags=["Sales"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(realtime.router, tags=["Realtime"])


@app.get("/api/health")
def health():
    return {"success": True, "version": __version__}


# --- 4. MANEJO DE ERRORES ---
# El frontend lee `message` (o `error`) de cualquier respuesta fallida
def _error_response(status_code: int, message: str, headers=None, **extra) -> JSONResponse:
    content = {"success": False, "error": message, "message": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Resource not found"
    else:
        message = str(exc.detail)
    return _error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "msg": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Invalid request"
    if errors and errors[0]["field"]:
        message = f"{errors[0]['field']}: {message}"
    return _error_response(422, message, errors=errors)
