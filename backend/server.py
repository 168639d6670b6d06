"""
OGCS CRM - API Backend
Leads, site visits, quotations, daily reports, admin dashboard.

Start with:
    uvicorn server:app --host 0.0.0.0 --port 8001 --reload
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
import logging

from config import db, CORS_ORIGINS, LOG_LEVEL
from services.errors import CRMError

# Logging configuration
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("ogcs")

app = FastAPI(
    title="OGCS CRM",
    description="Field sales CRM: leads, visits, quotations",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== ERRORS ====================
# Every failure is rendered as {"message": ...}

@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


def validation_message(error: dict) -> str:
    """Validator messages are shown as written, schema errors prefixed by the field"""
    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and ctx.get("error"):
        return str(ctx["error"])
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field}: {error.get('msg')}" if field else error.get("msg", "Invalid request")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = validation_message(errors[0]) if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Server error"})


# ==================== ROUTES ====================

from routes import auth, leads, visits, quotes, daily_reports, admin

# Routes under /api
app.include_router(auth.router, prefix="/api")
app.include_router(leads.router, prefix="/api")
app.include_router(visits.router, prefix="/api")
app.include_router(quotes.router, prefix="/api")
app.include_router(daily_reports.router, prefix="/api")
app.include_router(admin.router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": "OGCS CRM API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


# ==================== STARTUP ====================

async def create_indexes():
    """MongoDB indexes. The two partial unique indexes on leads enforce dedup."""
    await db.users.create_index("email", unique=True)
    await db.users.create_index("id", unique=True)
    await db.sessions.create_index("token")
    await db.sessions.create_index("expiresAt")

    await db.leads.create_index("id", unique=True)
    await db.leads.create_index(
        [("ownerId", 1), ("normalizedPhone", 1)],
        unique=True,
        partialFilterExpression={"normalizedPhone": {"$gt": ""}},
        name="owner_phone_unique"
    )
    await db.leads.create_index(
        [("ownerId", 1), ("email", 1)],
        unique=True,
        partialFilterExpression={"email": {"$gt": ""}},
        name="owner_email_unique"
    )
    await db.leads.create_index([("ownerId", 1), ("followUpDate", 1)])
    await db.leads.create_index([("ownerId", 1), ("createdAt", -1)])

    await db.visits.create_index("id", unique=True)
    await db.visits.create_index([("userId", 1), ("visitedAt", -1)])
    await db.visits.create_index([("location", "2dsphere")])

    await db.quotes.create_index("id", unique=True)
    await db.quotes.create_index([("salesExecutive", 1), ("createdAt", -1)])
    await db.quotes.create_index("status")

    await db.daily_reports.create_index("createdAt")
    await db.activity_logs.create_index("createdAt")
    await db.activity_logs.create_index([("leadId", 1), ("createdAt", -1)])
    await db.activity_logs.create_index([("visitId", 1), ("createdAt", -1)])


@app.on_event("startup")
async def startup():
    logger.info("OGCS CRM starting")
    await create_indexes()
    logger.info("MongoDB indexes created")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
