from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from paydesk.core.config import settings
from paydesk.core.errors import LedgerError
from paydesk.core.logging import configure_logging, get_logger
from paydesk.db.mongo import connect_to_mongo, close_mongo_connection
from paydesk.api.v1.api import api_router

configure_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    yield
    await close_mongo_connection()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    logger.info("request_failed", path=request.url.path, error=exc.code, detail=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code}
    )

@app.get("/")
async def root():
    return {"message": "Welcome to Paydesk API"}

app.include_router(api_router, prefix=settings.API_V1_STR)
