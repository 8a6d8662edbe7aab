from fastapi import FastAPI, Depends, HTTPException, Request, status, Security
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_swagger_ui_html, get_redoc_html
from fastapi.openapi.utils import get_openapi
from fastapi.encoders import jsonable_encoder
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import secrets

import config
from app.database.base import get_db
from app.services.errors import PlatformError
from app.api.users import router as users_router
from app.api.startups import router as startups_router
from app.api.stakeholders import router as stakeholders_router
from app.api.connections import router as connections_router
from app.api.notifications import router as notifications_router
from app.api.messages import router as messages_router
from app.api.search import router as search_router
from app.api.companies import router as companies_router
from app.api.dashboard import router as dashboard_router
from app.api.research import router as research_router

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_TITLE = "MedTech Connect API"

app = FastAPI(title=API_TITLE, docs_url=None, redoc_url=None, openapi_url=None)

# Configure CORS using settings from config.py
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=config.CORS_ALLOW_CREDENTIALS,
    allow_methods=config.CORS_ALLOW_METHODS,
    allow_headers=config.CORS_ALLOW_HEADERS,
    expose_headers=config.CORS_EXPOSE_HEADERS,
    max_age=config.CORS_MAX_AGE
)


# Error responses

@app.exception_handler(PlatformError)
async def platform_error_handler(request: Request, exc: PlatformError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation error", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


# HTTP Basic security scheme for the API docs
security = HTTPBasic()


def get_current_username(credentials: HTTPBasicCredentials = Security(security)):
    correct_username = secrets.compare_digest(credentials.username, config.DOCS_USERNAME)
    correct_password = secrets.compare_digest(credentials.password, config.DOCS_PASSWORD)
    # Docs stay closed until a password is configured
    if not (config.DOCS_PASSWORD and correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


# Custom OpenAPI route that requires authentication
@app.get("/openapi.json", include_in_schema=False)
async def get_open_api_endpoint(username: str = Depends(get_current_username)):
    return get_openapi(
        title=API_TITLE,
        version="1.0.0",
        description="API connecting MedTech startups with stakeholders",
        routes=app.routes,
    )


# Custom Swagger UI route that requires authentication
@app.get("/docs", include_in_schema=False)
async def get_documentation(username: str = Depends(get_current_username)):
    return get_swagger_ui_html(openapi_url="/openapi.json", title=API_TITLE)


# Custom Redoc route that requires authentication
@app.get("/redoc", include_in_schema=False)
async def get_redoc_documentation(username: str = Depends(get_current_username)):
    return get_redoc_html(openapi_url="/openapi.json", title=API_TITLE)


# Mount the routers
app.include_router(users_router, prefix="/api/users", tags=["users"])
app.include_router(startups_router, prefix="/api/startups", tags=["startups"])
app.include_router(stakeholders_router, prefix="/api/stakeholders", tags=["stakeholders"])
app.include_router(connections_router, prefix="/api/connections", tags=["connections"])
app.include_router(notifications_router, prefix="/api/notifications", tags=["notifications"])
app.include_router(messages_router, prefix="/api/messages", tags=["messages"])
app.include_router(search_router, prefix="/api/search", tags=["search"])
app.include_router(companies_router, prefix="/api/companies", tags=["companies"])
app.include_router(dashboard_router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(research_router, prefix="/api/research", tags=["research"])


@app.get("/")
async def read_root():
    return {"message": "MedTech Connect API"}


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unreachable"},
        )
    return {"status": "healthy", "database": "reachable"}
