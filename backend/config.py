import os
from dotenv import load_dotenv

# Load environment variables from a local .env file when present
load_dotenv()

# Environment detection (set this to False in production)
DEBUG = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./medtech_connect.db")

# Hosted auth provider (Clerk)
CLERK_SECRET_KEY = os.getenv("CLERK_SECRET_KEY", "")
CLERK_API_URL = os.getenv("CLERK_API_URL", "https://api.clerk.com/v1")
CLERK_JWKS_URL = os.getenv("CLERK_JWKS_URL", "")
CLERK_ISSUER = os.getenv("CLERK_ISSUER", "")

# Hosted notifications (Knock)
KNOCK_SECRET_API_KEY = os.getenv("KNOCK_SECRET_API_KEY", "")
KNOCK_API_URL = os.getenv("KNOCK_API_URL", "https://api.knock.app/v1")
KNOCK_CONNECTION_WORKFLOW = os.getenv("KNOCK_CONNECTION_WORKFLOW", "startup-connection-request")

# NIH RePORTER grants search
NIH_REPORTER_BASE_URL = os.getenv("NIH_REPORTER_BASE_URL", "https://api.reporter.nih.gov/v2")
NIH_RATE_LIMIT_SECONDS = float(os.getenv("NIH_RATE_LIMIT_SECONDS", "1.0"))  # NIH asks for at most 1 request/second

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

# API docs credentials (HTTP Basic)
DOCS_USERNAME = os.getenv("DOCS_USERNAME", "admin")
DOCS_PASSWORD = os.getenv("DOCS_PASSWORD", "")

# CORS Configuration
if DEBUG:
    # Development environment
    CORS_ORIGINS = [
        "http://localhost:3000",     # Next.js development server
        "http://localhost:8080",
    ]
else:
    # Production environment
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "https://medtech-connect.vercel.app").split(",")
        if origin.strip()
    ]

CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"]
CORS_ALLOW_HEADERS = ["*"]
CORS_EXPOSE_HEADERS = [
    "Content-Length",
    "Content-Range"
]
CORS_MAX_AGE = 600  # How long the results of a preflight request can be cached (in seconds)
