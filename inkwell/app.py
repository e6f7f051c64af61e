"""
Inkwell - blog platform backend
Main FastAPI application
"""
import os
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from inkwell.api.router import router as api_router
from inkwell.core.logger import configure_app_logging, get_logger
from inkwell.core.middleware import (
    SecurityHeadersMiddleware,
    RequestLoggingMiddleware,
)
from inkwell.core.rate_limit import limiter

# Configure application logging
configure_app_logging(log_to_file=os.getenv("INKWELL_LOG_TO_FILE", "true").lower() == "true")

logger = get_logger(__name__)

DEBUG = os.getenv("INKWELL_DEBUG", "false").lower() == "true"
app = FastAPI(title="Inkwell", debug=DEBUG)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)

logger.info("Inkwell application initialized")


@app.get("/health")
def health():
    return {"status": "ok"}
