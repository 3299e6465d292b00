"""FastAPI application entry point."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from pydantic_core import ValidationError as PydanticCoreValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from order_gate.api.routes import health, validations
from order_gate.core.error_handlers import (
    handle_app_error,
    handle_http_error,
    handle_pydantic_error,
    handle_unknown_error,
    handle_validation_error,
)
from order_gate.core.exceptions import BaseError
from order_gate.core.lifespan import lifespan
from order_gate.core.logging_config import configure_structured_logging
from order_gate.core.middleware import trace_id_middleware
from order_gate.core.settings import app_settings
from order_gate.core.validation import validate_all_settings

# Configure logging
configure_structured_logging(level=app_settings.LOG_LEVEL, json_format=app_settings.LOG_JSON)
logger = logging.getLogger(__name__)

# Validate environment before starting application
validate_all_settings()

# Initialize FastAPI app
app = FastAPI(
    title="Order Gate Validation API",
    version=app_settings.APP_VERSION,
    description="Gates access to the order flow behind customer, restaurant and delivery-zone checks",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# 1. Register Middleware
app.middleware("http")(trace_id_middleware)

# 2. Register Exception Handlers
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(PydanticCoreValidationError, handle_pydantic_error)
app.add_exception_handler(StarletteHTTPException, handle_http_error)
app.add_exception_handler(BaseError, handle_app_error)
app.add_exception_handler(Exception, handle_unknown_error)

# Routes
app.include_router(health.router)
app.include_router(validations.router)
