"""
FastAPI application initialization and configuration.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from errors import GatewayError
from .middleware import log_requests_middleware
from .endpoints import (
    health_router,
    models_router,
    metrics_router,
    chat_completions_router,
    anthropic_messages_router,
    embeddings_router,
)

logger = logging.getLogger(__name__)

ANTHROPIC_PATH_PREFIX = "/v1/messages"

# Create FastAPI app
app = FastAPI(title="Chat Gateway", version="1.0.0")

# Add middleware
app.middleware("http")(log_requests_middleware)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render gateway errors in the envelope of the surface that was called"""
    if request.url.path.startswith(ANTHROPIC_PATH_PREFIX):
        content = exc.to_anthropic_dict()
    else:
        content = exc.to_openai_dict()
    return JSONResponse(status_code=exc.status_code, content=content)


# Register routers
app.include_router(health_router)
app.include_router(models_router)
app.include_router(metrics_router)
app.include_router(chat_completions_router)
app.include_router(anthropic_messages_router)
app.include_router(embeddings_router)

logger.debug("FastAPI application initialized with all routers and middleware")
