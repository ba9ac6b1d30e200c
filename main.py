from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.database import Base, SessionLocal, engine
from app.endpoints import access_request, interest, notification, opportunity, webhooks
from app.middleware.exceptions import global_exception_handler, http_exception_handler, validation_exception_handler
from app.middleware.logging import RequestLoggingMiddleware
from app.models import access_request as access_request_models, interest as interest_models  # noqa: F401
from app.models import notification as notification_models, opportunity as opportunity_models, user as user_models  # noqa: F401
from app.utils.service_registry import ServiceRegistry

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(access_request.router, prefix="/auth", tags=["Access Requests"])
app.include_router(notification.router, prefix="/notifications", tags=["Notifications"])
app.include_router(interest.router, prefix="/opportunities", tags=["Opportunity Interest"])
app.include_router(opportunity.router, prefix="/opportunities", tags=["Opportunities"])
app.include_router(webhooks.router, tags=["Webhooks"])

@app.on_event("startup")
async def startup_event():
    Base.metadata.create_all(bind=engine)
    if getattr(app.state, "services", None) is None:
        app.state.services = ServiceRegistry.build(settings, SessionLocal)

@app.on_event("shutdown")
async def shutdown_event():
    services = getattr(app.state, "services", None)
    if services is not None:
        await services.close()
        app.state.services = None

if __name__ == "__main__":
    import uvicorn
    from app.core.logging import configure_logging

    configure_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)
