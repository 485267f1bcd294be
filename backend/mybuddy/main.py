from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.logging import configure_logging
from .api.routes_search import router as search_router
from .api.routes_preferences import router as preferences_router
from .api.routes_config import router as config_router

configure_logging()
settings = get_settings()

app = FastAPI(title="MyBuddy Search API", version=settings.APP_VERSION)

# CORS:
# - In prod, FRONTEND_ORIGIN is required and we never fall back to "*".
# - In non-prod, "*" unless FRONTEND_ORIGIN narrows it (CORS_ALLOW_ALL_ORIGINS forces "*").
if settings.ENV.lower() == "prod":
    if not settings.FRONTEND_ORIGIN:
        raise RuntimeError(
            "FRONTEND_ORIGIN must be set in production – refusing to start with wide-open CORS."
        )
    origins = [
        o.strip()
        for o in settings.FRONTEND_ORIGIN.split(",")
        if o.strip()
    ]
else:
    if settings.CORS_ALLOW_ALL_ORIGINS:
        origins = ["*"]
    elif settings.FRONTEND_ORIGIN:
        origins = [
            o.strip()
            for o in settings.FRONTEND_ORIGIN.split(",")
            if o.strip()
        ]
    else:
        origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    allow_credentials=False,
)

app.include_router(search_router, prefix=settings.API_PREFIX)
app.include_router(preferences_router, prefix=settings.API_PREFIX)
app.include_router(config_router, prefix=settings.API_PREFIX)


@app.get("/health")
def health():
    return {"status": "ok"}
