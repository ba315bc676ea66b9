from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from craftopia import __version__
from craftopia.auth.security import set_bcrypt_rounds
from craftopia.config import Config, load_config
from craftopia.db import Database, get_database, init_db
from craftopia.media.cloudinary import CloudinaryClient
from craftopia.util.response import success_response
from craftopia.util.time import utcnow_iso

from . import auth_routes, category_routes, decor_routes, user_routes
from .errors import install_error_handlers


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


ENDPOINTS = {
    "auth": "/api/auth",
    "users": "/api/users",
    "categories": "/api/categories",
    "decors": "/api/decors",
}


def create_app(
    cfg: Optional[Config] = None,
    db: Optional[Database] = None,
    media: Optional[CloudinaryClient] = None,
) -> FastAPI:
    """Build the API.

    `db` and `media` are injected by tests; otherwise they are built from `cfg`.
    The app only connects / creates indexes on startup for a database it owns.
    """
    cfg = cfg or load_config()
    if not (cfg.JWT_SECRET or "").strip():
        raise RuntimeError("JWT_SECRET must not be blank")
    set_bcrypt_rounds(cfg.BCRYPT_ROUNDS)

    owns_db = db is None
    app = FastAPI(title="Craftopia API", version=__version__, docs_url="/api/docs", openapi_url="/api/openapi.json")
    app.state.cfg = cfg
    app.state.db = db if db is not None else get_database(cfg)
    app.state.media = media if media is not None else CloudinaryClient.from_config(cfg)

    # Browser frontends (Vite :5173 / CRA :3000) send the refresh cookie cross-origin.
    origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )

    install_error_handlers(app, cfg)

    api = APIRouter(prefix="/api")

    @api.get("/health")
    def health() -> Dict[str, Any]:
        return success_response(
            "Craftopia API is running",
            {
                "timestamp": utcnow_iso(),
                "environment": cfg.NODE_ENV,
                "version": __version__,
                "database": "connected" if app.state.db.ping() else "disconnected",
            },
        )

    @api.get("")
    def api_index() -> Dict[str, Any]:
        return success_response(
            "Welcome to Craftopia API",
            {"version": __version__, "documentation": "/api/docs", "endpoints": ENDPOINTS},
        )

    api.include_router(auth_routes.router)
    api.include_router(user_routes.router)
    api.include_router(category_routes.router)
    api.include_router(decor_routes.router)
    app.include_router(api)

    @app.get("/")
    def root() -> Dict[str, Any]:
        return success_response(
            "Welcome to Craftopia Backend API",
            {"version": __version__, "documentation": "/api", "environment": cfg.NODE_ENV},
        )

    @app.on_event("startup")
    def _on_startup() -> None:
        if owns_db:
            app.state.db.connect()
            init_db(app.state.db)
        if not app.state.media.enabled:
            _debug("Cloudinary credentials missing; image uploads will fail")
        _debug(f"Craftopia API {__version__} ready ({cfg.NODE_ENV})")

    @app.on_event("shutdown")
    def _on_shutdown() -> None:
        if owns_db:
            app.state.db.close()

    return app
