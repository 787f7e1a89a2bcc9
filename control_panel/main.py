# control_panel/main.py
import logging
from pathlib import Path
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Depends
from fastapi.templating import Jinja2Templates
from fastapi.responses import HTMLResponse, RedirectResponse
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware

# Configure logging
logging.basicConfig(level=logging.INFO)

from control_panel.api.v1.api import api_router
from control_panel.api.v1.dependencies import try_get_current_moderator
from control_panel.core.config import SECURITY_HEADERS, CSP_POLICY, IS_PRODUCTION
from control_panel.core.errors import StoreError
from control_panel.core.limiter import limiter, log_rate_limit_violation
from control_panel.db.mongodb_utils import connect_to_mongo, close_mongo_connection, get_store
from control_panel.db.store import RecordStore
from control_panel.schemas.user import ModeratorSession
from control_panel.services.moderation_session import (
    DashboardTab,
    display_cover,
    format_time,
    session_for,
    split_created,
)

logger = logging.getLogger(__name__)

TEMPLATE_DIRECTORY = Path(__file__).resolve().parent / "templates"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    app.state.limiter = limiter
    await connect_to_mongo()
    try:
        yield
    finally:
        await close_mongo_connection()


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    log_rate_limit_violation(request, str(exc.detail))
    return _rate_limit_exceeded_handler(request, exc)


app = FastAPI(
    title="NoLabel Control Panel",
    description="Moderation dashboard for submitted tracks.",
    version="1.0.0",
    lifespan=lifespan,
    exception_handlers={RateLimitExceeded: rate_limit_handler},
    docs_url="/docs" if not IS_PRODUCTION else None,
    redoc_url="/redoc" if not IS_PRODUCTION else None
)
app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)

templates = Jinja2Templates(directory=str(TEMPLATE_DIRECTORY))
templates.env.globals.update(display_cover=display_cover, format_time=format_time, split_created=split_created)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)

    for header, value in SECURITY_HEADERS.items():
        if value:
            response.headers[header] = value

    response.headers["Content-Security-Policy"] = CSP_POLICY

    if "server" in response.headers:
        del response.headers["server"]

    return response


app.include_router(api_router, prefix="/api/v1")


@app.get("/", response_class=HTMLResponse)
async def read_root(request: Request, moderator: Optional[ModeratorSession] = Depends(try_get_current_moderator)):
    """Login page. Moderators with a live session go straight to the dashboard."""
    if moderator:
        return RedirectResponse(url="/dashboard")
    return templates.TemplateResponse(request, "index.html", {})


@app.get("/dashboard", response_class=HTMLResponse)
async def read_dashboard(
    request: Request,
    tab: DashboardTab = DashboardTab.PENDING,
    store: RecordStore = Depends(get_store),
    moderator: Optional[ModeratorSession] = Depends(try_get_current_moderator),
):
    """Moderator dashboard for one tab of the catalog."""
    if not moderator:
        return RedirectResponse(url="/")

    session = session_for(moderator)
    session.select_tab(tab)
    try:
        tracks, stats = await session.load(store)
    except StoreError as e:
        logger.error(f"Error loading dashboard for {moderator.artist_name}: {e}")
        return templates.TemplateResponse(
            request, "500.html", {"message": f"Failed to load data: {e.message}"}, status_code=502
        )

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"moderator": moderator, "session": session, "tracks": tracks, "stats": stats, "tabs": list(DashboardTab)},
    )
