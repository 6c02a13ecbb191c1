"""FastAPI entrypoint with the payments API and a lightweight admin dashboard."""

from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

import structlog
from fastapi import Depends, FastAPI, Form, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import errors, models
from .config import get_settings
from .database import SessionLocal, engine, get_db
from .logging_config import configure_logging
from .migrations import run_migrations
from .routers import auth, orders, payments, stats
from .seed import seed_demo_data
from .services import checkout, ledger
from .services.stats import collect_stats

settings = get_settings()
TEMPLATE_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
logger = structlog.get_logger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    problems = exc.errors()
    if not problems:
        return "Invalid request"
    first = problems[0]
    field = next((str(part) for part in reversed(first.get("loc", ())) if part != "body"), None)
    if field is None:
        return "Invalid request body"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging(settings.log_level, settings.use_json_logs())
    run_migrations(engine)
    if settings.seed_demo_data:
        with SessionLocal() as db:
            seed_demo_data(db)
    logger.info("api_started", environment=settings.environment, database=engine.url.render_as_string())
    yield


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(errors.StorefrontError)
    async def handle_storefront_error(_request: Request, exc: errors.StorefrontError):
        if exc.status_code >= 500:
            logger.error("request_failed", error=exc.message, kind=type(exc).__name__)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": _describe_validation_error(exc)})

    @app.get("/", tags=["System"])
    def root():
        return {"ok": True, "admin": "/admin", "docs": "/docs"}

    @app.get("/health", tags=["System"])
    def health_check():
        return {"ok": True, "environment": settings.environment}

    @app.get("/db-health", tags=["System"])
    def db_health(db: Session = Depends(get_db)):
        try:
            row = db.execute(text("SELECT 1 AS result")).first()
        except SQLAlchemyError as exc:
            return JSONResponse(status_code=500, content={"db": "down", "error": str(exc)})
        return {"db": "up", "result": row is not None}

    @app.get("/admin", response_class=HTMLResponse, tags=["Dashboard"])
    def dashboard(
        request: Request,
        flash: Optional[str] = None,
        level: str = "success",
        db: Session = Depends(get_db),
    ):
        summary = collect_stats(db, recent_limit=settings.recent_orders_limit)
        latest_orders = ledger.list_orders(db, limit=settings.default_page_size)

        orders_payload = [
            {
                "order_id": item.order_id,
                "customer_id": item.customer_id,
                "status": item.status,
                "total_amount": f"{item.total_amount:,.2f}",
                "created_at": item.created_at.strftime("%Y-%m-%d %H:%M"),
                "settleable": item.status == models.AUTHORIZED,
            }
            for item in latest_orders
        ]
        status_labels = list(models.ORDER_STATUSES)
        status_counts = [summary["totals"].get(value, 0) for value in models.ORDER_STATUSES]

        context = {
            "request": request,
            "orders": orders_payload,
            "stats": {
                "total": summary["totals"]["ALL"],
                "settled_total": f"${summary['settled_total']:,.2f}",
                "authorized": summary["totals"].get(models.AUTHORIZED, 0),
                "settled": summary["totals"].get(models.SETTLED, 0),
            },
            "chart": {"labels": status_labels, "counts": status_counts},
            "flash": flash,
            "flash_level": level,
            "now": datetime.now().strftime("%Y-%m-%d %H:%M"),
        }
        return templates.TemplateResponse(request, "dashboard.html", context)

    @app.post("/admin/orders/{order_id}/settle", tags=["Dashboard"])
    def settle_from_dashboard(
        order_id: str,
        amount: str = Form(...),
        db: Session = Depends(get_db),
    ):
        try:
            checkout.settle(db, order_id=order_id, amount=amount)
            query = {"flash": f"Order {order_id} settled successfully!", "level": "success"}
        except (errors.ValidationError, errors.NotFound, errors.InvalidState) as exc:
            query = {"flash": exc.message, "level": "error"}
        return RedirectResponse(url=f"/admin?{urlencode(query)}", status_code=status.HTTP_303_SEE_OTHER)

    app.include_router(orders.router)
    app.include_router(payments.router)
    app.include_router(stats.router)
    app.include_router(auth.router)

    return app


app = create_app()
