from typing import Optional
from pathlib import Path
import logging
import os

from fastapi import FastAPI, Depends, HTTPException, Request, status, Query
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import select, delete, func, text
from starlette.exceptions import HTTPException as StarletteHTTPException

# ── local modules ───────────────────────────────────────────────────
from .db import database_url, ensure_table, get_db
from .errors import AgendaError
from .models import Event, Leader, new_id
from .schemas import (
    EventIn, EventOut, EventUpdate,
    LeaderIn, LeaderOut, LeaderUpdate,
    OkOut, ReorderIn,
)
# ────────────────────────────────────────────────────────────────────

logger = logging.getLogger(__name__)

app = FastAPI(title="Agenda API")

# ───────────────────────── CORS ─────────────────────────────────────
from fastapi.middleware.cors import CORSMiddleware

def _clean(s: str | None) -> str | None:
    return s.strip().rstrip("/") if s and s.strip() else None

FRONTEND_ORIGIN = _clean(os.getenv("FRONTEND_ORIGIN")) or "http://localhost:5173"
_raw_extra = os.getenv("EXTRA_CORS_ORIGINS", "")
EXTRA = [x for x in (_clean(p) for p in _raw_extra.split(",")) if x]
allow_origins = ["*"] if "*" in EXTRA else [o for o in {FRONTEND_ORIGIN, *EXTRA} if o]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
    max_age=86400,
)

# ───────────────────────── Logging ──────────────────────────────────
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def setup_logging(log_level: str | None = None) -> None:
    """Configure root logging once; LOG_LEVEL picks the level (default INFO)."""
    level_name = (log_level or os.getenv("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("agenda").setLevel(level)

# ───────────────────────── Error responses ──────────────────────────
METHOD_ORDER = ("GET", "POST", "PUT", "DELETE")

def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)

def allowed_methods(app: FastAPI, path: str) -> list[str]:
    """Every method some route registered for `path` answers to."""
    methods: set[str] = set()
    for route in app.router.routes:
        if isinstance(route, APIRoute) and route.path_regex.match(path):
            methods |= route.methods
    known = [m for m in METHOD_ORDER if m in methods]
    return known + sorted(methods.difference(METHOD_ORDER))

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(exc.headers or {})
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        headers["Allow"] = ",".join(allowed_methods(request.app, request.url.path))
        return _error(exc.status_code, "Method not allowed", headers)
    return _error(exc.status_code, str(exc.detail), headers or None)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())[1:])
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "; ".join(parts) or "Invalid request"
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return _error(status.HTTP_400_BAD_REQUEST, message)

@app.exception_handler(AgendaError)
async def agenda_error_handler(request: Request, exc: AgendaError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Server error")

@app.exception_handler(SQLAlchemyError)
async def db_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    message = str(getattr(exc, "orig", None) or exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message or "Server error")

# ───────────────────────── DB migrations (optional) ─────────────────
from alembic import command
from alembic.config import Config

def run_migrations() -> None:
    app_dir = Path(__file__).resolve().parent
    cfg = Config(str(app_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(app_dir / "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url().replace("%", "%%"))
    # leave logging to setup_logging()
    cfg.attributes["configure_logger"] = False
    command.upgrade(cfg, "head")

@app.on_event("startup")
def on_startup():
    setup_logging()
    if os.getenv("AUTO_MIGRATE") == "1":
        logger.info("AUTO_MIGRATE=1, upgrading schema to head")
        run_migrations()

# ───────────────────────── Lifecycle & health ───────────────────────
@app.get("/health")
def health_check():
    return {"status": "ok"}

@app.get("/")
def read_root():
    return {"message": "Agenda backend is running."}

@app.get("/dbcheck")
def dbcheck(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"db": "ok"}

# ───────────────────────── Table guards ─────────────────────────────
def events_db(db: Session = Depends(get_db)) -> Session:
    ensure_table(db, Event)
    return db

def leaders_db(db: Session = Depends(get_db)) -> Session:
    ensure_table(db, Leader)
    return db

def _rollback_quietly(db: Session) -> None:
    try:
        db.rollback()
    except SQLAlchemyError:
        # the first failure is the one the caller sees
        logger.exception("Rollback failed")

# ───────────────────────── Event CRUD ───────────────────────────────
def next_event_order(db: Session) -> int:
    current = db.execute(select(func.coalesce(func.max(Event.order), 0))).scalar_one()
    return int(current) + 1

@app.get("/api/events", response_model=list[EventOut])
def list_events(db: Session = Depends(events_db)):
    q = select(Event).order_by(Event.order.asc(), Event.date.asc(), Event.time.asc())
    return db.execute(q).scalars().all()

@app.post("/api/events", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventIn, db: Session = Depends(events_db)):
    order = payload.order if payload.order is not None else next_event_order(db)
    ev = Event(
        id=payload.id or new_id(),
        title=payload.title,
        date=payload.date,
        time=payload.time_value,
        location=payload.location,
        priority=payload.priority,
        attendees=list(payload.attendees),
        order=order,
    )
    db.add(ev)
    db.commit()
    db.refresh(ev)
    logger.info("Created event %s with order %s", ev.id, ev.order)
    return ev

@app.put("/api/events", response_model=EventOut)
def update_event(payload: EventUpdate, db: Session = Depends(events_db)):
    ev = db.get(Event, payload.id)
    if not ev:
        raise HTTPException(status_code=404, detail="Event not found")

    ev.title = payload.title
    ev.date = payload.date
    ev.time = payload.time_value
    ev.location = payload.location
    ev.priority = payload.priority
    ev.attendees = list(payload.attendees)
    if payload.order is not None:
        ev.order = payload.order

    db.commit()
    db.refresh(ev)
    return ev

@app.delete("/api/events", response_model=OkOut)
def delete_event(id: Optional[str] = Query(default=None), db: Session = Depends(events_db)):
    if not id:
        raise HTTPException(status_code=400, detail="Missing id")
    db.execute(delete(Event).where(Event.id == id))
    db.commit()
    logger.info("Deleted event %s", id)
    return {"ok": True}

# ───────────────────────── Reorder ──────────────────────────────────
@app.post("/api/reorder", response_model=OkOut)
def reorder_events(payload: ReorderIn, db: Session = Depends(events_db)):
    """
    Apply a batch of {id, order} pairs atomically.

    Every id must exist and appear once; otherwise nothing is written.
    """
    updates = payload.updates
    if not updates:
        raise HTTPException(status_code=400, detail="No updates provided")

    ids = [u.id for u in updates]
    if len(set(ids)) != len(ids):
        raise HTTPException(status_code=400, detail="Duplicate id in updates")

    try:
        rows = {ev.id: ev for ev in db.execute(select(Event).where(Event.id.in_(ids))).scalars()}
        missing = [i for i in ids if i not in rows]
        if missing:
            raise HTTPException(status_code=400, detail=f"Unknown event id: {', '.join(missing)}")
        for u in updates:
            rows[u.id].order = u.order
        db.commit()
    except Exception:
        _rollback_quietly(db)
        raise

    logger.info("Reordered %d events", len(updates))
    return {"ok": True}

# ───────────────────────── Leader CRUD ──────────────────────────────
@app.get("/api/leaders", response_model=list[LeaderOut])
def list_leaders(db: Session = Depends(leaders_db)):
    q = select(Leader).order_by(Leader.name.asc())
    return db.execute(q).scalars().all()

@app.post("/api/leaders", response_model=LeaderOut, status_code=status.HTTP_201_CREATED)
def create_leader(payload: LeaderIn, db: Session = Depends(leaders_db)):
    leader = Leader(
        id=payload.id or new_id(),
        name=payload.name,
        phone=payload.phone,
        ministries=list(payload.ministries),
        opt_in=bool(payload.opt_in),
    )
    db.add(leader)
    db.commit()
    db.refresh(leader)
    logger.info("Created leader %s", leader.id)
    return leader

@app.put("/api/leaders", response_model=LeaderOut)
def update_leader(payload: LeaderUpdate, db: Session = Depends(leaders_db)):
    leader = db.get(Leader, payload.id)
    if not leader:
        raise HTTPException(status_code=404, detail="Leader not found")

    leader.name = payload.name
    leader.phone = payload.phone
    leader.ministries = list(payload.ministries)
    if payload.opt_in is not None:
        leader.opt_in = payload.opt_in

    db.commit()
    db.refresh(leader)
    return leader

@app.delete("/api/leaders", response_model=OkOut)
def delete_leader(id: Optional[str] = Query(default=None), db: Session = Depends(leaders_db)):
    if not id:
        raise HTTPException(status_code=400, detail="Missing id")
    db.execute(delete(Leader).where(Leader.id == id))
    db.commit()
    logger.info("Deleted leader %s", id)
    return {"ok": True}
