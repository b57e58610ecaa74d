"""FastAPI companion service for the Family Organiser."""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel

import settings
from auth.login import LoginController, RegistrationController
from auth.session import FileSessionStore, SessionManager
from backend.api_client import BackendClient
from backend.errors import (
    AuthError,
    AuthorizationError,
    InvalidCredentialsError,
    LoginLockedError,
    NetworkError,
    ValidationError,
)
from backend.schemas import EventDraft, EventRecord, format_time
from dashboard.controller import DashboardController
from maps.map_view import MapView
from schedule.calendar_grid import DayCell
from schedule.formatting import format_long_date, format_time_range

settings.configure_logging()

app = FastAPI(
    title="Family Organiser API",
    description="Local companion API for family event scheduling",
    version="1.0.0",
)

# Thread pool for blocking geocoding lookups
executor = ThreadPoolExecutor(max_workers=4)

_sessions = SessionManager(FileSessionStore(settings.SESSION_FILE))
_client = BackendClient()
_login = LoginController(_client, _sessions)


def get_sessions() -> SessionManager:
    return _sessions


def get_client() -> BackendClient:
    return _client


def get_login_controller() -> LoginController:
    return _login


def get_dashboard(
    client: BackendClient = Depends(get_client),
    sessions: SessionManager = Depends(get_sessions),
) -> DashboardController:
    dashboard = DashboardController(client, sessions)
    try:
        dashboard.mount()
    except AuthError as exc:
        raise HTTPException(status_code=401, detail=exc.user_message)
    except (NetworkError, ValidationError) as exc:
        raise HTTPException(status_code=502, detail=exc.user_message)
    return dashboard


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: str
    version: str


class LoginRequest(BaseModel):
    username: str
    password: str
    family_id: str


class LoginResponse(BaseModel):
    success: bool
    username: str
    userrole: str
    userfamily: str


class RegisterRequest(BaseModel):
    username: str
    password: str
    family_id: Optional[str] = None  # omitted to start a new family


class RegisterResponse(BaseModel):
    success: bool
    family_id: str
    new_family: bool
    message: str


class EventRequest(BaseModel):
    """Editable event fields; dates ``YYYY-MM-DD`` and times ``HH:MM``."""
    title: str
    date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: str = ""
    required_items: str = ""

    def to_draft(self) -> EventDraft:
        return EventDraft(
            title=self.title,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            location=self.location,
            required_items=self.required_items,
        )


class EventModel(BaseModel):
    """Event card as shown on the dashboard."""
    id: str
    title: str
    date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: str
    required_items: str
    organiser: str
    can_modify: bool = False
    display_date: str
    display_time: str


class EventListResponse(BaseModel):
    username: str
    family_id: str
    search: str
    total_upcoming: int
    events: List[EventModel]


class CalendarCellModel(BaseModel):
    day: Optional[int] = None
    date: Optional[str] = None
    event_count: int = 0
    is_today: bool = False
    is_selected: bool = False


class CalendarResponse(BaseModel):
    year: int
    month: int
    title: str
    day_names: List[str]
    cells: List[CalendarCellModel]
    selected_date: Optional[str] = None
    selected_events: List[EventModel]


class MapResponse(BaseModel):
    event: EventModel
    state: str
    error: Optional[str] = None
    map: Optional[Dict] = None
    links: Dict[str, str]


def _event_model(event: EventRecord, dashboard: Optional[DashboardController] = None) -> EventModel:
    return EventModel(
        id=event.id,
        title=event.title,
        date=event.date.isoformat(),
        start_time=format_time(event.start_time) or None,
        end_time=format_time(event.end_time) or None,
        location=event.location,
        required_items=event.required_items,
        organiser=event.organiser,
        can_modify=bool(dashboard and dashboard.can_modify(event)),
        display_date=format_long_date(event.date),
        display_time=format_time_range(event.start_time, event.end_time),
    )


def _cell_model(cell: DayCell) -> CalendarCellModel:
    return CalendarCellModel(
        day=cell.day,
        date=cell.date.isoformat() if cell.date else None,
        event_count=len(cell.events),
        is_today=cell.is_today,
        is_selected=cell.is_selected,
    )


def _event_list(dashboard: DashboardController) -> EventListResponse:
    return EventListResponse(
        username=dashboard.session.username,
        family_id=dashboard.session.userfamily,
        search=dashboard.search_term,
        total_upcoming=len(dashboard.events),
        events=[_event_model(e, dashboard) for e in dashboard.visible_events],
    )


def _draft(request: EventRequest) -> EventDraft:
    try:
        return request.to_draft()
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version="1.0.0"
    )


@app.post("/login", response_model=LoginResponse)
def login(
    request: LoginRequest,
    controller: LoginController = Depends(get_login_controller),
):
    try:
        session = controller.login(request.username, request.password, request.family_id)
    except LoginLockedError as exc:
        raise HTTPException(
            status_code=423,
            detail=exc.user_message,
            headers={"Retry-After": str(int(exc.retry_after) + 1)},
        )
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=exc.user_message)
    except NetworkError as exc:
        raise HTTPException(status_code=502, detail=exc.user_message)
    return LoginResponse(
        success=True,
        username=session.username,
        userrole=session.userrole,
        userfamily=session.userfamily,
    )


@app.post("/register", response_model=RegisterResponse)
def register(request: RegisterRequest, client: BackendClient = Depends(get_client)):
    try:
        result = RegistrationController(client).register(
            request.username, request.password, request.family_id
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors)
    except NetworkError as exc:
        raise HTTPException(status_code=502, detail=exc.user_message)
    return RegisterResponse(
        success=True,
        family_id=result.family_id,
        new_family=result.new_family,
        message=result.message,
    )


@app.post("/logout")
def logout(sessions: SessionManager = Depends(get_sessions)):
    sessions.clear()
    return {"success": True}


@app.get("/events", response_model=EventListResponse)
def list_events(
    q: str = "",
    dashboard: DashboardController = Depends(get_dashboard),
):
    """Upcoming family events, soonest first, optionally filtered by ``q``."""
    dashboard.search(q)
    return _event_list(dashboard)


@app.post("/events", response_model=EventListResponse)
def create_event(
    request: EventRequest,
    dashboard: DashboardController = Depends(get_dashboard),
):
    draft = _draft(request)
    try:
        dashboard.create_event(draft)
    except NetworkError as exc:
        raise HTTPException(status_code=502, detail=exc.user_message)
    return _event_list(dashboard)


@app.put("/events/{event_id}", response_model=EventListResponse)
def update_event(
    event_id: str,
    request: EventRequest,
    dashboard: DashboardController = Depends(get_dashboard),
):
    draft = _draft(request)
    try:
        dashboard.update_event(event_id, draft)
    except AuthorizationError as exc:
        raise HTTPException(status_code=403, detail=exc.user_message)
    except NetworkError as exc:
        raise HTTPException(status_code=502, detail=exc.user_message)
    return _event_list(dashboard)


@app.delete("/events/{event_id}", response_model=EventListResponse)
def delete_event(
    event_id: str,
    confirm: bool = False,
    dashboard: DashboardController = Depends(get_dashboard),
):
    """Delete an event; the caller must pass ``confirm=true``."""
    try:
        deleted = dashboard.delete_event(event_id, confirm=lambda: confirm)
    except AuthorizationError as exc:
        raise HTTPException(status_code=403, detail=exc.user_message)
    except NetworkError as exc:
        raise HTTPException(status_code=502, detail=exc.user_message)
    if not deleted:
        raise HTTPException(status_code=400, detail="Deletion must be confirmed")
    return _event_list(dashboard)


@app.get("/calendar", response_model=CalendarResponse)
def calendar(
    year: Optional[int] = None,
    month: Optional[int] = Query(None, description="Zero-based month index"),
    selected: Optional[date] = None,
    dashboard: DashboardController = Depends(get_dashboard),
):
    """Month grid over every family event, past ones included."""
    view = dashboard.calendar(year, month)
    selected_events: List[EventRecord] = []
    if selected is not None:
        view.year, view.month = selected.year, selected.month - 1
        selected_events = view.select_day(selected.day)
    return CalendarResponse(
        year=view.year,
        month=view.month,
        title=view.title,
        day_names=list(view.day_names),
        cells=[_cell_model(cell) for cell in view.cells()],
        selected_date=view.selected_date.isoformat() if view.selected_date else None,
        selected_events=[_event_model(e, dashboard) for e in selected_events],
    )


@app.get("/events/{event_id}/map", response_model=MapResponse)
async def event_map(
    event_id: str,
    dashboard: DashboardController = Depends(get_dashboard),
):
    """Geocode an event's location and describe the map to draw."""
    view: Optional[MapView] = dashboard.map_for(event_id)
    if view is None:
        raise HTTPException(status_code=404, detail="Event not found")

    loop = asyncio.get_event_loop()
    try:
        resolution = await loop.run_in_executor(executor, view.open)
        return MapResponse(
            event=_event_model(view.event, dashboard),
            state=resolution.state.value,
            error=resolution.error,
            map=view.map.to_dict() if view.map else None,
            links=view.external_links(),
        )
    finally:
        view.close()


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Family Organiser API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8001)
