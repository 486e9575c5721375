"""Repository management API endpoints."""

import threading

from fastapi import APIRouter, HTTPException, Query

from relix.exceptions import AppBaseError
from relix.logger import get_logger
from relix.models.api import (
    AddRepositoryRequest,
    EntryInfo,
    PathRequest,
    ProbeStatus,
    RepositoryView,
    SystemStatus,
)
from relix.models.metadata import RepoMetadata
from relix.models.repository import OperationResult, RepoEntry
from relix.services.i18n import translate
from relix.services.probe import RepoProber
from relix.services.sources import SourcesManager

logger = get_logger(__name__)

router = APIRouter(prefix="/api/repositories", tags=["repositories"])
status_router = APIRouter(prefix="/api", tags=["status"])

# Service instances (lazy loaded singletons)
_manager: SourcesManager | None = None
_prober: RepoProber | None = None
# Guards creation of the singletons
_init_lock = threading.Lock()
# Mutations and view changes are serialized: at most one in flight
_service_lock = threading.Lock()


def get_manager() -> SourcesManager:
    global _manager
    if _manager is None:
        with _init_lock:
            if _manager is None:
                manager = SourcesManager()
                manager.load_all()
                _manager = manager
    return _manager


def get_prober() -> RepoProber:
    global _prober
    if _prober is None:
        with _init_lock:
            if _prober is None:
                _prober = RepoProber()
    return _prober


def _lookup(manager: SourcesManager, entry_id: int) -> RepoEntry:
    try:
        return manager.get_entry(entry_id)
    except AppBaseError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e


def _respond(result: OperationResult) -> OperationResult:
    if not result.ok:
        raise HTTPException(status_code=result.status_code, detail=result.message)
    return result


# ============================================================================
# Read endpoints
# ============================================================================


@router.get("", response_model=RepositoryView)
async def list_repositories(
    filter: str | None = Query(default=None, description="Case-insensitive substring"),
    sort: str | None = Query(default=None, description="file, status or alpha"),
) -> RepositoryView:
    """Get the filtered, sorted repository view."""
    manager = get_manager()
    with _service_lock:
        try:
            view = manager.rebuild_view(filter, sort)
        except AppBaseError as e:
            raise HTTPException(status_code=e.status_code, detail=str(e)) from e
        return RepositoryView(
            filter=manager.store.filter_text,
            sort=manager.store.sort_mode,
            total=len(manager.store.entries),
            entries=[EntryInfo(id=i, entry=manager.store.entries[i]) for i in view],
        )


@router.post("/reload", response_model=SystemStatus)
async def reload_repositories() -> SystemStatus:
    """Re-read every source file."""
    manager = get_manager()
    with _service_lock:
        manager.load_all()
    return await get_status()


# ============================================================================
# Mutations
# ============================================================================


@router.post("/{entry_id}/toggle", response_model=OperationResult)
async def toggle_repository(entry_id: int) -> OperationResult:
    manager = get_manager()
    with _service_lock:
        return _respond(manager.toggle(_lookup(manager, entry_id)))


@router.delete("/{entry_id}", response_model=OperationResult)
async def delete_repository(entry_id: int) -> OperationResult:
    manager = get_manager()
    with _service_lock:
        return _respond(manager.delete(_lookup(manager, entry_id)))


@router.post("", response_model=OperationResult)
async def add_repository(request: AddRepositoryRequest) -> OperationResult:
    manager = get_manager()
    with _service_lock:
        return _respond(manager.add(request.target_file, request.line))


@router.post("/undo", response_model=OperationResult)
async def undo_last_change() -> OperationResult:
    manager = get_manager()
    with _service_lock:
        return _respond(manager.undo())


@router.post("/export", response_model=OperationResult)
async def export_repositories(request: PathRequest) -> OperationResult:
    manager = get_manager()
    with _service_lock:
        return _respond(manager.export_entries(request.path))


@router.post("/import", response_model=OperationResult)
async def import_repositories(request: PathRequest) -> OperationResult:
    manager = get_manager()
    with _service_lock:
        return _respond(manager.import_entries(request.path))


# ============================================================================
# Probe
# ============================================================================


@router.post("/{entry_id}/probe", response_model=ProbeStatus)
async def request_probe(entry_id: int) -> ProbeStatus:
    """Start a background metadata/reachability probe; refused while one runs."""
    manager = get_manager()
    prober = get_prober()
    with _service_lock:
        entry = _lookup(manager, entry_id)
    accepted = prober.request_probe(entry)
    if accepted:
        message = translate("probe.started", timeout_ms=prober.timeout_ms)
    else:
        message = translate("probe.busy")
    return ProbeStatus(accepted=accepted, running=prober.is_running, target=prober.target, message=message)


@router.get("/probe", response_model=RepoMetadata | None)
async def poll_probe() -> RepoMetadata | None:
    """Finished probe result, delivered once; null while running or idle."""
    return get_prober().poll_probe()


# ============================================================================
# Status
# ============================================================================


@status_router.get("/status", response_model=SystemStatus)
async def get_status() -> SystemStatus:
    manager = get_manager()
    return SystemStatus(
        os_id=manager.os_info.id,
        os_version=manager.os_info.version,
        read_only=manager.read_only,
        stanza_format=manager.store.stanza_format_enabled,
        entries=len(manager.store.entries),
        undo_depth=len(manager.pipeline.undo_stack),
    )
