from fastapi import (
    FastAPI,
    Request,
    Query,
    APIRouter,
    HTTPException,
    Body
)
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging
import shutil
import tempfile

from kitchen.events.Event_Bus import GLOBAL_EVENT_BUS
from kitchen.events.web_observers import start as start_event_observers, get_events as get_web_events
from kitchen.infra.Order_Repository import OrderRepository
from kitchen.infra.Storage import JsonFileStorage
from kitchen.logic.insights import (
    InsightInProgressError, InsightResponseError, InsightUnavailableError, InsightWorkflow
)
from kitchen.logic.insights.analyzer import OpenAIInsightAnalyzer
from kitchen.utilities.config import STORAGE_FILE, STORAGE_QUOTA
from kitchen.utilities.export_import import export_orders, parse_order_feed
from kitchen.utilities.validators import InsightRequestInput, OrdersInput

# Logging
logger = logging.getLogger(__name__)

router = APIRouter()


def _repository(request: Request) -> OrderRepository:
    return request.app.state.repository


def _workflow(request: Request) -> InsightWorkflow:
    return request.app.state.workflow


def _merge_response(request: Request, incoming: List[Dict[str, Any]]) -> Dict[str, Any]:
    result = _repository(request).save_orders(incoming)
    return {
        "count": len(result.orders),
        "orders": result.orders,
        "saved": result.saved,
        "warning": result.warning,
    }


# -------------------- ORDERS --------------------
@router.get("/api/orders")
def list_orders(request: Request):
    orders = _repository(request).load()
    return {"count": len(orders), "orders": orders}


@router.post("/api/orders")
def merge_orders(request: Request, payload: Union[List[Dict[str, Any]], OrdersInput] = Body(...)):
    """Merge a batch of orders (array or {"orders": [...]}) into the stored collection."""
    incoming = payload.orders if isinstance(payload, OrdersInput) else payload
    return _merge_response(request, incoming)


@router.post("/api/orders/import")
async def import_orders(request: Request):
    """Merge a raw platform export (JSON, {"orders": [...]} or JSON Lines)."""
    body = await request.body()
    try:
        incoming = parse_order_feed(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _merge_response(request, incoming)


@router.get("/api/orders/export")
def export_orders_file(request: Request):
    """Download the stored orders; the file lives in a private temp dir removed after sending."""
    orders = _repository(request).load()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    export_dir = request.app.state.export_dir
    if export_dir is not None:
        export_dir.mkdir(parents=True, exist_ok=True)
    work_dir = Path(tempfile.mkdtemp(prefix="orders_export_", dir=export_dir))
    try:
        path = export_orders(orders, work_dir / f"orders_export_{timestamp}.json")
    except Exception:
        shutil.rmtree(work_dir, ignore_errors=True)
        raise
    return FileResponse(
        str(path), media_type="application/json", filename=path.name,
        background=BackgroundTask(shutil.rmtree, work_dir, ignore_errors=True),
    )


@router.delete("/api/orders")
def clear_orders(request: Request):
    _repository(request).clear()
    return {"status": "cleared"}


# -------------------- INSIGHT --------------------
@router.get("/api/insight")
def insight_state(request: Request):
    return _workflow(request).to_dict()


@router.post("/api/insight")
async def generate_insight(request: Request, payload: InsightRequestInput):
    """Run the analysis over the stored orders. No orders -> state stays idle."""
    workflow = _workflow(request)
    orders = _repository(request).load()
    try:
        await workflow.generate(orders, payload.user_name)
    except InsightInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InsightUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except InsightResponseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e) or type(e).__name__)
    return workflow.to_dict()


@router.delete("/api/insight")
def clear_insight(request: Request):
    workflow = _workflow(request)
    workflow.clear()
    return workflow.to_dict()


# -------------------- ALERTS --------------------
@router.get("/api/alerts")
def api_alerts(since: Optional[int] = Query(default=None)):
    """Storage warnings and analysis failures newer than 'since'."""
    return get_web_events(since)


def create_app(repository: Optional[OrderRepository] = None,
               workflow: Optional[InsightWorkflow] = None,
               export_dir: Optional[Path] = None) -> FastAPI:
    """Build the API around an order repository and an insight workflow.

    Defaults: JSON file storage from config and the OpenAI analyzer.
    """
    app = FastAPI(title="Cloud Kitchen Orders & Insights API")
    app.state.repository = repository or OrderRepository(
        JsonFileStorage(STORAGE_FILE, quota=STORAGE_QUOTA), bus=GLOBAL_EVENT_BUS
    )
    app.state.workflow = workflow or InsightWorkflow(OpenAIInsightAnalyzer(), bus=GLOBAL_EVENT_BUS)
    # None: the system temp dir
    app.state.export_dir = Path(export_dir) if export_dir else None
    app.include_router(router)

    bus = app.state.repository.bus or GLOBAL_EVENT_BUS
    start_event_observers(bus)
    if app.state.workflow.bus is not None and app.state.workflow.bus is not bus:
        start_event_observers(app.state.workflow.bus)
    logger.info("Web observers for order alerts started")
    return app


app = create_app()
