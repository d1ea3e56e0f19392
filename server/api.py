"""FastAPI server exposing the wardrobe planner over HTTP JSON."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from logic.planner import DayView
from logic.validation import (
    AppSettingsPayload,
    CategoryPayload,
    DraftEditPayload,
    DraftPayload,
    InventoryPayload,
    ItemPayload,
    LogWearPayload,
    NotificationSettingsPayload,
    PlanPayload,
    SaveDraftsPayload,
    SuggestionRequest,
    ValidationResult,
    WashPayload,
)
from models.clothing import (
    AppSettings,
    NotificationSettings,
    inventory_to_dict,
    item_to_dict,
    plan_to_dict,
    wear_entry_to_dict,
)
from models.errors import (
    ArchiveImportError,
    CategoryError,
    ConfirmationRequired,
    ItemValidationError,
    LaundryTransitionError,
    PastDateError,
    UnknownItemError,
    WardrobeError,
)
from wardrobe_app.app import WardrobeApp

_STATUS_CODES = (
    (UnknownItemError, 404),
    (ConfirmationRequired, 409),
    (LaundryTransitionError, 409),
    (PastDateError, 409),
    (ItemValidationError, 400),
    (CategoryError, 400),
    (ArchiveImportError, 400),
)


def status_for(exc: WardrobeError) -> int:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 400


def error_body(exc: WardrobeError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, ConfirmationRequired):
        body["itemIds"] = exc.item_ids
    if isinstance(exc, ItemValidationError) and exc.fields:
        body["fields"] = exc.fields
    return body


def day_to_dict(view: DayView) -> Dict[str, Any]:
    return {
        "date": view.date_key,
        "isPast": view.is_past,
        "source": view.source,
        "items": [item_to_dict(item) for item in view.items],
        "note": view.note,
    }


def create_api(wardrobe_app: Optional[WardrobeApp] = None) -> FastAPI:
    """Build the FastAPI app around one :class:`WardrobeApp`.

    Background timers start with the server and stop on shutdown.
    """

    planner = wardrobe_app or WardrobeApp()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        planner.start_background_tasks()
        try:
            yield
        finally:
            planner.shutdown()

    api = FastAPI(title="Wardrobe Planner", version="0.1.0", lifespan=lifespan)
    api.state.wardrobe_app = planner

    @api.exception_handler(WardrobeError)
    async def _wardrobe_error(request: Request, exc: WardrobeError) -> JSONResponse:
        return JSONResponse(status_code=status_for(exc), content=error_body(exc))

    @api.exception_handler(RequestValidationError)
    async def _invalid_payload(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]} for error in exc.errors()
        ]
        result = ValidationResult(message="Request payload failed validation", details=details)
        return JSONResponse(status_code=422, content=result.model_dump())

    def _bad_request(exc: ValueError) -> HTTPException:
        return HTTPException(status_code=400, detail=str(exc))

    @api.get("/healthz")
    def healthcheck() -> dict:
        """Readiness probe with collection sizes."""

        items, worn, plans = planner.snapshot()
        return {
            "status": "ok",
            "service": "wardrobe-planner",
            "environment": planner.config.environment or "local",
            "model": planner.config.model,
            "items": items,
            "wearLogEntries": worn,
            "plans": plans,
        }

    # Items -----------------------------------------------------------------
    @api.get("/items")
    def list_items() -> List[dict]:
        return [item_to_dict(item) for item in planner.list_items()]

    @api.post("/items", status_code=201)
    def create_item(payload: ItemPayload) -> dict:
        return item_to_dict(planner.add_item_from_payload(payload))

    @api.get("/items/{item_id}")
    def get_item(item_id: str) -> dict:
        return item_to_dict(planner.get_item(item_id))

    @api.put("/items/{item_id}")
    def update_item(item_id: str, payload: ItemPayload) -> dict:
        return item_to_dict(planner.update_item(item_id, payload))

    @api.delete("/items/{item_id}", status_code=204)
    def delete_item(item_id: str) -> None:
        planner.delete_item(item_id)

    @api.post("/items/{item_id}/laundry")
    def move_to_laundry(item_id: str) -> dict:
        return item_to_dict(planner.move_to_laundry(item_id))

    @api.post("/items/{item_id}/washed")
    def mark_washed(item_id: str) -> dict:
        return item_to_dict(planner.mark_item_washed(item_id))

    @api.post("/items/{item_id}/put-away")
    def put_away(item_id: str) -> dict:
        return item_to_dict(planner.put_away(item_id))

    @api.post("/items/{item_id}/ironing/toggle")
    def toggle_ironing(item_id: str) -> dict:
        return item_to_dict(planner.toggle_ironing(item_id))

    @api.post("/items/{item_id}/wear")
    def log_wear(item_id: str, payload: LogWearPayload) -> dict:
        entry = planner.log_wear(item_id, payload.worn_on)
        return {"entry": wear_entry_to_dict(entry), "item": item_to_dict(planner.get_item(item_id))}

    # Laundry ---------------------------------------------------------------
    @api.get("/laundry")
    def laundry_groups() -> List[dict]:
        return [
            {
                "name": group.name,
                "categories": group.categories,
                "items": [item_to_dict(item) for item in group.items],
            }
            for group in planner.laundry_groups()
        ]

    @api.post("/laundry/wash-all")
    def wash_all(payload: WashPayload) -> dict:
        return {"washedIds": planner.mark_all_washed(payload.categories)}

    @api.get("/notifications/laundry")
    def laundry_notifications() -> List[dict]:
        return [
            {"id": note.id, "message": note.message, "itemId": note.item_id}
            for note in planner.laundry_notifications
        ]

    # Planner ---------------------------------------------------------------
    @api.get("/days")
    def active_days() -> dict:
        return {"today": planner.today(), "days": planner.active_days()}

    @api.get("/days/{date_key}")
    def day(date_key: str) -> dict:
        try:
            return day_to_dict(planner.day_view(date_key))
        except ValueError as exc:
            raise _bad_request(exc) from exc

    @api.put("/plans/{date_key}")
    def save_plan(date_key: str, payload: PlanPayload) -> dict:
        try:
            plan = planner.save_plan(date_key, payload.item_ids, payload.note, payload.confirmed_item_ids)
        except WardrobeError:
            raise
        except ValueError as exc:
            raise _bad_request(exc) from exc
        return {"date": date_key, **plan_to_dict(plan)}

    # Insights and suggestions ---------------------------------------------
    @api.get("/insights")
    def insights(limit: Optional[int] = None) -> List[dict]:
        return [
            {"item": item_to_dict(entry.item), "count": entry.count} for entry in planner.insights(limit)
        ]

    @api.post("/suggestions")
    def suggest(payload: SuggestionRequest) -> dict:
        return planner.suggest_outfit(payload.occasion).to_dict()

    # Drafts and import ----------------------------------------------------
    @api.post("/drafts", status_code=201)
    def open_draft(payload: DraftPayload) -> dict:
        """Start an item form from a photo; category and color fill in as AI results land."""

        return planner.new_draft(payload.image_url, payload.name).to_dict()

    @api.get("/drafts")
    def list_drafts() -> List[dict]:
        return [draft.to_dict() for draft in planner.list_drafts()]

    @api.get("/drafts/{draft_id}")
    def get_draft(draft_id: str) -> dict:
        return planner.get_draft(draft_id).to_dict()

    @api.patch("/drafts/{draft_id}")
    def edit_draft(draft_id: str, payload: DraftEditPayload) -> dict:
        return planner.edit_draft(draft_id, payload.changes()).to_dict()

    @api.delete("/drafts/{draft_id}", status_code=204)
    def discard_draft(draft_id: str) -> None:
        planner.discard_draft(draft_id)

    @api.post("/drafts/save", status_code=201)
    def save_drafts(payload: SaveDraftsPayload) -> List[dict]:
        return [item_to_dict(item) for item in planner.save_drafts(payload.draft_ids)]

    @api.post("/import")
    async def import_archive(request: Request) -> List[dict]:
        """Accept a raw zip body; answers with drafts still open for review."""

        return [draft.to_dict() for draft in planner.import_archive(await request.body())]

    # Categories ------------------------------------------------------------
    @api.get("/categories")
    def categories() -> List[str]:
        return planner.state.categories

    @api.post("/categories", status_code=201)
    def add_category(payload: CategoryPayload) -> List[str]:
        return planner.add_category(payload.name)

    @api.delete("/categories/{name}")
    def delete_category(name: str) -> List[str]:
        return planner.delete_category(name)

    # Settings --------------------------------------------------------------
    @api.get("/settings")
    def settings() -> dict:
        return {
            "app": planner.state.app_settings.to_dict(),
            "notifications": planner.state.notification_settings.to_dict(),
            "onboardingComplete": planner.state.onboarding_complete,
        }

    @api.put("/settings/app")
    def update_app_settings(payload: AppSettingsPayload) -> dict:
        settings = AppSettings(ai_features_enabled=payload.ai_features_enabled, theme=payload.theme)
        return planner.update_app_settings(settings).to_dict()

    @api.put("/settings/notifications")
    def update_notification_settings(payload: NotificationSettingsPayload) -> dict:
        settings = NotificationSettings(enabled=payload.enabled, time=payload.time)
        return planner.update_notification_settings(settings).to_dict()

    @api.post("/onboarding/complete")
    def complete_onboarding() -> dict:
        planner.complete_onboarding()
        return {"onboardingComplete": True}

    # Inventory -------------------------------------------------------------
    @api.get("/inventory")
    def list_inventory() -> List[dict]:
        return [inventory_to_dict(item) for item in planner.list_inventory()]

    @api.post("/inventory", status_code=201)
    def add_inventory(payload: InventoryPayload) -> dict:
        return inventory_to_dict(planner.add_inventory_item(payload))

    @api.put("/inventory/{item_id}")
    def update_inventory(item_id: str, payload: InventoryPayload) -> dict:
        return inventory_to_dict(planner.update_inventory_item(item_id, payload))

    @api.delete("/inventory/{item_id}", status_code=204)
    def delete_inventory(item_id: str) -> None:
        planner.delete_inventory_item(item_id)

    return api


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:create_api", factory=True, host="0.0.0.0", port=8080, reload=False)
