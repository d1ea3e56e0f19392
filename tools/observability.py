"""Structured logging around wardrobe operations and advisor calls.

Every instrumented call logs a start and an outcome under one correlation id.
The ids a call acts on (items, plan dates, laundry categories) are pulled out
of its arguments so a log line can be traced back to the garment or day it
touched without logging image payloads or notes.
"""

from __future__ import annotations

import inspect
import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, ParamSpec, TypeVar

from pydantic import BaseModel, ValidationError

from models.errors import ConfirmationRequired, WardrobeError
from wardrobe_app.logging_config import (
    ensure_correlation_id,
    get_logger,
    log_event,
    redact_for_log,
)

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")

SUBJECT_ARGUMENTS = (
    "item_id",
    "item_ids",
    "draft_ids",
    "confirmed_ids",
    "date_key",
    "worn_on",
    "categories",
    "occasion",
)


def call_subject(signature: inspect.Signature, args: tuple, kwargs: dict) -> Dict[str, Any]:
    """Return the item ids, date keys and categories a call was made with."""

    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        return {}
    subject: Dict[str, Any] = {}
    for name in SUBJECT_ARGUMENTS:
        value = bound.arguments.get(name)
        if value is None:
            continue
        # Lazy iterables are left alone so the wrapped call still sees every value.
        if isinstance(value, (list, tuple, set, frozenset)):
            subject[name] = [str(entry) for entry in value]
        elif isinstance(value, str):
            subject[name] = value
        elif hasattr(value, "isoformat"):
            subject[name] = value.isoformat()
    return subject


def result_subject(result: Any) -> Dict[str, Any]:
    """Ids produced by a call: a saved item, or every item of a batch."""

    if hasattr(result, "item_id"):
        return {"result_item_id": result.item_id}
    if isinstance(result, list) and result and all(hasattr(entry, "item_id") for entry in result):
        return {"result_item_ids": [entry.item_id for entry in result]}
    return {}


def instrument_tool(
    tool_name: str,
    input_model: type[BaseModel] | None = None,
    on_validation_error: Callable[[ValidationError], R] | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Wrap a callable to emit structured logs and optional keyword validation.

    Domain rejections (:class:`WardrobeError`) are logged at WARNING and
    re-raised unchanged; anything else is logged at ERROR with a traceback.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        signature = inspect.signature(func)

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            start = time.perf_counter()

            if input_model:
                try:
                    kwargs = input_model.model_validate(kwargs).model_dump()
                except ValidationError as exc:
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "tool_validation_failed",
                        tool=tool_name,
                        correlation_id=correlation_id,
                        errors=redact_for_log(exc.errors(include_url=False, include_context=False)),
                    )
                    if on_validation_error:
                        return on_validation_error(exc)
                    raise

            subject = call_subject(signature, args, kwargs)
            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_started",
                tool=tool_name,
                correlation_id=correlation_id,
                **subject,
            )
            try:
                result = func(*args, **kwargs)
            except ConfirmationRequired as exc:
                log_event(
                    LOGGER,
                    logging.INFO,
                    "tool_call_needs_confirmation",
                    tool=tool_name,
                    correlation_id=correlation_id,
                    pending_item_ids=list(exc.item_ids),
                    **subject,
                )
                raise
            except WardrobeError as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "tool_call_rejected",
                    tool=tool_name,
                    correlation_id=correlation_id,
                    error=type(exc).__name__,
                    reason=str(exc),
                    **subject,
                )
                raise
            except Exception:
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "tool_call_failed",
                    tool=tool_name,
                    correlation_id=correlation_id,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                    exc_info=True,
                    **subject,
                )
                raise
            log_event(
                LOGGER,
                logging.INFO,
                "tool_call_completed",
                tool=tool_name,
                correlation_id=correlation_id,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
                **result_subject(result),
            )
            return result

        return wrapper

    return decorator


__all__ = ["SUBJECT_ARGUMENTS", "call_subject", "instrument_tool", "result_subject"]
