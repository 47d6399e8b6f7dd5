"""JSON-over-stdin/stdout RPC bridge for the workshop facade."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import fields, is_dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from garden_session.errors import GardenError

from .sdk import Workshop, create_workshop

logger = logging.getLogger(__name__)


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if hasattr(value, "model_dump"):
        return value.model_dump()  # type: ignore[call-arg]
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {key: _to_jsonable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value


def _emit(obj: Any) -> None:
    sys.stdout.write(json.dumps(_to_jsonable(obj)) + "\n")
    sys.stdout.flush()


def _success(command: str, request_id: Optional[str] = None, data: Any = None) -> dict:
    payload = {"type": "response", "command": command, "success": True}
    if request_id:
        payload["id"] = request_id
    if data is not None:
        payload["data"] = data
    return payload


def _error(command: str, message: str, request_id: Optional[str] = None) -> dict:
    payload = {"type": "response", "command": command, "success": False, "error": message}
    if request_id:
        payload["id"] = request_id
    return payload


def _not_found(command: str, request_id: Optional[str]) -> dict:
    return _error(command, "Session or node not found", request_id)


_STRING_FIELDS = (
    "session_id",
    "title",
    "facilitator_name",
    "seed",
    "parent_id",
    "node_id",
    "phase",
    "agency",
)


def _invalid_field(data: Dict[str, Any]) -> Optional[str]:
    for key in _STRING_FIELDS:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            return key
    return None


async def _handle_add_response(workshop: Workshop, payload: Dict[str, Any]) -> dict:
    request_id = payload.get("id")
    text = payload.get("text")
    if not isinstance(text, str):
        return _error("add_response", "add_response requires a 'text' string", request_id)
    if workshop.get_session(payload.get("session_id")) is None:
        return _not_found("add_response", request_id)
    nodes = await workshop.add_response(payload["session_id"], text, payload.get("parent_id"))
    return _success("add_response", request_id, {"nodes": nodes})


async def _handle_create_nodes(workshop: Workshop, payload: Dict[str, Any]) -> dict:
    request_id = payload.get("id")
    texts = payload.get("texts")
    if isinstance(texts, str):
        texts = [texts]
    if not isinstance(texts, list) or not all(isinstance(t, str) for t in texts):
        return _error("create_nodes", "create_nodes requires a 'texts' list of strings", request_id)
    if workshop.get_session(payload.get("session_id")) is None:
        return _not_found("create_nodes", request_id)
    nodes = await workshop.create_nodes(payload["session_id"], texts, payload.get("parent_id"))
    return _success("create_nodes", request_id, {"nodes": nodes})


async def _handle_analyze_response(workshop: Workshop, payload: Dict[str, Any]) -> dict:
    request_id = payload.get("id")
    text = payload.get("text")
    if not isinstance(text, str):
        return _error("analyze_response", "analyze_response requires a 'text' string", request_id)
    if not text.strip():
        return _error("analyze_response", "text must not be empty", request_id)
    analysis = await workshop.analyze_response(payload.get("session_id", ""), text, payload.get("parent_id"))
    if analysis is None:
        return _not_found("analyze_response", request_id)
    return _success("analyze_response", request_id, analysis)


async def _handle_import(workshop: Workshop, payload: Dict[str, Any]) -> dict:
    request_id = payload.get("id")
    raw = payload.get("json")
    if not isinstance(raw, str):
        return _error("import_session", "import_session requires a 'json' string", request_id)
    session = workshop.import_session(raw)
    return _success("import_session", request_id, {"session_id": session.id, "title": session.title})


async def _dispatch(workshop: Workshop, data: Dict[str, Any]) -> dict:
    msg_type = data.get("type") or "unknown"
    request_id = data.get("id")
    invalid = _invalid_field(data)
    if invalid:
        return _error(msg_type, f"'{invalid}' must be a string", request_id)
    session_id = data.get("session_id", "")

    if msg_type == "create_session":
        session = workshop.create_session(data.get("title"), data.get("facilitator_name"), data.get("seed"))
        return _success(msg_type, request_id, {"session_id": session.id})
    if msg_type == "list_sessions":
        summaries = [{"id": s.id, "title": s.title, "phase": s.phase} for s in workshop.list_sessions()]
        return _success(msg_type, request_id, {"sessions": summaries})
    if msg_type == "dashboard":
        dashboard = workshop.dashboard(session_id)
        return _success(msg_type, request_id, dashboard) if dashboard else _not_found(msg_type, request_id)
    if msg_type == "participant_view":
        view = workshop.participant_view(session_id)
        return _success(msg_type, request_id, view) if view else _not_found(msg_type, request_id)
    if msg_type == "update_phase":
        session = await workshop.update_phase(session_id, str(data.get("phase", "")))
        if session is None:
            return _not_found(msg_type, request_id)
        return _success(msg_type, request_id, {"phase": session.phase})
    if msg_type == "add_response":
        return await _handle_add_response(workshop, data)
    if msg_type == "analyze_response":
        return await _handle_analyze_response(workshop, data)
    if msg_type == "create_nodes":
        return await _handle_create_nodes(workshop, data)
    if msg_type == "delete_node":
        deleted = await workshop.delete_node(session_id, str(data.get("node_id", "")))
        return _success(msg_type, request_id, {"deleted": deleted})
    if msg_type == "deepen_node":
        log = await workshop.deepen_node(session_id, str(data.get("node_id", "")))
        return _success(msg_type, request_id, log) if log else _not_found(msg_type, request_id)
    if msg_type == "set_agency":
        node = await workshop.set_agency(session_id, str(data.get("node_id", "")), data.get("agency"))
        return _success(msg_type, request_id, node) if node else _not_found(msg_type, request_id)
    if msg_type == "suggest_clusters":
        clusters = await workshop.suggest_clusters(session_id, refresh=bool(data.get("refresh")))
        return _success(msg_type, request_id, {"clusters": clusters})
    if msg_type == "generate_reflection":
        reflection = await workshop.generate_reflection(session_id)
        if reflection is None:
            return _not_found(msg_type, request_id)
        return _success(msg_type, request_id, {"reflection": reflection})
    if msg_type == "reset_tree":
        session = await workshop.reset_tree(session_id)
        return _success(msg_type, request_id) if session else _not_found(msg_type, request_id)
    if msg_type == "export_session":
        exported = workshop.export_session(session_id)
        if exported is None:
            return _not_found(msg_type, request_id)
        return _success(msg_type, request_id, {"json": exported})
    if msg_type == "import_session":
        return await _handle_import(workshop, data)
    if msg_type == "load_sample":
        session = workshop.load_sample_session()
        return _success(msg_type, request_id, {"session_id": session.id})
    return _error(msg_type, "Unknown message type", request_id)


async def handle_line(workshop: Workshop, line: str) -> Optional[dict]:
    line = line.strip()
    if not line:
        return None
    try:
        data = json.loads(line)
    except json.JSONDecodeError as exc:
        return _error("unknown", f"Invalid JSON: {exc}")
    if not isinstance(data, dict):
        return _error("unknown", "Request must be a JSON object")
    try:
        return await _dispatch(workshop, data)
    except (GardenError, ValidationError, TypeError, ValueError) as exc:
        logger.warning("Request %r failed: %s", data.get("type"), exc)
        return _error(data.get("type") or "unknown", str(exc), data.get("id"))


async def _read_lines() -> None:
    workshop = create_workshop()
    for line in sys.stdin:
        response = await handle_line(workshop, line)
        if response is not None:
            _emit(response)


def main() -> None:
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    asyncio.run(_read_lines())


if __name__ == "__main__":
    main()
