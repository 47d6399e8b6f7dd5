"""JSON export/import and the bundled sample session."""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .errors import ParentNotFoundError, SessionImportError
from .factories import create_cluster, create_node, create_session
from .ids import generate_id, now_iso
from .store import add_cluster_to_session, add_node_to_session, elect_root
from .types import CLUSTER_COLOURS, EXPORT_FIELDS, PHASES, Cluster, Node, PromptLog, Session

logger = logging.getLogger(__name__)

SAMPLE_SESSION_PATH = Path(__file__).resolve().parent / "data" / "sample_session.json"


def session_to_dict(session: Session) -> Dict[str, Any]:
    data = session.model_dump()
    return {key: data[key] for key in EXPORT_FIELDS}


def export_session(session: Session) -> str:
    return json.dumps(session_to_dict(session), indent=2)


def export_filename(session: Session) -> str:
    slug = "".join(ch if ch.isalnum() else "-" for ch in session.title.lower()).strip("-")
    return f"{slug or 'session'}-{session.id}.json"


def _records(raw: Any, field: str) -> List[Dict[str, Any]]:
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise SessionImportError(f"'{field}' must be a list of objects")
    return raw


def parse_session(raw: str | bytes) -> Session:
    """Build a session from exported JSON, defaulting whatever is missing."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise SessionImportError(f"Invalid session JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise SessionImportError("Session JSON must be an object")

    session_id = data.get("id") or generate_id("session")
    phase = data.get("phase")
    try:
        nodes = [
            Node.model_validate(
                {
                    **item,
                    "id": item.get("id") or generate_id("node"),
                    "session_id": session_id,
                    "created_at": item.get("created_at") or now_iso(),
                }
            )
            for item in _records(data.get("nodes"), "nodes")
        ]
        clusters = [
            Cluster.model_validate(
                {
                    **item,
                    "id": item.get("id") or generate_id("cluster"),
                    "session_id": session_id,
                    "colour": item.get("colour") or random.choice(CLUSTER_COLOURS),
                    "created_at": item.get("created_at") or now_iso(),
                }
            )
            for item in _records(data.get("clusters"), "clusters")
        ]
        prompt_logs = [
            PromptLog.model_validate(
                {
                    **item,
                    "id": item.get("id") or generate_id("pl"),
                    "session_id": session_id,
                    "timestamp": item.get("timestamp") or now_iso(),
                }
            )
            for item in _records(data.get("prompt_logs"), "prompt_logs")
        ]
        return Session(
            id=session_id,
            title=data.get("title") or "Imported session",
            facilitator_name=data.get("facilitator_name") or "Facilitator",
            phase=phase if phase in PHASES else "seeding",
            created_at=data.get("created_at") or now_iso(),
            nodes=nodes,
            clusters=clusters,
            prompt_logs=prompt_logs,
            reflection=data.get("reflection"),
            root_node_id=data.get("root_node_id"),
        )
    except ValidationError as exc:
        raise SessionImportError(f"Invalid session data: {exc}") from exc


def rebind_session_id(session: Session, session_id: str) -> Session:
    session.id = session_id
    for node in session.nodes:
        node.session_id = session_id
    for cluster in session.clusters:
        cluster.session_id = session_id
    for log in session.prompt_logs:
        log.session_id = session_id
    return session


def build_sample_session(fixture: Dict[str, Any]) -> Session:
    """Rebuild a fixture with fresh ids, inserting parents before children."""
    session = create_session(fixture.get("title"), fixture.get("facilitator_name"))

    cluster_ids: Dict[str, str] = {}
    for item in fixture.get("clusters", []):
        cluster = create_cluster(
            session.id,
            item["label"],
            item.get("colour"),
            item.get("description", ""),
        )
        add_cluster_to_session(session, cluster)
        if item.get("id"):
            cluster_ids[item["id"]] = cluster.id

    node_ids: Dict[str, str] = {}
    pending = list(fixture.get("nodes", []))
    while pending:
        remaining = []
        for item in pending:
            old_parent = item.get("parent_id")
            if old_parent and old_parent not in node_ids:
                remaining.append(item)
                continue
            node = create_node(
                session.id,
                item["text"],
                node_ids.get(old_parent) if old_parent else None,
                item.get("author_id", "participant"),
            )
            node.cluster_id = cluster_ids.get(item.get("cluster_id") or "")
            node.agency = item.get("agency")
            add_node_to_session(session, node)
            node_ids[item["id"]] = node.id
        if len(remaining) == len(pending):
            raise ParentNotFoundError(remaining[0].get("parent_id", ""))
        pending = remaining

    elect_root(session)
    return session


def load_sample_fixture(path: Optional[Path] = None) -> Dict[str, Any]:
    target = path or SAMPLE_SESSION_PATH
    with target.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def load_sample_session(path: Optional[Path] = None) -> Session:
    session = build_sample_session(load_sample_fixture(path))
    logger.info("Loaded sample session %s with %d nodes", session.id, len(session.nodes))
    return session
