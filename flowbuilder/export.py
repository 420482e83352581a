"""
Export sinks for saved flows.

A sink is any callable taking the exported payload dict:
{"nodes": [...], "edges": [...]} (see flowbuilder.models for the shape).
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict

from flowbuilder.models import FlowSnapshot

logger = logging.getLogger(__name__)

ExportSink = Callable[[Dict[str, Any]], None]


def log_sink(payload: Dict[str, Any]) -> None:
    logger.info(f"Saving flow: {json.dumps(payload, ensure_ascii=False)}")


def json_file_sink(path: Path) -> ExportSink:
    """Sink that writes each saved flow to `path`, replacing the previous one."""
    path = Path(path)

    def write(payload: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)
        logger.info(f"Flow written to {path}")

    return write


def read_flow_file(path: Path) -> FlowSnapshot:
    with Path(path).open("r", encoding="utf-8") as fh:
        return FlowSnapshot.from_dict(json.load(fh))
