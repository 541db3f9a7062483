"""
Ingestion API (feature router) - Smart import into an open canvas

Business capability:
- Match extracted items against the nodes already on a canvas
- Parse a planning document, fill gaps in matched nodes and add the rest
- Apply an import that was resolved by the caller
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from starlette.requests import Request

from api.features.canvas_graph.canvas_sessions import canvas_state, require_canvas
from api.features.ingestion.ingestion_contracts import ApplyImportRequest, DocumentImportRequest, MatchRequest
from api.platform.observability.request_logging import http_context, sha256_text, summarize_for_log
from planning_canvas.fuzzy_matcher import match_extracted_to_existing
from planning_canvas.smart_logger import SmartLogger

router = APIRouter(prefix="/api/canvas", tags=["ingestion"])


@router.post("/{project_id}/import/match")
async def match_extracted(project_id: str, body: MatchRequest, request: Request) -> dict[str, Any]:
    """
    Match extracted {name, type} items against the canvas nodes.
    Read-only: nothing on the canvas changes.
    """
    canvas = require_canvas(project_id)
    threshold = body.threshold if body.threshold is not None else canvas.settings.match_threshold
    result = match_extracted_to_existing(
        [item.to_item() for item in body.extracted],
        canvas.existing_node_summaries(),
        threshold=threshold,
    )
    SmartLogger.log(
        "INFO",
        "Import match computed.",
        category="ingestion.api.match",
        params={
            **http_context(request),
            "inputs": {"extracted": len(body.extracted), "threshold": threshold},
            "result": {"matches": len(result.matches), "unmatched": len(result.unmatched)},
        },
    )
    return {
        "matches": [m.to_dict() for m in result.matches],
        "unmatched": [{"name": item.name, "type": item.type} for item in result.unmatched],
    }


@router.post("/{project_id}/import/document")
async def import_document(project_id: str, body: DocumentImportRequest, request: Request) -> dict[str, Any]:
    """
    Parse a planning document and merge it into the canvas as one undoable step.
    Matched nodes only get their empty fields filled; everything else is added.
    """
    canvas = require_canvas(project_id)
    content = body.text.strip()
    if not content:
        SmartLogger.log(
            "WARNING",
            "Document import rejected: empty content.",
            category="ingestion.api.document.empty",
            params=http_context(request),
        )
        raise HTTPException(status_code=400, detail="Document content is empty")

    SmartLogger.log(
        "INFO",
        "Document import received.",
        category="ingestion.api.document",
        params={
            **http_context(request),
            "inputs": {
                "chars": len(content),
                "sha256": sha256_text(content),
                "preview": summarize_for_log(content, max_str=200),
            },
        },
    )
    plan = canvas.import_document(
        content,
        features_detailed=body.featuresDetailed,
        screens_detailed=body.screensDetailed,
    )
    summary = plan.summary.to_dict()
    SmartLogger.log(
        "INFO",
        "Document import applied.",
        category="ingestion.api.document.done",
        params={**http_context(request), "summary": summarize_for_log(summary)},
    )
    return {"mode": plan.mode, "summary": summary, "canvas": canvas_state(project_id, canvas)}


@router.post("/{project_id}/import/apply")
async def apply_import(project_id: str, body: ApplyImportRequest, request: Request) -> dict[str, Any]:
    """Apply caller-resolved field updates and new nodes/edges as one undoable step."""
    canvas = require_canvas(project_id)
    counts = canvas.smart_import(
        [u.to_update() for u in body.updates],
        [n.to_node() for n in body.newNodes],
        [e.to_edge() for e in body.newEdges],
    )
    SmartLogger.log(
        "INFO",
        "Smart import applied.",
        category="ingestion.api.apply",
        params={**http_context(request), "result": counts},
    )
    return {"result": counts, "canvas": canvas_state(project_id, canvas)}
