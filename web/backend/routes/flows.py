"""Flow transform routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from askflow.errors import CatalogUnavailableError, FlowSerializationError
from askflow.visual.transform import deserialize_flow, serialize_flow

from ..models import (
    CoercionIssueModel,
    DeserializeRequest,
    DeserializeResponse,
    DroppedEdgeModel,
    SerializeRequest,
    SerializeResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/flows", tags=["flows"])


@router.post("/deserialize", response_model=DeserializeResponse)
async def deserialize(request: DeserializeRequest):
    """Convert a stored flow to its editable form, dropping edges the catalog rejects."""
    try:
        loaded = deserialize_flow(request.flow, request.definitions)
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return DeserializeResponse(
        flow=loaded.flow,
        dropped_edges=[DroppedEdgeModel(edge=d.edge, reason=d.reason.value) for d in loaded.dropped_edges],
    )


@router.post("/serialize", response_model=SerializeResponse)
async def serialize(request: SerializeRequest):
    """Convert an editable flow back to its stored form."""
    try:
        saved = serialize_flow(
            request.flow,
            request.definitions,
            previous=request.previous,
            strict=request.strict,
        )
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except FlowSerializationError as e:
        logger.info("Rejected flow '%s': %s", request.flow.name, e)
        raise HTTPException(status_code=422, detail=[i.to_dict() for i in e.issues])

    return SerializeResponse(
        flow=saved.flow,
        issues=[CoercionIssueModel(**i.to_dict()) for i in saved.issues],
    )
