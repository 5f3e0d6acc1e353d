"""Single config bag coercion routes (node or global configs)."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

from askflow.visual.coercion import load_config, save_config

from ..models import CoercionIssueModel, ConfigLoadRequest, ConfigSaveRequest, ConfigSaveResponse

router = APIRouter(prefix="/configs", tags=["configs"])


@router.post("/load")
async def load(request: ConfigLoadRequest) -> Dict[str, Any]:
    return load_config(request.config, request.config_schema)


@router.post("/save", response_model=ConfigSaveResponse)
async def save(request: ConfigSaveRequest):
    saved = save_config(
        request.config,
        request.config_schema,
        node_id=request.node_id,
        previous=request.previous,
    )
    return ConfigSaveResponse(
        config=saved.config,
        issues=[CoercionIssueModel(**i.to_dict()) for i in saved.issues],
    )
