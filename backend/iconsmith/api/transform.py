"""POST /api/transform — scale + translate one path."""

from __future__ import annotations

from fastapi import APIRouter

from iconsmith.errors import MalformedPathError
from iconsmith.models.requests import TransformRequest
from iconsmith.models.responses import TransformResponse
from iconsmith.svg.bbox import bounding_box_of
from iconsmith.svg.transform import apply_transform

router = APIRouter()


@router.post("/transform", response_model=TransformResponse)
async def transform(req: TransformRequest) -> TransformResponse:
    try:
        path_data = apply_transform(req.path_data, req.scale, req.translate_x, req.translate_y)
        box = bounding_box_of(path_data)
    except MalformedPathError as e:
        return TransformResponse(error=str(e))
    return TransformResponse(path_data=path_data, bounding_box=box)
