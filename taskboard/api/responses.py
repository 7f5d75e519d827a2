"""Response envelopes: ``{message, data}`` on success, ``{message, error, stack}`` on failure."""
from typing import Any, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from taskboard.schemas.base import CamelModel


def _encode(data: Any) -> Any:
    if isinstance(data, CamelModel):
        return data.to_json()
    if isinstance(data, (list, tuple)):
        return [_encode(item) for item in data]
    if isinstance(data, dict):
        return {key: _encode(value) for key, value in data.items()}
    return jsonable_encoder(data)


def success(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    content = {"message": message}
    if data is not None:
        content["data"] = _encode(data)
    return JSONResponse(status_code=status_code, content=content)


def failure(message: str, status_code: int, error: Any = None, stack: Optional[List[str]] = None) -> JSONResponse:
    content = {"message": message}
    if error is not None:
        content["error"] = _encode(error)
    if stack:
        content["stack"] = stack
    return JSONResponse(status_code=status_code, content=content)
