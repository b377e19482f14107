"""Standard response envelope: {responseCode, responseDesc, message, data}."""
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

RESPONSE_SUCCESS_DESC = "SUCCESS"
RESPONSE_FAILED_DESC = "FAILED"


def _payload(status_code: int, desc: str, message: str, data: Any) -> dict:
    # Empty objects are reported as null
    if isinstance(data, dict) and not data:
        data = None
    return {
        "responseCode": status_code,
        "responseDesc": desc,
        "message": message,
        "data": jsonable_encoder(data, by_alias=True),
    }


def success(data: Any = None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=_payload(status_code, RESPONSE_SUCCESS_DESC, message, data))


def failure(status_code: int, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=_payload(status_code, RESPONSE_FAILED_DESC, message, data))
