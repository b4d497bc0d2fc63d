from typing import Generic, Optional, TypeVar

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..core.errors import ResponseCode, envelope

T = TypeVar("T")


class ResponseStatus(BaseModel, Generic[T]):
    code: str
    description: str
    data: Optional[T] = None


class BasicResponse(BaseModel, Generic[T]):
    """Uniform wrapper around every API response body"""
    is_successful: bool
    response: ResponseStatus[T]


def success(data=None, description: str = "Request successful", status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Wrap a payload (model, list of models or plain data) in the success envelope."""
    return JSONResponse(status_code=status_code, content=envelope(ResponseCode.SUCCESS, description, data))
