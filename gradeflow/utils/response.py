"""
Standard API response format and utility functions.
"""

from typing import Any

from fastapi import HTTPException, status

from gradeflow.utils.result import ErrorKind, Result

STATUS_BY_KIND = {
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UPSTREAM_FAILURE: status.HTTP_502_BAD_GATEWAY,
}


def success_response(data: Any = None, message: str = "Success") -> dict:
    return {"success": True, "data": data, "message": message}


def unwrap_or_raise(result: Result) -> Any:
    """Return the result value, or raise the HTTP error matching its failure."""
    if result.ok:
        return result.value
    raise HTTPException(
        status_code=STATUS_BY_KIND[result.error.kind],
        detail={"error": result.error.kind.value, "message": result.error.message},
    )
