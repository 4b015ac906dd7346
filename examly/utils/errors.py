from fastapi import Request
from fastapi.responses import JSONResponse
from typing import Optional

class ApiError(Exception):
    """Error surfaced to the caller as ``{"message": ..., "error": ...}``"""

    def __init__(self, status_code: int, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error

async def api_error_handler(request: Request, exc: ApiError):
    content = {"message": exc.message}
    if exc.error is not None:
        content["error"] = exc.error
    return JSONResponse(status_code=exc.status_code, content=content)
