from __future__ import annotations

from fastapi import HTTPException

from coursetrack.services.errors import ServiceError


def http_error(exc: ServiceError) -> HTTPException:
    """Translate a typed service failure into the response the API answers with."""
    return HTTPException(status_code=exc.status_code, detail={"message": exc.message})
