"""API Dependencies"""

from typing import Dict

from fastapi import Request

from app.database import get_db  # noqa: F401  re-exported for endpoints


def request_context(request: Request) -> Dict[str, object]:
    """Log fields identifying the current request"""
    return {
        "path": request.url.path,
        "correlation_id": getattr(request.state, "request_id", None),
    }
