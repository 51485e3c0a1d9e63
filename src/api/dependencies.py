"""
FastAPI dependencies.
Provides the shared record store used by every route module.
"""
from typing import Any, Dict

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

# Will be initialized in main.py when the app starts
_store = None


def init_store(store):
    """Initialize the record store dependency. Called from main.py."""
    global _store
    _store = store


def _lazy_init():
    """Lazy-initialize the store from config if not already done."""
    global _store
    if _store is not None:
        return
    import config
    from storage.record_store import JsonRecordStore
    _store = JsonRecordStore(data_dir=config.DATA_DIR)


def get_store():
    """Get the record store instance."""
    _lazy_init()
    if _store is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Record store not initialized"
        )
    return _store


def error_response(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    """JSON error body in the ``{"error": message}`` shape clients expect."""
    body: Dict[str, Any] = {"error": message}
    return JSONResponse(status_code=status_code, content=body)
