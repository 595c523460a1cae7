from .helpers import (
    serialize_mongo_doc,
    success_response,
    error_response,
    utc_now,
)
from .logger import Logger

__all__ = [
    "serialize_mongo_doc",
    "success_response",
    "error_response",
    "utc_now",
    "Logger",
]
