"""Async Python client for the Branch deep linking and attribution API."""

from branchweb.client import Branch, close_branch, get_branch, init_branch
from branchweb.errors import (
    AlreadyInitialized,
    BranchError,
    InvalidRequest,
    MalformedResponse,
    NotInitialized,
    TransportError,
)
from branchweb.model import LinkRequest, PageContext, Session

__version__ = "0.1.0"

__all__ = [
    "AlreadyInitialized",
    "Branch",
    "BranchError",
    "InvalidRequest",
    "LinkRequest",
    "MalformedResponse",
    "NotInitialized",
    "PageContext",
    "Session",
    "TransportError",
    "close_branch",
    "get_branch",
    "init_branch",
]
