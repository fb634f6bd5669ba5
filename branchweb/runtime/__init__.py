"""Runtime services for the Branch client.

This package provides session lifecycle management.
"""

from branchweb.runtime.session.manager import SessionManager

__all__ = ["SessionManager"]
