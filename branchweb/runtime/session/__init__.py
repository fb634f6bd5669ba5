"""Session subsystem for the Branch client.

Provides the session lifecycle manager.
"""

from branchweb.runtime.session.manager import SessionManager

__all__ = ["SessionManager"]
