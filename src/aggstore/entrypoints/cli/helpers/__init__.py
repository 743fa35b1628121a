"""CLI helpers for aggstore.

URL sanitization for safe display, NAME=LEVEL logger option parsing, and
stderr message emitters with emoji→ASCII fallbacks.
"""

from .db_url import sanitize_url
from .messages import error, success, warn

__all__ = ["sanitize_url", "warn", "success", "error"]
