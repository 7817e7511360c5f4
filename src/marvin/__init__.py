"""Amazing Marvin API adapter: HTTP client and tool catalog."""

from marvin.client import MarvinClient
from marvin.tools import CATALOG

__all__ = ["MarvinClient", "CATALOG"]
