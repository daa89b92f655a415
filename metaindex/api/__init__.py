"""metaindex API package.

Optional read-only FastAPI service that serves the normalized view of an
index to the static gallery. It never writes the index file.
"""

from .server import create_app  # noqa: F401
