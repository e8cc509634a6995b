"""TMDb clients for the person change feed and person details."""

from person_updates.ingestion.http import build_session
from person_updates.ingestion.person_refresher import PersonRefresher, TmdbPersonRefresher
from person_updates.ingestion.tmdb_client import TmdbChangesClient, decode_changes_page

__all__ = [
    "PersonRefresher",
    "TmdbChangesClient",
    "TmdbPersonRefresher",
    "build_session",
    "decode_changes_page",
]
