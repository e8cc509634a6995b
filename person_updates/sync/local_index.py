"""Index of people already cached on disk."""

from pathlib import Path

import structlog

log = structlog.stdlib.get_logger()


class LocalPersonIndex:
    """Lists the people cached under the people data root.

    Each cached person lives in a directory named after its TMDb id.
    """

    def __init__(self, root: Path | str):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> Path:
        """Create the data root if it does not exist yet."""
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root

    def list_ids(self) -> set[str]:
        """
        List the ids of all cached people.

        Returns:
            Names of the immediate child directories of the data root
        """
        self.ensure_root()
        ids = {entry.name for entry in self._root.iterdir() if entry.is_dir()}
        log.debug("local_people_listed", root=str(self._root), count=len(ids))
        return ids

    def person_path(self, person_id: str) -> Path:
        """Data directory of one person."""
        return self._root / person_id
