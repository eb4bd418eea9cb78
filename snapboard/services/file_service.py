import logging
from typing import List

from snapboard.utils import storage
from snapboard.utils.files import delete_files

logger = logging.getLogger(__name__)


class FileService:
    @staticmethod
    async def remove_asset_files(stored_filename: str) -> List[bool]:
        """Best-effort removal of the primary raster and its three thumbnails.

        A missing file counts as removed. Other failures are logged by
        ``delete_file`` and reported as ``False``; nothing is raised.
        """
        paths = storage.asset_paths(stored_filename)
        results = await delete_files(paths)

        failed = [str(path) for path, ok in zip(paths, results) if not ok]
        if failed:
            logger.warning("Could not remove %d file(s) of %s: %s", len(failed), stored_filename, failed)

        return results
