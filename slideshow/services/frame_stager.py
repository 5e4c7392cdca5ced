"""Frame stager - copies ordered images into a staging area."""

import logging
from pathlib import Path
from typing import List, Sequence

from slideshow.repositories.artifact_store import ArtifactStore
from slideshow.services.errors import StagingFailedError
from slideshow.utils.media import frame_name

logger = logging.getLogger(__name__)


class FrameStager:
    """
    Copies source images into a staging directory as ``frame_0000.ext``,
    ``frame_0001.ext``, ... so that directory order equals playback order
    regardless of the original upload names.
    """

    def __init__(self, store: ArtifactStore):
        self.store = store

    def stage(self, source_paths: Sequence[str], staging_dir: Path) -> List[Path]:
        """Copy ``source_paths`` in order into ``staging_dir``.

        Args:
            source_paths: Store paths of the images, already in frame order
            staging_dir: Existing, empty directory owned by this attempt

        Returns:
            Absolute paths of the staged frames, in the same order

        Raises:
            StagingFailedError: On the first copy that fails
        """
        total = len(source_paths)
        staged = []

        for index, source in enumerate(source_paths):
            target = Path(staging_dir) / frame_name(index, total, Path(source).suffix)
            try:
                staged.append(self.store.copy(source, target))
            except (OSError, ValueError) as e:
                raise StagingFailedError(str(source), str(e)) from e

        logger.debug("Staged %d frame(s) into %s", total, staging_dir)
        return staged
