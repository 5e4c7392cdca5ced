"""Generation service - turns a project's ordered images into one video."""

import logging
import tempfile
import time
import uuid
from pathlib import Path
from typing import Optional

from slideshow.models.domain import Project, ProjectStatus
from slideshow.repositories.artifact_store import ArtifactStore
from slideshow.repositories.project_repository import ProjectRepository
from slideshow.services.config_service import GenerationSettings
from slideshow.services.encoder import Encoder
from slideshow.services.errors import (
    EmptyInputError,
    MissingAssetError,
    ProjectNotFoundError,
    StagingFailedError,
)
from slideshow.services.frame_stager import FrameStager

logger = logging.getLogger(__name__)


class GenerationService:
    """
    Service for running one generation attempt end to end.

    Responsibilities:
    - Own every project status transition of an attempt
      (processing → completed | failed)
    - Validate inputs, stage frames, drive the encoder
    - Remove the staging area whatever the outcome

    Does NOT:
    - Serialize attempts for the same project (that's GenerationRunner)
    - Retry anything; a failed attempt is re-triggered by calling again
    """

    def __init__(
        self,
        project_repo: ProjectRepository,
        store: ArtifactStore,
        encoder: Encoder,
        settings: GenerationSettings,
        stager: Optional[FrameStager] = None,
    ):
        self.project_repo = project_repo
        self.store = store
        self.encoder = encoder
        self.settings = settings
        self.stager = stager or FrameStager(store)

    def generate(self, project_id: int) -> Project:
        """
        Run one generation attempt for a project.

        The project is marked ``processing`` before any file I/O and marked
        ``completed`` or ``failed`` only after all file I/O has finished.

        Returns:
            The updated project (status ``completed``, new ``output_path``)

        Raises:
            ProjectNotFoundError, EmptyInputError, MissingAssetError,
            StagingFailedError, EncodeFailedError: re-raised unchanged after
            the project has been marked ``failed``
        """
        logger.info("Generation started for project %s (encoder: %s)", project_id, self.encoder.name)
        self.mark_processing(project_id)

        staging_dir = None
        output_path = None
        try:
            project = self.project_repo.get(project_id)
            if not project:
                raise ProjectNotFoundError(project_id)

            images = self.project_repo.list_images_ordered(project_id)
            if not images:
                raise EmptyInputError(project_id)

            for image in images:
                if not self.store.exists(image.file_path):
                    raise MissingAssetError(image.file_path)

            output_path = self.allocate_output_path(project_id)
            self.prepare_output_dir()
            staging_dir = self.allocate_staging_dir(project_id)

            frames = self.stager.stage([image.file_path for image in images], staging_dir)
            self.encoder.encode(
                frames,
                self.store.resolve(output_path),
                project.duration_per_image,
                project.fps,
            )
        except Exception as e:
            self._remove_staging(staging_dir)
            self._fail(project_id, output_path, e)
            raise

        self._remove_staging(staging_dir)
        try:
            updated = self.project_repo.set_status(project_id, ProjectStatus.COMPLETED, output_path)
        except Exception as e:
            # Nothing may point at the new video, so it is discarded too.
            self._fail(project_id, output_path, e)
            raise
        if updated is None:
            # Deleted while encoding; the video stays in the store.
            raise ProjectNotFoundError(project_id)

        if self.encoder.is_placeholder:
            logger.warning("Project %s completed with PLACEHOLDER output %s", project_id, output_path)
        else:
            logger.info("Project %s completed: %s", project_id, output_path)
        return updated

    def mark_processing(self, project_id: int) -> Optional[Project]:
        """Persist ``processing`` for an attempt that is about to run."""
        return self.project_repo.set_status(project_id, ProjectStatus.PROCESSING)

    def allocate_output_path(self, project_id: int) -> str:
        """Unique store-relative output path for one attempt."""
        return (
            f"{self.settings.videos_subdir}/project_{project_id}_"
            f"{time.time_ns()}_{uuid.uuid4().hex[:8]}{self.settings.output_extension}"
        )

    def prepare_output_dir(self) -> Path:
        """Create the videos directory in the store."""
        try:
            return self.store.makedirs(self.settings.videos_subdir)
        except OSError as e:
            raise StagingFailedError(
                self.settings.videos_subdir, f"cannot create output directory: {e}"
            ) from e

    def allocate_staging_dir(self, project_id: int) -> Path:
        """Create a fresh, uniquely named staging directory."""
        staging_root = self.settings.staging_root
        try:
            staging_root.mkdir(parents=True, exist_ok=True)
            return Path(tempfile.mkdtemp(prefix=f"project_{project_id}_", dir=staging_root))
        except OSError as e:
            raise StagingFailedError(str(staging_root), f"cannot create staging area: {e}") from e

    def _fail(self, project_id: int, output_path: Optional[str], error: Exception) -> None:
        """Discard the attempt's output and persist ``failed``; never raises."""
        self._discard_output(output_path)
        self._mark_failed(project_id)
        logger.error("Generation failed for project %s: %s", project_id, error)

    def _remove_staging(self, staging_dir: Optional[Path]) -> None:
        """Best-effort staging removal; failures are logged, never raised."""
        if staging_dir is None:
            return
        try:
            self.store.remove(staging_dir, recursive=True)
        except Exception as e:
            logger.error("Could not remove staging area %s: %s", staging_dir, e)

    def _discard_output(self, output_path: Optional[str]) -> None:
        """Remove a partially written output of a failed attempt."""
        if output_path is None:
            return
        try:
            if self.store.remove(output_path):
                logger.info("Removed partial output %s", output_path)
        except Exception as e:
            logger.error("Could not remove partial output %s: %s", output_path, e)

    def _mark_failed(self, project_id: int) -> None:
        """Persist ``failed`` without touching output_path; never raises."""
        try:
            self.project_repo.set_status(project_id, ProjectStatus.FAILED)
        except Exception as e:
            logger.error("Failed to update project %s status to failed: %s", project_id, e)
