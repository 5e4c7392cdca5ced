"""Project service - business logic for project and image management."""

import base64
import binascii
import logging
import uuid
from typing import Optional, List

from slideshow.env_config import UPLOADS_SUBDIR
from slideshow.models.domain import Image, Project, ProjectStatus
from slideshow.models.dto import (
    ImageDTO,
    ImageUploadRequest,
    ProjectCreateRequest,
    ProjectDTO,
    ProjectListResponse,
)
from slideshow.repositories.artifact_store import ArtifactStore
from slideshow.repositories.project_repository import ProjectRepository
from slideshow.services.config_service import get_config_service
from slideshow.utils.media import sanitize_filename

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Service for project management business logic.

    Responsibilities:
    - Enforce business rules (valid image payloads, existing projects, etc.)
    - Orchestrate project and image operations
    - Convert between domain entities and DTOs

    Does NOT:
    - Handle HTTP requests (that's API layer)
    - Generate videos (that's GenerationService)
    """

    def __init__(self, project_repo: ProjectRepository, store: ArtifactStore):
        self.project_repo = project_repo
        self.store = store
        self.config_service = get_config_service()

    def list_projects(self) -> ProjectListResponse:
        """List all projects."""
        projects = self.project_repo.list()

        return ProjectListResponse(
            projects=[self._to_dto(p) for p in projects],
            total=len(projects),
        )

    def get_project(self, project_id: int) -> Optional[ProjectDTO]:
        """Get project by id."""
        project = self.project_repo.get(project_id)

        if not project:
            return None

        return self._to_dto(project)

    def create_project(self, request: ProjectCreateRequest) -> ProjectDTO:
        """Create a new project in ``pending`` state."""
        project = self.project_repo.create(
            name=request.name,
            duration_per_image=request.duration_per_image,
            fps=request.fps,
        )
        logger.info("Created project %d (%s)", project.id, project.name)
        return self._to_dto(project)

    def upload_image(self, project_id: int, request: ImageUploadRequest) -> ImageDTO:
        """
        Store an uploaded image and record it on the project.

        Business rules:
        - Project must exist
        - MIME type must be one of the configured image types
        - Payload must be non-empty, valid base64
        """
        if not self.project_repo.get(project_id):
            raise ValueError(f"Project with id {project_id} not found")

        supported = self.config_service.get_supported_image_types()
        if request.mime_type not in supported:
            raise ValueError(
                f"Unsupported image type: {request.mime_type}. "
                f"Allowed: {', '.join(sorted(supported))}"
            )

        payload = request.file_data
        if payload.startswith("data:") and "," in payload:
            payload = payload.split(",", 1)[1]

        try:
            content = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("Image data is not valid base64")
        if not content:
            raise ValueError("Image data is empty")

        safe_name = sanitize_filename(request.filename)
        if "." not in safe_name:
            safe_name += supported[request.mime_type]
        stored_path = self.store.write(
            f"{UPLOADS_SUBDIR}/project_{project_id}/{uuid.uuid4().hex[:12]}_{safe_name}",
            content,
        )

        image = self.project_repo.add_image(
            project_id=project_id,
            filename=request.filename,
            file_path=stored_path,
            file_size=len(content),
            mime_type=request.mime_type,
            order_index=request.order_index,
        )
        if image is None:
            # Project deleted between the check and the insert.
            self.store.remove(stored_path)
            raise ValueError(f"Project with id {project_id} not found")

        return self._image_to_dto(image)

    def get_project_images(self, project_id: int) -> List[ImageDTO]:
        """List a project's images in frame order (empty if unknown)."""
        return [self._image_to_dto(i) for i in self.project_repo.list_images_ordered(project_id)]

    def update_project_status(
        self,
        project_id: int,
        status: ProjectStatus,
        output_path: Optional[str] = None,
    ) -> Optional[ProjectDTO]:
        """Update project status; output_path only changes when given."""
        project = self.project_repo.set_status(project_id, status, output_path)

        if not project:
            return None

        return self._to_dto(project)

    def delete_project(self, project_id: int) -> bool:
        """
        Delete a project, its image records and uploaded image files.

        Generated videos are kept.
        """
        if not self.project_repo.get(project_id):
            return False

        for image in self.project_repo.list_images_ordered(project_id):
            try:
                self.store.remove(image.file_path)
            except (OSError, ValueError) as e:
                logger.warning("Could not remove image file %s: %s", image.file_path, e)

        try:
            self.store.remove(f"{UPLOADS_SUBDIR}/project_{project_id}", recursive=True)
        except OSError as e:
            logger.warning("Could not remove upload directory for project %d: %s", project_id, e)

        return self.project_repo.delete(project_id)

    @staticmethod
    def _to_dto(project: Project) -> ProjectDTO:
        """Convert domain entity to DTO."""
        return ProjectDTO(
            id=project.id,
            name=project.name,
            status=project.status,
            output_path=project.output_path,
            duration_per_image=project.duration_per_image,
            fps=project.fps,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )

    @staticmethod
    def _image_to_dto(image: Image) -> ImageDTO:
        return ImageDTO.model_validate(image)
