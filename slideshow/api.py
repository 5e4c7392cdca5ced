"""REST API endpoints for the slideshow service."""

import asyncio
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from slideshow.env_config import DEFAULT_LEDGER_DIR, DEFAULT_STORAGE_DIR
from slideshow.generation_runner import GenerationRunner
from slideshow.models.dto import (
    ErrorResponse,
    ImageUploadRequest,
    ProjectCreateRequest,
    StatusUpdateRequest,
    VideoDownloadResponse,
)
from slideshow.repositories.artifact_store import ArtifactStore
from slideshow.repositories.project_repository import ProjectRepository
from slideshow.services.config_service import get_config_service
from slideshow.services.encoder import PlaceholderEncoder, create_encoder
from slideshow.services.errors import (
    EmptyInputError,
    GenerationError,
    GenerationInProgressError,
    MissingAssetError,
    ProjectNotFoundError,
)
from slideshow.services.generation_service import GenerationService
from slideshow.services.project_service import ProjectService
from slideshow.services.video_service import get_video_service

router = APIRouter()

_project_repo = None
_artifact_store = None
_project_service = None
_generation_runner = None


def get_project_repo() -> ProjectRepository:
    """Get project repository instance."""
    global _project_repo
    if _project_repo is None:
        _project_repo = ProjectRepository(Path(DEFAULT_LEDGER_DIR))
    return _project_repo


def get_artifact_store() -> ArtifactStore:
    """Get artifact store instance."""
    global _artifact_store
    if _artifact_store is None:
        _artifact_store = ArtifactStore(Path(DEFAULT_STORAGE_DIR))
    return _artifact_store


def get_project_service(
    project_repo: ProjectRepository = Depends(get_project_repo),
    store: ArtifactStore = Depends(get_artifact_store),
) -> ProjectService:
    """Get project service instance."""
    global _project_service
    if _project_service is None:
        _project_service = ProjectService(project_repo, store)
    return _project_service


def get_generation_runner(
    project_repo: ProjectRepository = Depends(get_project_repo),
    store: ArtifactStore = Depends(get_artifact_store),
) -> GenerationRunner:
    """Get generation runner; the encoder strategy is chosen here, once."""
    global _generation_runner
    if _generation_runner is None:
        settings = get_config_service().get_generation_settings(store.root)
        service = GenerationService(project_repo, store, create_encoder(settings), settings)
        _generation_runner = GenerationRunner(service)
    return _generation_runner


def reset_dependencies() -> None:
    """Drop cached singletons (used after changing directories in tests)."""
    global _project_repo, _artifact_store, _project_service, _generation_runner
    _project_repo = None
    _artifact_store = None
    _project_service = None
    _generation_runner = None


def generation_error_status(error: GenerationError) -> int:
    """HTTP status code for a classified generation failure."""
    if isinstance(error, ProjectNotFoundError):
        return 404
    if isinstance(error, (EmptyInputError, MissingAssetError)):
        return 400
    if isinstance(error, GenerationInProgressError):
        return 409
    return 500


def _error_response(error: GenerationError) -> JSONResponse:
    body = ErrorResponse(detail=str(error), error_code=error.error_code)
    return JSONResponse(status_code=generation_error_status(error), content=body.model_dump())


@router.post("/projects")
async def create_project(
    request: ProjectCreateRequest,
    project_service: ProjectService = Depends(get_project_service),
):
    """Create a new video project."""
    project = project_service.create_project(request)
    return project.model_dump(mode="json")


@router.get("/projects")
async def list_projects(
    project_service: ProjectService = Depends(get_project_service),
):
    """List all projects (newest first)."""
    return project_service.list_projects().model_dump(mode="json")


@router.get("/projects/{project_id}")
async def get_project(
    project_id: int,
    project_service: ProjectService = Depends(get_project_service),
):
    """Get project details and status."""
    project = project_service.get_project(project_id)

    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    return project.model_dump(mode="json")


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: int,
    project_service: ProjectService = Depends(get_project_service),
    runner: GenerationRunner = Depends(get_generation_runner),
):
    """Delete a project and its images (generated videos are kept)."""
    if runner.is_active(project_id):
        raise HTTPException(status_code=409, detail="Generation in progress for this project")

    if not project_service.delete_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    return {"status": "deleted", "project_id": project_id}


@router.post("/projects/{project_id}/images")
async def upload_image(
    project_id: int,
    request: ImageUploadRequest,
    project_service: ProjectService = Depends(get_project_service),
):
    """Upload one base64-encoded image to a project."""
    if not project_service.get_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    try:
        image = project_service.upload_image(project_id, request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return image.model_dump(mode="json")


@router.get("/projects/{project_id}/images")
async def get_project_images(
    project_id: int,
    project_service: ProjectService = Depends(get_project_service),
):
    """List a project's images in frame order."""
    images = project_service.get_project_images(project_id)
    return {"images": [image.model_dump(mode="json") for image in images]}


@router.put("/projects/{project_id}/status")
async def update_project_status(
    project_id: int,
    request: StatusUpdateRequest,
    project_service: ProjectService = Depends(get_project_service),
):
    """Manually override a project's status."""
    project = project_service.update_project_status(
        project_id, request.status, request.output_path
    )

    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    return project.model_dump(mode="json")


@router.post("/projects/{project_id}/generate")
async def generate_video(
    project_id: int,
    background: bool = Query(False, description="Return immediately and generate on a worker thread"),
    project_service: ProjectService = Depends(get_project_service),
    runner: GenerationRunner = Depends(get_generation_runner),
):
    """Generate the project's video from its ordered images."""
    if background:
        if not project_service.get_project(project_id):
            raise HTTPException(status_code=404, detail="Project not found")
        try:
            runner.start(project_id)
        except GenerationInProgressError as e:
            return _error_response(e)
        return JSONResponse(
            status_code=202,
            content={"status": "started", "project_id": project_id},
        )

    try:
        await asyncio.to_thread(runner.run, project_id)
    except GenerationError as e:
        return _error_response(e)

    return project_service.get_project(project_id).model_dump(mode="json")


@router.get("/projects/{project_id}/video")
async def get_video(
    project_id: int,
    project_service: ProjectService = Depends(get_project_service),
    store: ArtifactStore = Depends(get_artifact_store),
):
    """Get the download URL and metadata of the generated video."""
    project = project_service.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    if not project.output_path or not store.exists(project.output_path):
        raise HTTPException(status_code=404, detail=f"Video not yet generated for project {project_id}")

    video_file = store.resolve(project.output_path)
    if PlaceholderEncoder.is_placeholder_file(video_file):
        # Marker file written without ffmpeg; not a playable video.
        video_info = {"placeholder": True}
    else:
        video_info = await asyncio.to_thread(get_video_service().get_video_info, video_file)
    response = VideoDownloadResponse(
        project_id=project_id,
        download_url=f"/videos/{Path(project.output_path).name}",
        output_path=project.output_path,
        video_info=video_info,
    )
    return response.model_dump(mode="json")
