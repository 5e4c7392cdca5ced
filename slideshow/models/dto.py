"""Data Transfer Objects - API contracts."""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional, List, Dict, Any
from slideshow.models.domain import ProjectStatus


class ProjectDTO(BaseModel):
    """Project data for API responses."""
    id: int
    name: str
    status: ProjectStatus
    output_path: Optional[str] = None
    duration_per_image: float
    fps: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectCreateRequest(BaseModel):
    """Request to create a new video project."""
    name: str = Field(..., min_length=1, max_length=255)
    duration_per_image: float = Field(2.0, gt=0)
    fps: int = Field(30, ge=1, le=60)


class ProjectListResponse(BaseModel):
    """Response with list of projects."""
    projects: List[ProjectDTO]
    total: int


class ImageDTO(BaseModel):
    """Image metadata for API responses."""
    id: int
    project_id: int
    filename: str
    file_path: str
    file_size: int
    mime_type: str
    order_index: int
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ImageUploadRequest(BaseModel):
    """Request to upload one image (base64 encoded) to a project."""
    filename: str = Field(..., min_length=1, max_length=255)
    file_data: str = Field(..., min_length=1)
    mime_type: str
    order_index: int = Field(..., ge=0)


class StatusUpdateRequest(BaseModel):
    """Manual project status override."""
    status: ProjectStatus
    output_path: Optional[str] = None


class VideoDownloadResponse(BaseModel):
    """Location and metadata of a project's generated video."""
    project_id: int
    download_url: str
    output_path: str
    video_info: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
    error_code: Optional[str] = None
