"""Domain entities - internal representation (framework-agnostic)."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ProjectStatus(str, Enum):
    """Project status enumeration."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True once a generation attempt has finished."""
        return self in (ProjectStatus.COMPLETED, ProjectStatus.FAILED)


@dataclass
class Project:
    """Video project domain entity."""
    id: int
    name: str
    status: ProjectStatus
    output_path: Optional[str]
    duration_per_image: float
    fps: int
    created_at: datetime
    updated_at: datetime


@dataclass
class Image:
    """Uploaded image domain entity.

    ``file_path`` is relative to the artifact store root.
    """
    id: int
    project_id: int
    filename: str
    file_path: str
    file_size: int
    mime_type: str
    order_index: int
    uploaded_at: datetime

    @property
    def sort_key(self) -> tuple:
        """Frame order: order_index, then insertion (id) order."""
        return (self.order_index, self.id)
