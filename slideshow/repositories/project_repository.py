"""Project repository - filesystem implementation of the project ledger."""

import json
import logging
import os
import shutil
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from slideshow.models.domain import Image, Project, ProjectStatus
from slideshow.repositories.base import Repository

logger = logging.getLogger(__name__)


class ProjectRepository(Repository[Project]):
    """
    Repository for project and image records.

    Current implementation: Filesystem (JSON files)
        <ledger_dir>/sequences.json
        <ledger_dir>/projects/<id>/project_state.json
        <ledger_dir>/projects/<id>/images.json

    Every public method holds the repository lock for its whole duration and
    replaces files atomically, so each call is atomic with respect to other
    threads using the same instance. Images live inside their project's
    directory, so deleting a project cascades to its images.
    """

    def __init__(self, ledger_dir: Path):
        self.ledger_dir = Path(ledger_dir)
        self.projects_dir = self.ledger_dir / "projects"
        self.projects_dir.mkdir(parents=True, exist_ok=True)
        self._sequence_file = self.ledger_dir / "sequences.json"
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def get(self, project_id: int) -> Optional[Project]:
        """Get project by id."""
        with self._lock:
            return self._load_project(self._project_dir(project_id))

    def list(self) -> List[Project]:
        """List all projects, sorted by creation date (newest first)."""
        with self._lock:
            projects = []
            try:
                entries = list(self.projects_dir.iterdir())
            except OSError:
                return projects

            for project_path in entries:
                if project_path.is_dir():
                    project = self._load_project(project_path)
                    if project:
                        projects.append(project)

        return sorted(projects, key=lambda p: (p.created_at, p.id), reverse=True)

    def create(self, name: str, duration_per_image: float, fps: int) -> Project:
        """Create a new project in ``pending`` state with a fresh id."""
        with self._lock:
            now = datetime.now()
            project = Project(
                id=self._next_id("project"),
                name=name,
                status=ProjectStatus.PENDING,
                output_path=None,
                duration_per_image=float(duration_per_image),
                fps=int(fps),
                created_at=now,
                updated_at=now,
            )
            return self.save(project)

    def save(self, project: Project) -> Project:
        """Save project state to filesystem."""
        with self._lock:
            project_dir = self._project_dir(project.id)
            project_dir.mkdir(parents=True, exist_ok=True)

            state = {
                "id": project.id,
                "name": project.name,
                "status": project.status.value,
                "output_path": project.output_path,
                "duration_per_image": project.duration_per_image,
                "fps": project.fps,
                "created_at": project.created_at.isoformat(),
                "updated_at": project.updated_at.isoformat(),
            }
            self._write_json(project_dir / "project_state.json", state)
            return project

    def delete(self, project_id: int) -> bool:
        """Delete project directory, including its image records."""
        with self._lock:
            project_path = self._project_dir(project_id)

            if project_path.exists():
                shutil.rmtree(project_path)
                return True

            return False

    def set_status(
        self,
        project_id: int,
        status: ProjectStatus,
        output_path: Optional[str] = None,
    ) -> Optional[Project]:
        """Update status (and output path when given) in one atomic call.

        Returns the updated project, or None if it does not exist.
        """
        with self._lock:
            project = self.get(project_id)
            if not project:
                return None

            project.status = status
            if output_path is not None:
                project.output_path = output_path
            project.updated_at = datetime.now()
            return self.save(project)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def add_image(
        self,
        project_id: int,
        filename: str,
        file_path: str,
        file_size: int,
        mime_type: str,
        order_index: int,
    ) -> Optional[Image]:
        """Record a new image for a project. Returns None if project missing."""
        with self._lock:
            if not self.get(project_id):
                return None

            image = Image(
                id=self._next_id("image"),
                project_id=project_id,
                filename=filename,
                file_path=file_path,
                file_size=file_size,
                mime_type=mime_type,
                order_index=order_index,
                uploaded_at=datetime.now(),
            )
            records = self._read_image_records(project_id)
            records.append(self._image_to_record(image))
            self._write_json(self._images_file(project_id), records)
            return image

    def list_images_ordered(self, project_id: int) -> List[Image]:
        """List a project's images in frame order.

        Sorted by order_index, ties broken by image id so that the order is
        identical on every call for an unmodified project.
        """
        with self._lock:
            images = [
                self._record_to_image(record)
                for record in self._read_image_records(project_id)
            ]
        return sorted(images, key=lambda image: image.sort_key)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _project_dir(self, project_id: int) -> Path:
        return self.projects_dir / str(int(project_id))

    def _images_file(self, project_id: int) -> Path:
        return self._project_dir(project_id) / "images.json"

    def _load_project(self, project_path: Path) -> Optional[Project]:
        """Load project from filesystem."""
        state_file = project_path / "project_state.json"

        try:
            with open(state_file, encoding='utf-8') as f:
                state = json.load(f)

            return Project(
                id=int(state["id"]),
                name=state["name"],
                status=ProjectStatus(state["status"]),
                output_path=state.get("output_path"),
                duration_per_image=float(state["duration_per_image"]),
                fps=int(state["fps"]),
                created_at=datetime.fromisoformat(state["created_at"]),
                updated_at=datetime.fromisoformat(state["updated_at"]),
            )
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            logger.warning("Unreadable project state %s: %s", state_file, e)
            return None

    def _read_image_records(self, project_id: int) -> List[Dict[str, Any]]:
        images_file = self._images_file(project_id)
        if not images_file.exists():
            return []
        with open(images_file, encoding='utf-8') as f:
            return json.load(f)

    @staticmethod
    def _image_to_record(image: Image) -> Dict[str, Any]:
        return {
            "id": image.id,
            "project_id": image.project_id,
            "filename": image.filename,
            "file_path": image.file_path,
            "file_size": image.file_size,
            "mime_type": image.mime_type,
            "order_index": image.order_index,
            "uploaded_at": image.uploaded_at.isoformat(),
        }

    @staticmethod
    def _record_to_image(record: Dict[str, Any]) -> Image:
        return Image(
            id=int(record["id"]),
            project_id=int(record["project_id"]),
            filename=record["filename"],
            file_path=record["file_path"],
            file_size=int(record["file_size"]),
            mime_type=record["mime_type"],
            order_index=int(record["order_index"]),
            uploaded_at=datetime.fromisoformat(record["uploaded_at"]),
        )

    def _next_id(self, kind: str) -> int:
        """Allocate the next id for ``kind`` from the persisted sequence."""
        sequences: Dict[str, int] = {}
        if self._sequence_file.exists():
            with open(self._sequence_file, encoding='utf-8') as f:
                sequences = json.load(f)

        next_id = int(sequences.get(kind, 0)) + 1
        sequences[kind] = next_id
        self._write_json(self._sequence_file, sequences)
        return next_id

    @staticmethod
    def _write_json(path: Path, data: Any) -> None:
        """Write JSON atomically (temp file + replace)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        with open(temp_path, "w", encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        os.replace(temp_path, path)
