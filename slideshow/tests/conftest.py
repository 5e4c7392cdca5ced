"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest

from slideshow.models.domain import Project
from slideshow.repositories.artifact_store import ArtifactStore
from slideshow.repositories.project_repository import ProjectRepository
from slideshow.services.config_service import GenerationSettings
from slideshow.services.encoder import EncodePlan, Encoder, build_plan
from slideshow.services.generation_service import GenerationService


class FakeEncoder(Encoder):
    """In-memory encoder that records what it was asked to encode.

    Staged frame names and bytes are captured during ``encode`` because the
    staging area is removed as soon as the attempt ends.
    """

    name = "fake"

    def __init__(self, settings: GenerationSettings):
        self.settings = settings
        self.plans: List[EncodePlan] = []
        self.frame_names: List[List[str]] = []
        self.frame_bytes: List[List[bytes]] = []
        self.output_paths: List[Path] = []
        self.fail_with: Optional[Exception] = None
        self.write_before_failing = False

    def encode(self, frame_paths: Sequence[Path], output_path: Path, seconds_per_frame: float, fps: int) -> None:
        plan = build_plan(frame_paths, seconds_per_frame, fps, self.settings)
        self.plans.append(plan)
        self.frame_names.append([p.name for p in plan.frame_paths])
        self.frame_bytes.append([p.read_bytes() for p in plan.frame_paths])
        self.output_paths.append(Path(output_path))

        if self.fail_with is not None:
            if self.write_before_failing:
                Path(output_path).write_bytes(b"partial")
            raise self.fail_with

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_bytes(b"fake video")


@pytest.fixture
def store(tmp_path) -> ArtifactStore:
    """Artifact store rooted in a temporary directory."""
    return ArtifactStore(tmp_path / "storage")


@pytest.fixture
def project_repo(tmp_path) -> ProjectRepository:
    """Project ledger in a temporary directory."""
    return ProjectRepository(tmp_path / "ledger")


@pytest.fixture
def settings(store) -> GenerationSettings:
    """Generation settings pointing at the temporary store."""
    return GenerationSettings(storage_dir=store.root, width=320, height=240, timeout_seconds=60)


@pytest.fixture
def fake_encoder(settings) -> FakeEncoder:
    return FakeEncoder(settings)


@pytest.fixture
def generation_service(project_repo, store, fake_encoder, settings) -> GenerationService:
    return GenerationService(project_repo, store, fake_encoder, settings)


@pytest.fixture
def make_project(project_repo, store):
    """Factory creating a project with images stored in the artifact store.

    Each image is ``(filename, content, order_index)``; images are inserted
    in the given order.
    """
    def _make(
        images: Sequence[Tuple[str, bytes, int]] = (),
        name: str = "holiday",
        duration_per_image: float = 2.0,
        fps: int = 30,
    ) -> Project:
        project = project_repo.create(name, duration_per_image, fps)
        for filename, content, order_index in images:
            path = store.write(f"uploads/images/project_{project.id}/{filename}", content)
            project_repo.add_image(
                project_id=project.id,
                filename=filename,
                file_path=path,
                file_size=len(content),
                mime_type="image/png",
                order_index=order_index,
            )
        return project

    return _make
