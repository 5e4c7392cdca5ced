"""Classified failures raised by the generation pipeline.

Each error carries an ``error_code`` that the API layer exposes in
``ErrorResponse.error_code``.
"""

from typing import Optional


class GenerationError(Exception):
    """Base class for every generation failure."""

    error_code = "generation_failed"


class ProjectNotFoundError(GenerationError):
    error_code = "not_found"

    def __init__(self, project_id: int):
        super().__init__(f"Project with id {project_id} not found")
        self.project_id = project_id


class EmptyInputError(GenerationError):
    error_code = "empty_input"

    def __init__(self, project_id: int):
        super().__init__(f"No images found for project {project_id}")
        self.project_id = project_id


class MissingAssetError(GenerationError):
    error_code = "missing_asset"

    def __init__(self, path: str):
        super().__init__(f"Image file not found: {path}")
        self.path = path


class StagingFailedError(GenerationError):
    error_code = "staging_failed"

    def __init__(self, source_path: str, reason: str = ""):
        message = f"Failed to stage frame from {source_path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.source_path = source_path


class EncodeFailedError(GenerationError):
    """The encoder exited non-zero, timed out, or could not be spawned.

    ``exit_code`` is None when the process never produced one (spawn
    failure or timeout). ``diagnostics`` holds the tail of its output.
    """

    error_code = "encode_failed"

    def __init__(self, message: str, exit_code: Optional[int] = None, diagnostics: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.diagnostics = diagnostics


class GenerationInProgressError(GenerationError):
    error_code = "in_progress"

    def __init__(self, project_id: int):
        super().__init__(f"Generation already running for project {project_id}")
        self.project_id = project_id
