"""Generation execution wrapper for the API layer."""

import logging
import threading
from typing import Dict, Optional, Set

from slideshow.models.domain import Project
from slideshow.services.errors import GenerationError, GenerationInProgressError
from slideshow.services.generation_service import GenerationService

logger = logging.getLogger(__name__)


class GenerationRunner:
    """
    Runs generation attempts inline or on background threads.

    GenerationService does not order concurrent attempts for the same
    project, so this runner allows at most one active attempt per project
    id within the process. Attempts for different projects run in parallel.
    """

    def __init__(self, generation_service: GenerationService):
        self.generation_service = generation_service
        self._active: Set[int] = set()
        self._threads: Dict[int, threading.Thread] = {}
        self._lock = threading.Lock()

    def is_active(self, project_id: int) -> bool:
        with self._lock:
            return project_id in self._active

    def run(self, project_id: int) -> Project:
        """Run one attempt on the calling thread.

        Raises:
            GenerationInProgressError: If an attempt is already active
        """
        self._claim(project_id)
        try:
            return self.generation_service.generate(project_id)
        finally:
            self._release(project_id)

    def start(self, project_id: int) -> threading.Thread:
        """Start one attempt on a daemon thread and return immediately.

        The project reads ``processing`` before this returns, so a caller
        polling right away never sees the previous attempt's status.

        Raises:
            GenerationInProgressError: If an attempt is already active
        """
        self._claim(project_id)
        try:
            self.generation_service.mark_processing(project_id)
        except Exception:
            self._release(project_id)
            raise

        thread = threading.Thread(
            target=self._run_in_background,
            args=(project_id,),
            name=f"generate-{project_id}",
            daemon=True,
        )
        with self._lock:
            self._threads[project_id] = thread
        try:
            thread.start()
        except RuntimeError:
            self._release(project_id)
            raise
        return thread

    def wait(self, project_id: int, timeout: Optional[float] = None) -> bool:
        """Block until a background attempt finishes. True if none is running."""
        with self._lock:
            thread = self._threads.get(project_id)
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _run_in_background(self, project_id: int) -> None:
        try:
            self.generation_service.generate(project_id)
        except GenerationError as e:
            # Already recorded as failed on the project.
            logger.warning("Background generation for project %s failed: %s", project_id, e)
        except Exception:
            logger.exception("Background generation for project %s crashed", project_id)
        finally:
            self._release(project_id)

    def _claim(self, project_id: int) -> None:
        with self._lock:
            if project_id in self._active:
                raise GenerationInProgressError(project_id)
            self._active.add(project_id)

    def _release(self, project_id: int) -> None:
        with self._lock:
            self._active.discard(project_id)
            thread = self._threads.get(project_id)
            if thread is not None and thread is threading.current_thread():
                del self._threads[project_id]
