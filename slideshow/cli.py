"""Command-line entry point for the slideshow service.

Usage:
    python -m slideshow serve                  # Start the API server
    python -m slideshow serve --port 8080      # Use custom port
    python -m slideshow generate 3             # Generate project 3's video
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from slideshow.env_config import DEFAULT_LEDGER_DIR, DEFAULT_STORAGE_DIR


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(description="Slideshow video service")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--port", type=int, default=5000, help="Server port (default: 5000)")
    serve.add_argument("--host", default="127.0.0.1", help="Server host (default: 127.0.0.1)")

    generate = subparsers.add_parser("generate", help="Generate one project's video")
    generate.add_argument("project_id", type=int, help="Project id")
    generate.add_argument("--storage-dir", type=Path, default=DEFAULT_STORAGE_DIR,
                          help=f"Artifact store root (default: {DEFAULT_STORAGE_DIR})")
    generate.add_argument("--ledger-dir", type=Path, default=DEFAULT_LEDGER_DIR,
                          help=f"Project ledger root (default: {DEFAULT_LEDGER_DIR})")

    return parser.parse_args(argv)


def serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("slideshow.server:app", host=host, port=port, reload=False)
    return 0


def generate(project_id: int, storage_dir: Path, ledger_dir: Path) -> int:
    from slideshow.repositories.artifact_store import ArtifactStore
    from slideshow.repositories.project_repository import ProjectRepository
    from slideshow.services.config_service import get_config_service
    from slideshow.services.encoder import create_encoder
    from slideshow.services.errors import GenerationError
    from slideshow.services.generation_service import GenerationService

    store = ArtifactStore(storage_dir)
    settings = get_config_service().get_generation_settings(store.root)
    service = GenerationService(
        ProjectRepository(ledger_dir), store, create_encoder(settings), settings
    )

    try:
        project = service.generate(project_id)
    except GenerationError as e:
        print(f"Generation failed [{e.error_code}]: {e}", file=sys.stderr)
        return 1

    print(f"Project {project.id}: {project.status.value}")
    print(f"Output: {store.resolve(project.output_path)}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point used by ``python -m slideshow`` and the console script."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        return serve(args.host, args.port)
    return generate(args.project_id, args.storage_dir, args.ledger_dir)


if __name__ == "__main__":
    raise SystemExit(main())
