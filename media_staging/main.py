"""
Main entry point for the Media Staging application.

Parses the command line, configures logging and settings, then runs the
requested sub-command against the staging directory.
"""
import sys
from concurrent.futures import Future
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .cli import get_args
from .config.common import LOGGER_FORMAT, USER_CONFIG_PATH, StagingSettings, load_user_config
from .domain.exceptions import MediaStagingException, TempDirectoryException
from .domain.temp_directory import TempDirectory
from .services.staging_service import MediaStager
from .sources.filesystem import FileSystemMediaLibrary, FileSystemMediaReference

logger.remove()
logger.add(sys.stderr, level="INFO", format=LOGGER_FORMAT)


def _collect_references(paths: List[str], recursive: bool) -> List[FileSystemMediaReference]:
    references: List[FileSystemMediaReference] = []
    for raw_path in paths:
        path = Path(raw_path).expanduser()
        if path.is_dir():
            library_refs = FileSystemMediaLibrary(path, recursive=recursive).references()
            logger.info(f"Found {len(library_refs)} media file(s) in {path}")
            references.extend(library_refs)
        else:
            references.append(FileSystemMediaReference(path))
    return references


def _resolve_settings(args) -> StagingSettings:
    settings = load_user_config(args.config or USER_CONFIG_PATH)
    if args.documents_dir:
        settings.documents_dir = args.documents_dir
    if args.workers:
        settings.workers = args.workers
    return settings


def run_stage(args, settings: StagingSettings, temp_dir: TempDirectory) -> int:
    references = _collect_references(args.paths, recursive=not args.no_recursive)
    if not references:
        logger.warning("Nothing to stage.")
        return 0

    temp_dir.ensure(strict=True)
    with MediaStager(temp_dir, settings=settings, log_dir=args.log_dir, export_preset=args.preset) as stager:
        futures: List[Future] = [stager.stage_media_reference(ref) for ref in references]
        failures = 0
        for ref, future in zip(references, futures):
            try:
                print(future.result())
            except MediaStagingException as e:
                failures += 1
                logger.error(f"{ref.path.name}: {e.message}")
            except Exception as e:
                failures += 1
                logger.exception(f"{ref.path.name}: unexpected error while staging: {e}")

    logger.info(f"Staged {len(references) - failures} of {len(references)} file(s) into {temp_dir.path}")
    return 1 if failures else 0


def run_snap(args, settings: StagingSettings, temp_dir: TempDirectory) -> int:
    photo = Path(args.photo).expanduser()
    try:
        data = photo.read_bytes()
    except OSError as e:
        logger.error(f"Could not read {photo}: {e}")
        return 1

    with MediaStager(temp_dir, settings=settings, log_dir=args.log_dir) as stager:
        staged_path = stager.stage_raw_image_bytes(data).result()

    if staged_path is None:
        return 1
    print(staged_path)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs the Media Staging CLI.

    Args:
        argv: Command-line arguments, defaults to `sys.argv[1:]`.

    Returns:
        The process exit code.
    """
    args = get_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.debug(f"Parsed arguments: {args}")

    settings = _resolve_settings(args)
    temp_dir = TempDirectory(settings.documents_dir)
    logger.debug(f"Using {temp_dir}")

    try:
        if args.command == "stage":
            return run_stage(args, settings, temp_dir)
        if args.command == "snap":
            return run_snap(args, settings, temp_dir)
        if args.command == "clean":
            temp_dir.delete()
            return 0
        if args.command == "where":
            print(temp_dir.path)
            return 0
    except TempDirectoryException as e:
        logger.error(e.message)
        return 1

    logger.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
