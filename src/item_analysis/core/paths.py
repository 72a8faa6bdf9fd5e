from pathlib import Path

PROJECT_MARKER = "pyproject.toml"


class ProjectRootNotFound(Exception):
    pass


def get_project_root_dir(start: Path | None = None) -> Path:
    """Nearest ancestor of start (default: this package) holding
    pyproject.toml."""
    start = (start or Path(__file__)).resolve()
    for directory in (start, *start.parents):
        if (directory / PROJECT_MARKER).is_file():
            return directory
    raise ProjectRootNotFound(f"No {PROJECT_MARKER} above {start}")
