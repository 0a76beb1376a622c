"""Discovery of BSP connection files.

Connection files are looked up in the default locations, in order, and the
first location that yields any details wins:

1. ``.bsp/`` in the workspace directory or, failing that, the nearest parent
   directory that has one (the workspace may be a subproject).
2. ``bsp/`` in the user data directories.
3. ``bsp/`` in the system data directories.

See https://build-server-protocol.github.io/docs/overview/server-discovery
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from bspclient.connection import ConnectionDetails
from bspclient.strings import strip_leading

logger: Final = logging.getLogger(__name__)

WORKSPACE_DIR_NAME: Final = ".bsp"
DATA_DIR_NAME: Final = "bsp"

_SCHEMA_HINT: Final = strip_leading(
    """
    Connection files must be JSON objects with the string fields "name",
    "version" and "bspVersion" and the string array fields "languages" and "argv".
    If the file is valid and should be accepted, or the warning should be
    silenced, please report an issue and attach the file.
    """
).rstrip()


def parse_file(path: Path) -> ConnectionDetails | None:
    """Read and validate a single connection file, returning None if it is invalid."""
    contents = path.read_bytes()
    try:
        return ConnectionDetails.model_validate_json(contents)
    except ValidationError as exc:
        logger.warning(f"Failed to parse BSP connection details from '{path}': {exc}")
        logger.warning(_SCHEMA_HINT)
        return None


def search_bsp_dir(directory: Path) -> list[ConnectionDetails]:
    """Parse every file in directory; a missing directory yields nothing."""
    try:
        entries = sorted(directory.iterdir())
    except (FileNotFoundError, NotADirectoryError):
        return []

    details: list[ConnectionDetails] = []
    for entry in entries:
        if not entry.is_file():
            continue
        parsed = parse_file(entry)
        if parsed is not None:
            details.append(parsed)
    logger.debug(f"Found {len(details)} connection file(s) in {directory}")
    return details


def discover_workspace_connection_details(base_dir: Path) -> list[ConnectionDetails]:
    """Search base_dir and then each of its parents for a ``.bsp`` directory.

    The filesystem root is only searched when it is base_dir itself.
    """
    directory = base_dir
    while True:
        details = search_bsp_dir(directory / WORKSPACE_DIR_NAME)
        if details:
            return details
        directory = directory.parent
        if directory.name == "":
            return []


def _non_empty(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    return value if value else None


def user_data_dirs(platform: str, environ: Mapping[str, str]) -> list[Path]:
    """Return the per-user data directories for the platform."""
    dirs: list[Path] = []
    if platform == "win32":
        local_app_data = _non_empty(environ, "LOCALAPPDATA")
        if local_app_data is not None:
            dirs.append(Path(local_app_data))
    else:
        # https://specifications.freedesktop.org/basedir-spec/basedir-spec-0.6.html
        xdg_data_home = _non_empty(environ, "XDG_DATA_HOME")
        home = _non_empty(environ, "HOME")
        if xdg_data_home is not None:
            dirs.append(Path(xdg_data_home))
        elif home is not None:
            dirs.append(Path(home) / ".local" / "share")
            if platform == "darwin":
                dirs.append(Path(home) / "Library" / "Application Support")
    return dirs


def system_data_dirs(platform: str, environ: Mapping[str, str]) -> list[Path]:
    """Return the system-wide data directories for the platform."""
    dirs: list[Path] = []
    if platform == "win32":
        program_data = _non_empty(environ, "PROGRAMDATA")
        if program_data is not None:
            dirs.append(Path(program_data))
    else:
        xdg_data_dirs = _non_empty(environ, "XDG_DATA_DIRS")
        if xdg_data_dirs is not None:
            dirs.extend(Path(d) for d in xdg_data_dirs.split(":") if d)
        else:
            dirs.extend([Path("/usr/local/share"), Path("/usr/share")])
        if platform == "darwin":
            dirs.append(Path("/Library/Application Support"))
    return dirs


def _search_data_dirs(dirs: list[Path]) -> list[ConnectionDetails]:
    details: list[ConnectionDetails] = []
    for directory in dirs:
        details.extend(search_bsp_dir(directory / DATA_DIR_NAME))
    return details


def discover_connection_details(
    workspace: str | os.PathLike[str] | None = None,
    *,
    platform: str = sys.platform,
    environ: Mapping[str, str] | None = None,
) -> list[ConnectionDetails]:
    """Find the BSP connection details for a workspace (default: the current directory)."""
    if environ is None:
        environ = os.environ
    workspace_dir = Path(workspace if workspace is not None else Path.cwd()).resolve()

    details = discover_workspace_connection_details(workspace_dir)
    if details:
        return details

    details = _search_data_dirs(user_data_dirs(platform, environ))
    if details:
        return details

    return _search_data_dirs(system_data_dirs(platform, environ))
