"""Reading and rewriting source files without following symlinks or racing edits."""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE

MAX_FILE_SIZE_ENV_VAR = "NONNLS_MARKERS_MAX_FILE_SIZE"


@dataclass(frozen=True)
class SourceSnapshot:
    """Text of a source file together with the stats taken around reading it.

    Attributes:
        path: Resolved path of the source file.
        text: Decoded content, line terminators untouched.
        before: Stat taken before reading; its access time is restored on rewrite.
        after: Stat taken after reading; a rewrite is refused if the file moved on.
    """

    path: Path
    text: str
    before: os.stat_result
    after: os.stat_result


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the size limit from ``NONNLS_MARKERS_MAX_FILE_SIZE``, or `default`.

    Raises:
        ValueError: If the variable holds anything but a positive integer.
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    try:
        limit = int(raw_value)
    except ValueError as error:
        raise ValueError(
            f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {raw_value!r}"
        ) from error
    if limit <= 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {limit}")
    return limit


def _crosses_symlink(path: Path) -> bool:
    for component in (path, *path.parents):
        try:
            if component.is_symlink():
                return True
        except OSError:
            continue
    return False


def resolve_source_path(raw_path: str, base_dir: Path) -> Path:
    """Turn a user-supplied path into the absolute path of a file under `base_dir`.

    Args:
        raw_path: Absolute or relative path, ``~`` allowed.
        base_dir: Directory the file must live in, usually the working directory.

    Returns:
        Path: Resolved path of the source file.

    Raises:
        ValueError: If the path goes through a symlink, does not exist, is not
            a regular file, or lies outside `base_dir`.

    Examples:
        resolve_source_path("src/Messages.java", Path.cwd())
    """
    path = Path(raw_path).expanduser()
    if _crosses_symlink(path):
        raise ValueError(f"Symlinks are not supported for security reasons: {path}")

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist.") from error
    except OSError as error:
        raise ValueError(f"Cannot resolve {path}: {error}") from error

    if not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file.")
    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}.")
    return resolved


def _regular_file_stat(path: Path) -> os.stat_result:
    try:
        stat_result = os.lstat(path)
    except OSError as error:
        raise OSError(f"Cannot access {path}: {error}") from error
    if stat.S_ISLNK(stat_result.st_mode):
        raise OSError(f"Symlinks are not supported: {path}.")
    if not stat.S_ISREG(stat_result.st_mode):
        raise OSError(f"{path} is not a regular file.")
    return stat_result


def _identity(stat_result: os.stat_result) -> tuple:
    return (
        stat_result.st_ino,
        stat_result.st_dev,
        stat_result.st_size,
        stat_result.st_mtime_ns,
    )


def _require_unchanged(expected: os.stat_result, current: os.stat_result, path: Path) -> None:
    if _identity(expected) != _identity(current):
        raise OSError(f"{path} changed during processing; refusing to overwrite.")


def read_source(path: Path, extensions: Iterable[str], max_size: int) -> SourceSnapshot:
    """Read a source file after checking its extension and size.

    The file is decoded as UTF-8 with newline translation disabled, so
    ``\\r\\n`` and the other terminators reach the scanner as stored.

    Args:
        path: Resolved path, as returned by `resolve_source_path`.
        extensions: Accepted lower-case suffixes, leading dot included.
        max_size: Largest accepted size in bytes.

    Returns:
        SourceSnapshot: The decoded text and the stats bracketing the read.

    Raises:
        ValueError: If the suffix is not one of `extensions`.
        UnicodeDecodeError: If the file is not valid UTF-8.
        OSError: If the file cannot be read, is too large, or changes while
            being read.
    """
    extensions = list(extensions)
    if path.suffix.lower() not in extensions:
        raise ValueError(
            f"{path} is not a supported source file.\n"
            f"Supported extensions are: {', '.join(extensions)}"
        )

    before = _regular_file_stat(path)
    if before.st_size > max_size:
        raise OSError(f"{path} exceeds the maximum allowed size of {max_size} bytes.")

    with open(path, encoding="UTF-8", newline="") as stream:
        text = stream.read()

    after = _regular_file_stat(path)
    _require_unchanged(before, after, path)
    return SourceSnapshot(path, text, before, after)


def _carry_over_metadata(
    snapshot: SourceSnapshot, temp_path: Path, warn: Callable[[str], None] | None
) -> None:
    os.chmod(temp_path, stat.S_IMODE(snapshot.after.st_mode))
    if not hasattr(os, "chown"):
        return
    try:
        os.chown(temp_path, snapshot.after.st_uid, snapshot.after.st_gid)
    except PermissionError:
        if warn is not None:
            warn(
                f"Warning: Could not preserve file ownership for {snapshot.path.name} "
                "(requires elevated privileges)"
            )


def write_source(
    snapshot: SourceSnapshot, content: str, warn: Callable[[str], None] | None = None
) -> None:
    """Atomically replace the file a snapshot was read from.

    The new content goes to a temporary file next to the original, which then
    takes its place. Permissions, ownership where allowed, and access time are
    carried over.

    Raises:
        OSError: If the file changed since `snapshot` was taken or cannot be
            replaced.

    Examples:
        write_source(read_source(path, [".java"], 1 << 20), formatted)
    """
    path = snapshot.path
    _require_unchanged(snapshot.after, _regular_file_stat(path), path)

    handle, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(handle, "w", encoding="UTF-8", newline="") as stream:
            stream.write(content)
            stream.flush()
            os.fsync(stream.fileno())
        _carry_over_metadata(snapshot, temp_path, warn)
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise

    os.utime(path, ns=(snapshot.before.st_atime_ns, path.stat().st_mtime_ns))
