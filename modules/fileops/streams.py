"""
Stream helpers for filekit.

Opens validated binary streams and guarantees they are released. Closing is
quiet: an error raised by close() never replaces the error already in flight.
"""

import os
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Optional, Union

from core.errors import (
    AccessDeniedError,
    InvalidArgumentError,
    IsDirectoryError,
    NotFoundError,
    OperationFailedError,
)

PathLike = Union[str, "os.PathLike[str]"]

# Buffer size for stream-to-file copies; the source may be a pipe of unknown length.
STREAM_COPY_BUFFER = 1024 * 1024


def require_path(path: Optional[PathLike], name: str = "path") -> Path:
    """Reject None and empty paths, returning the path as a Path."""
    if path is None or str(path) == "":
        raise InvalidArgumentError(f"{name.capitalize()} must not be empty")
    return Path(path)


def close_quietly(stream: Optional[Any]) -> None:
    """Close a stream, ignoring None and any OSError raised by close()."""
    if stream is None:
        return
    try:
        stream.close()
    except OSError:
        pass


@contextmanager
def closing_quietly(stream: Any) -> Iterator[Any]:
    """
    Yield a stream and close it quietly on every exit path.

    Writers should close() inside the block on success; the quiet close only
    covers error paths, where it must not replace the error in flight.
    """
    try:
        yield stream
    finally:
        close_quietly(stream)


def open_output_stream(path: PathLike) -> BinaryIO:
    """
    Open a file for writing, truncating it.

    Missing parent directories are created.

    Raises:
        IsDirectoryError: If the path is a directory
        AccessDeniedError: If the file exists but cannot be written
        OperationFailedError: If the parent directory cannot be created
    """
    target = require_path(path)

    if target.exists():
        if target.is_dir():
            raise IsDirectoryError(f"File '{target}' exists but is a directory", path=str(target))
        if not os.access(target, os.W_OK):
            raise AccessDeniedError(f"File '{target}' cannot be written to", path=str(target))
    else:
        parent = target.parent
        if not parent.exists():
            try:
                os.makedirs(parent, exist_ok=True)
            except OSError as e:
                raise OperationFailedError(
                    f"File '{target}' could not be created", path=str(target)
                ) from e

    return open(target, "wb")


def open_input_stream(path: PathLike) -> BinaryIO:
    """
    Open an existing file for reading.

    Raises:
        NotFoundError: If the file does not exist
        IsDirectoryError: If the path is a directory
        AccessDeniedError: If the file cannot be read
    """
    source = require_path(path)

    if not source.exists():
        raise NotFoundError(f"File '{source}' does not exist", path=str(source))
    if source.is_dir():
        raise IsDirectoryError(f"File '{source}' exists but is a directory", path=str(source))
    if not os.access(source, os.R_OK):
        raise AccessDeniedError(f"File '{source}' cannot be read", path=str(source))

    return open(source, "rb")


def copy_input_stream_to_file(source: BinaryIO, destination: PathLike) -> None:
    """
    Copy everything readable from ``source`` into ``destination``.

    The output stream and then ``source`` are closed whether or not the copy
    succeeds. A failure flushing the output on success is raised.
    """
    with closing_quietly(source):
        output = open_output_stream(destination)
        with closing_quietly(output):
            shutil.copyfileobj(source, output, STREAM_COPY_BUFFER)
            output.close()
