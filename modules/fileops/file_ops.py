"""
File operations module for filekit.

Copies, deletes and creates files and directories after checking that the
request makes sense, then hands the work to the host file system.
"""

import os
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

from core.config import Settings
from core.errors import (
    AccessDeniedError,
    CleanDirectoryError,
    DeleteFailure,
    IncompleteCopyError,
    InvalidArgumentError,
    IsDirectoryError,
    NotDirectoryError,
    NotFoundError,
    OperationFailedError,
    SameFileError,
)
from core.host import HostPathSemantics
from core.logger import AuditLogger, ActionType, ActionStatus
from .listing import FileFilter, iter_files, list_files
from .streams import (
    PathLike,
    closing_quietly,
    copy_input_stream_to_file,
    open_input_stream,
    open_output_stream,
    require_path,
)


class DeleteStatus(Enum):
    """Outcome of a best-effort delete."""
    DELETED = "deleted"
    MISSING = "missing"
    NO_PATH = "no_path"
    FAILED = "failed"


class FileOperator:
    """File and directory operations with optional audit logging."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        logger: Optional[AuditLogger] = None,
        host: Optional[HostPathSemantics] = None
    ):
        """
        Initialize FileOperator.

        Args:
            settings: Copy and audit settings (defaults if omitted)
            logger: Audit logger; nothing is recorded when None
            host: Host path semantics (detected if omitted)
        """
        self.settings = settings or Settings()
        self.logger = logger
        self.host = host or HostPathSemantics.detect()

    def _record(
        self,
        action_type: ActionType,
        description: str,
        target: Optional[PathLike],
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[dict] = None
    ) -> None:
        if self.logger is None:
            return
        self.logger.log_action(
            action_type=action_type,
            description=description,
            target=None if target is None else str(target),
            status=status,
            result=result,
            metadata=metadata
        )

    def _record_quietly(self, *args, **kwargs) -> None:
        """Record an entry; a failing audit write is ignored."""
        try:
            self._record(*args, **kwargs)
        except OSError:
            pass

    # -- copy ---------------------------------------------------------------

    def copy_file(
        self,
        src: PathLike,
        dst: PathLike,
        preserve_timestamp: Optional[bool] = None
    ) -> None:
        """
        Copy a file's bytes from ``src`` to ``dst``.

        Every check runs before anything on disk changes. The data moves in
        chunks of at most ``settings.chunk_size`` bytes.

        Args:
            src: Source file path
            dst: Destination file path
            preserve_timestamp: Give ``dst`` the modification time of ``src``
                (default: ``settings.preserve_timestamp``)

        Raises:
            InvalidArgumentError: If either path is empty
            NotFoundError: If the source doesn't exist
            IsDirectoryError: If the source or an existing destination is a directory
            SameFileError: If both paths resolve to the same file
            OperationFailedError: If the destination directory cannot be created
            AccessDeniedError: If the destination exists but is read-only
            IncompleteCopyError: If the sizes differ after the copy
        """
        if preserve_timestamp is None:
            preserve_timestamp = self.settings.preserve_timestamp

        try:
            source = require_path(src, "source")
            target = require_path(dst, "destination")
            self._check_copy(source, target)
            self._do_copy(source, target, preserve_timestamp)
        except OSError as e:
            self._record(
                ActionType.COPY,
                f"Failed to copy {src} to {dst}",
                dst,
                status=ActionStatus.FAILED,
                result=f"Error: {e}",
                metadata={"source": None if src is None else str(src)}
            )
            raise

        self._record(
            ActionType.COPY,
            f"Copied {src} to {dst}",
            dst,
            result=f"File copied ({target.stat().st_size} bytes)",
            metadata={"source": str(src), "preserve_timestamp": preserve_timestamp}
        )

    def _check_copy(self, source: Path, target: Path) -> None:
        if not source.exists():
            raise NotFoundError(f"Source '{source}' does not exist", path=str(source))
        if source.is_dir():
            raise IsDirectoryError(f"Source '{source}' exists but is a directory", path=str(source))
        if os.path.realpath(source) == os.path.realpath(target):
            raise SameFileError(
                f"Source '{source}' and destination '{target}' are the same",
                path=str(source)
            )

        parent = target.parent
        if not parent.exists():
            try:
                os.makedirs(parent, exist_ok=True)
            except OSError as e:
                raise OperationFailedError(
                    f"Destination '{target}' directory cannot be created", path=str(target)
                ) from e

        if target.exists():
            if not os.access(target, os.W_OK):
                raise AccessDeniedError(
                    f"Destination '{target}' exists but is read-only", path=str(target)
                )
            if target.is_dir():
                raise IsDirectoryError(
                    f"Destination '{target}' exists but is a directory", path=str(target)
                )

    def _do_copy(self, source: Path, target: Path, preserve_timestamp: bool) -> None:
        chunk_size = self.settings.chunk_size

        with closing_quietly(open(source, "rb")) as fin:
            with closing_quietly(open(target, "wb")) as fout:
                size = os.fstat(fin.fileno()).st_size
                pos = 0
                while pos < size:
                    data = fin.read(min(chunk_size, size - pos))
                    if not data:
                        break
                    fout.write(data)
                    pos += len(data)
                # Buffered tail is written here; its errors must reach the caller
                fout.close()

        if os.path.getsize(source) != os.path.getsize(target):
            raise IncompleteCopyError(
                f"Failed to copy full contents from '{source}' to '{target}'",
                path=str(target)
            )

        if preserve_timestamp:
            src_stat = os.stat(source)
            dst_stat = os.stat(target)
            os.utime(target, ns=(dst_stat.st_atime_ns, src_stat.st_mtime_ns))

    # -- delete -------------------------------------------------------------

    def try_delete(self, path: Optional[PathLike]) -> DeleteStatus:
        """
        Delete a file or directory tree as far as possible, never raising.

        Children of a directory are removed best-effort first, then the
        path itself.

        Returns:
            DeleteStatus describing what happened
        """
        try:
            return self._try_delete(path)
        except Exception:
            return DeleteStatus.FAILED

    def _try_delete(self, path: Optional[PathLike]) -> DeleteStatus:
        if path is None or str(path) == "":
            return DeleteStatus.NO_PATH

        target = Path(path)
        if not os.path.lexists(target):
            return DeleteStatus.MISSING

        real_dir = os.path.isdir(target) and not os.path.islink(target)
        failures: List[DeleteFailure] = []
        if real_dir:
            failures = self._delete_children(target)

        try:
            if real_dir:
                os.rmdir(target)
            else:
                os.unlink(target)
        except OSError as e:
            self._record_quietly(
                ActionType.DELETE,
                f"Failed to delete {target}",
                target,
                status=ActionStatus.FAILED,
                result=f"Error: {e}",
                metadata={"child_failures": len(failures)}
            )
            return DeleteStatus.FAILED

        self._record_quietly(ActionType.DELETE, f"Deleted {target}", target)
        return DeleteStatus.DELETED

    def delete_quietly(self, path: Optional[PathLike]) -> bool:
        """
        Delete a file or directory tree without raising.

        Returns:
            True only if the path was deleted
        """
        return self.try_delete(path) is DeleteStatus.DELETED

    def clean_directory(self, path: PathLike) -> None:
        """
        Delete everything inside a directory, keeping the directory.

        Every child is attempted even after a failure.

        Raises:
            InvalidArgumentError: If the path is missing or not a directory
            OperationFailedError: If the directory cannot be listed
            CleanDirectoryError: If any child could not be deleted
        """
        try:
            self._clean_directory(require_path(path))
        except OSError as e:
            self._record(
                ActionType.DELETE,
                f"Failed to clean {path}",
                path,
                status=ActionStatus.FAILED,
                result=f"Error: {e}"
            )
            raise
        self._record(ActionType.DELETE, f"Cleaned {path}", path)

    def force_delete(self, path: PathLike) -> None:
        """
        Delete a file, or a directory with all its contents.

        Raises:
            NotFoundError: If there was nothing to delete
            OperationFailedError: If the file or directory could not be removed
        """
        try:
            self._force_delete(require_path(path))
        except OSError as e:
            self._record(
                ActionType.DELETE,
                f"Failed to delete {path}",
                path,
                status=ActionStatus.FAILED,
                result=f"Error: {e}"
            )
            raise
        self._record(ActionType.DELETE, f"Deleted {path}", path)

    def delete_directory(self, path: PathLike) -> None:
        """
        Delete a directory with all its contents.

        Does nothing if the path does not exist. A symbolic link is removed
        without touching what it points to.

        Raises:
            OperationFailedError: If the directory could not be removed
        """
        target = require_path(path)
        if not os.path.lexists(target):
            self._record(ActionType.DELETE, f"Nothing to delete at {target}", target,
                         status=ActionStatus.SKIPPED)
            return

        try:
            self._delete_directory(target)
        except OSError as e:
            self._record(
                ActionType.DELETE,
                f"Failed to delete directory {target}",
                target,
                status=ActionStatus.FAILED,
                result=f"Error: {e}"
            )
            raise
        self._record(ActionType.DELETE, f"Deleted directory {target}", target)

    def _list_children(self, directory: Path) -> List[Path]:
        try:
            return [directory / name for name in os.listdir(directory)]
        except OSError as e:
            raise OperationFailedError(
                f"Failed to list contents of {directory}", path=str(directory)
            ) from e

    def _delete_each(self, children: List[Path]) -> List[DeleteFailure]:
        """
        Delete ``children`` and everything below them, bottom-up.

        Uses an explicit stack, so tree depth is not limited by the
        interpreter's recursion limit. A directory is removed once its own
        children have been attempted; symlinks are unlinked, never descended.
        """
        failures = []
        # (path, expanded): expanded directories only need their rmdir
        stack = [(child, False) for child in reversed(children)]

        while stack:
            path, expanded = stack.pop()
            try:
                if expanded:
                    self._remove_directory(path)
                elif os.path.isdir(path) and not self.is_symlink(path):
                    grandchildren = self._list_children(path)
                    stack.append((path, True))
                    stack.extend((child, False) for child in reversed(grandchildren))
                elif os.path.isdir(path):
                    self._remove_directory(path, link=True)
                else:
                    self._unlink_file(path)
            except OSError as e:
                failures.append(DeleteFailure(path=str(path), error=e))

        return failures

    def _delete_children(self, directory: Path) -> List[DeleteFailure]:
        """Delete each child of ``directory``, returning failures instead of raising."""
        try:
            children = self._list_children(directory)
        except OperationFailedError as e:
            return [DeleteFailure(path=str(directory), error=e)]
        return self._delete_each(children)

    def _clean_directory(self, directory: Path) -> None:
        if not directory.exists():
            raise InvalidArgumentError(f"{directory} does not exist", path=str(directory))
        if not directory.is_dir():
            raise InvalidArgumentError(f"{directory} is not a directory", path=str(directory))

        failures = self._delete_each(self._list_children(directory))
        if failures:
            raise CleanDirectoryError(str(directory), failures) from failures[-1].error

    def _force_delete(self, path: Path) -> None:
        if os.path.isdir(path):
            self._delete_directory(path)
        else:
            self._unlink_file(path)

    def _unlink_file(self, path: Path) -> None:
        present = os.path.lexists(path)
        try:
            os.unlink(path)
        except OSError as e:
            if not present:
                raise NotFoundError(f"File does not exist: {path}", path=str(path)) from e
            raise OperationFailedError(f"Unable to delete file: {path}", path=str(path)) from e

    def _remove_directory(self, directory: Path, link: bool = False) -> None:
        try:
            if link:
                os.unlink(directory)
            else:
                os.rmdir(directory)
        except OSError as e:
            raise OperationFailedError(
                f"Unable to delete directory {directory}.", path=str(directory)
            ) from e

    def _delete_directory(self, directory: Path) -> None:
        if not os.path.lexists(directory):
            return

        if self.is_symlink(directory):
            self._remove_directory(directory, link=True)
        else:
            self._clean_directory(directory)
            self._remove_directory(directory)

    # -- inspect / create ---------------------------------------------------

    def is_symlink(self, path: Optional[PathLike]) -> bool:
        """
        Tell whether the last segment of ``path`` is a symbolic link.

        The path with its parent resolved is compared against its fully
        resolved form. Hosts without symlink support always report False.

        Raises:
            InvalidArgumentError: If path is None
        """
        if path is None:
            raise InvalidArgumentError("File must not be null")
        if not self.host.supports_symlinks:
            return False

        target = Path(path)
        candidate = Path(os.path.realpath(target.parent)) / target.name
        return os.path.realpath(candidate) != os.path.abspath(candidate)

    def force_mkdir(self, path: PathLike) -> None:
        """
        Create a directory and any missing parents.

        Succeeds silently if the directory already exists, including when
        another process creates it at the same moment.

        Raises:
            NotDirectoryError: If the path exists and is not a directory
            OperationFailedError: If the directory could not be created
        """
        directory = require_path(path)

        if directory.exists():
            if not directory.is_dir():
                error = NotDirectoryError(
                    f"File {directory} exists and is not a directory. "
                    "Unable to create directory.",
                    path=str(directory)
                )
                self._record(ActionType.MKDIR, f"Failed to create {directory}", directory,
                             status=ActionStatus.FAILED, result=f"Error: {error}")
                raise error
            self._record(ActionType.MKDIR, f"Directory already exists: {directory}", directory,
                         status=ActionStatus.SKIPPED)
            return

        try:
            os.makedirs(directory)
        except OSError as e:
            if not directory.is_dir():
                self._record(ActionType.MKDIR, f"Failed to create {directory}", directory,
                             status=ActionStatus.FAILED, result=f"Error: {e}")
                raise OperationFailedError(
                    f"Unable to create directory {directory}", path=str(directory)
                ) from e

        self._record(ActionType.MKDIR, f"Created directory {directory}", directory)

    # -- streams ------------------------------------------------------------

    def open_output_stream(self, path: PathLike) -> BinaryIO:
        """Open a validated, truncating output stream. See streams.open_output_stream."""
        try:
            stream = open_output_stream(path)
        except OSError as e:
            self._record(ActionType.WRITE, f"Failed to open {path} for writing", path,
                         status=ActionStatus.FAILED, result=f"Error: {e}")
            raise
        self._record(ActionType.WRITE, f"Opened {path} for writing", path)
        return stream

    def open_input_stream(self, path: PathLike) -> BinaryIO:
        """Open a validated input stream. See streams.open_input_stream."""
        try:
            stream = open_input_stream(path)
        except OSError as e:
            self._record(ActionType.READ, f"Failed to open {path} for reading", path,
                         status=ActionStatus.FAILED, result=f"Error: {e}")
            raise
        self._record(ActionType.READ, f"Opened {path} for reading", path)
        return stream

    def copy_input_stream_to_file(self, source: BinaryIO, destination: PathLike) -> None:
        """Write everything from ``source`` into ``destination``, closing both."""
        try:
            copy_input_stream_to_file(source, destination)
        except OSError as e:
            self._record(ActionType.WRITE, f"Failed to write {destination}", destination,
                         status=ActionStatus.FAILED, result=f"Error: {e}")
            raise
        self._record(ActionType.WRITE, f"Wrote {destination}", destination)

    # -- listing ------------------------------------------------------------

    def iter_files(self, directory: PathLike, predicate: FileFilter) -> Iterator[Path]:
        """Lazily yield files under ``directory`` accepted by ``predicate``."""
        return iter_files(directory, predicate)

    def list_files(self, directory: PathLike, suffix: str) -> List[Path]:
        """
        List files under ``directory`` whose names end in ``.suffix``.

        Raises:
            InvalidArgumentError: If directory is not a directory
        """
        try:
            files = list_files(directory, suffix)
        except OSError as e:
            self._record(ActionType.LIST, f"Failed to list {directory}", directory,
                         status=ActionStatus.FAILED, result=f"Error: {e}")
            raise
        self._record(ActionType.LIST, f"Listed *.{suffix} under {directory}", directory,
                     result=f"{len(files)} file(s)", metadata={"suffix": suffix})
        return files
