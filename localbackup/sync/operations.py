"""Filesystem operations used by the backup engine.

The engine never touches the filesystem directly; it receives a
``FileOperations`` instance once per run. ``LocalFileOperations`` is the
real implementation, tests substitute an in-memory one.
"""

import logging
import os
import shutil
import stat
import sys
import tempfile
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..exceptions import CopyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileDescriptor:
    """Metadata of one filesystem entry, as seen without following links."""

    path: str
    """Path of the entry as it was reached"""

    size: int
    """Size in bytes"""

    mtime: float
    """Last modification time (Unix timestamp)"""

    mode: int = 0
    """Permission bits and file type, as returned by lstat"""

    is_symlink: bool = False
    """Whether the entry is a symbolic link"""

    is_dir: bool = False
    """Whether the entry is a directory"""

    @property
    def is_writable(self) -> bool:
        """Whether the owner write bit is set."""
        return bool(self.mode & stat.S_IWUSR)

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "FileDescriptor":
        """Create a FileDescriptor from an lstat result."""
        return cls(
            path=path,
            size=st.st_size,
            mtime=st.st_mtime,
            mode=st.st_mode,
            is_symlink=stat.S_ISLNK(st.st_mode),
            is_dir=stat.S_ISDIR(st.st_mode),
        )


class WalkControl(str, Enum):
    """What a walk visitor wants to happen next."""

    CONTINUE = "continue"
    """Keep walking (descend into the entry if it is a directory)"""

    SKIP_DIR = "skip_dir"
    """Do not descend into this directory"""

    STOP = "stop"
    """End the whole walk"""


WalkVisitor = Callable[
    [str, Optional[FileDescriptor], Optional[OSError]], WalkControl
]
"""visit(path, descriptor, error): exactly one of descriptor/error is set"""

CopyStrategy = Callable[[str, str], None]
"""copy(src, dest) writes the content of src to dest"""


class FileOperations(ABC):
    """Filesystem primitives the backup engine depends on.

    Failures are reported by raising ``OSError``.
    """

    @abstractmethod
    def stat(self, path: str) -> FileDescriptor:
        """Describe ``path`` without following symbolic links."""

    @abstractmethod
    def walk_dir(self, root: str, visit: WalkVisitor) -> None:
        """Walk ``root`` depth-first, calling ``visit`` for every entry.

        The root itself is visited first. Entries of a directory are
        visited in name order, each directory right before its contents.
        """

    @abstractmethod
    def chmod(self, path: str, mode: int) -> None:
        """Change the permission bits of ``path``."""

    @abstractmethod
    def mkdir_all(self, path: str, mode: int) -> None:
        """Create ``path`` and all missing parents."""

    @abstractmethod
    def copy_file(self, src: str, dest: str, src_info: FileDescriptor) -> None:
        """Copy ``src`` to ``dest``.

        The destination ends up with the source modification time.

        Raises:
            CopyError: If the file cannot be copied
        """


def stream_copy(src: str, dest: str) -> None:
    """Copy file content through Python file objects."""
    with open(src, "rb") as reader, open(dest, "wb") as writer:
        shutil.copyfileobj(reader, writer)


def native_copy(src: str, dest: str) -> None:
    """Copy file content with the fastest mechanism the OS offers."""
    shutil.copyfile(src, dest, follow_symlinks=False)


def select_copy_strategy(platform: Optional[str] = None) -> CopyStrategy:
    """Choose the copy mechanism for a platform.

    Args:
        platform: Value in the format of ``sys.platform`` (defaults to the
            running platform)

    Returns:
        ``native_copy`` where shutil has a kernel-level fast path,
        ``stream_copy`` elsewhere
    """
    if platform is None:
        platform = sys.platform
    if platform.startswith(("win", "linux", "darwin")):
        return native_copy
    return stream_copy


class LocalFileOperations(FileOperations):
    """FileOperations backed by the local filesystem."""

    def __init__(
        self,
        copy_strategy: Optional[CopyStrategy] = None,
        file_mode: int = 0o660,
    ):
        """Initialize local file operations.

        Args:
            copy_strategy: Function copying file content (defaults to the
                strategy selected for the running platform)
            file_mode: Permissions applied to copied files
        """
        self.copy_strategy = copy_strategy or select_copy_strategy()
        self.file_mode = file_mode

    def stat(self, path: str) -> FileDescriptor:
        return FileDescriptor.from_stat(path, os.lstat(path))

    def walk_dir(self, root: str, visit: WalkVisitor) -> None:
        try:
            info = self.stat(root)
        except OSError as e:
            visit(root, None, e)
            return
        self._walk(root, info, visit)

    def _walk(self, path: str, info: FileDescriptor, visit: WalkVisitor) -> bool:
        """Visit ``path`` and its contents. Returns False once the walk stops."""
        control = visit(path, info, None)
        if control == WalkControl.STOP:
            return False
        if not info.is_dir or control == WalkControl.SKIP_DIR:
            return True

        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            return visit(path, None, e) != WalkControl.STOP

        for entry in entries:
            try:
                child = FileDescriptor.from_stat(
                    entry.path, entry.stat(follow_symlinks=False)
                )
            except OSError as e:
                if visit(entry.path, None, e) == WalkControl.STOP:
                    return False
                continue
            if not self._walk(entry.path, child, visit):
                return False
        return True

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)

    def mkdir_all(self, path: str, mode: int) -> None:
        os.makedirs(path, mode=mode, exist_ok=True)

    def copy_file(self, src: str, dest: str, src_info: FileDescriptor) -> None:
        dest_dir = os.path.dirname(dest) or "."
        fd, tmp_path = tempfile.mkstemp(
            prefix=".", suffix=".partial", dir=dest_dir
        )
        os.close(fd)
        try:
            try:
                self.copy_strategy(src, tmp_path)
            except OSError as e:
                raise CopyError(f"error copying content of {src!r}: {e}") from e
            os.chmod(tmp_path, self.file_mode)
            os.utime(tmp_path, (time.time(), src_info.mtime))
            try:
                os.replace(tmp_path, dest)
            except OSError as e:
                raise CopyError(f"cannot write {dest!r}: {e}") from e
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise
        logger.debug("Copied %s -> %s (%d bytes)", src, dest, src_info.size)


def create_file_operations(
    platform: Optional[str] = None, file_mode: int = 0o660
) -> LocalFileOperations:
    """Build LocalFileOperations with the copy strategy for ``platform``."""
    strategy = select_copy_strategy(platform)
    logger.debug("Using copy strategy %s", strategy.__name__)
    return LocalFileOperations(copy_strategy=strategy, file_mode=file_mode)
