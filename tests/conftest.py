"""Shared fixtures: an in-memory filesystem and captured output."""

import errno
import io
import os
import time
from dataclasses import replace

import pytest

from localbackup.config import Settings
from localbackup.exceptions import CopyError
from localbackup.output import OutputFormatter
from localbackup.sync.operations import (
    FileDescriptor,
    FileOperations,
    WalkControl,
    WalkVisitor,
)

DAY = 24 * 60 * 60


class MemoryFileOperations(FileOperations):
    """FileOperations over a dict of paths, with injectable failures."""

    def __init__(self) -> None:
        self.now = time.time()
        self.entries: dict[str, FileDescriptor] = {}
        self.copied: list[str] = []
        self.created_dirs: list[str] = []
        self.chmods: list[tuple[str, int]] = []
        self.fail_stat: set[str] = set()
        self.fail_mkdir: set[str] = set()
        self.fail_copy: set[str] = set()
        self.unreadable: set[str] = set()

    # -- setup helpers -------------------------------------------------

    def add_dir(self, path: str) -> None:
        parent = os.path.dirname(path)
        if parent != path:
            self.add_dir(parent)
        if path not in self.entries:
            self.entries[path] = FileDescriptor(
                path=path, size=0, mtime=self.now, mode=0o40755, is_dir=True
            )

    def add_file(
        self,
        path: str,
        age: float = 10,
        size: int = 100,
        symlink: bool = False,
        mode: int = 0o100644,
    ) -> FileDescriptor:
        """Add a file modified ``age`` days ago."""
        self.add_dir(os.path.dirname(path))
        info = FileDescriptor(
            path=path,
            size=size,
            mtime=self.now - age * DAY,
            mode=mode,
            is_symlink=symlink,
        )
        self.entries[path] = info
        return info

    # -- FileOperations ------------------------------------------------

    def stat(self, path: str) -> FileDescriptor:
        if path in self.fail_stat:
            raise OSError(errno.EIO, "cannot stat source file", path)
        try:
            return self.entries[path]
        except KeyError:
            raise FileNotFoundError(errno.ENOENT, "no such file", path) from None

    def walk_dir(self, root: str, visit: WalkVisitor) -> None:
        try:
            info = self.stat(root)
        except OSError as e:
            visit(root, None, e)
            return
        self._walk(info, visit)

    def _walk(self, info: FileDescriptor, visit: WalkVisitor) -> bool:
        control = visit(info.path, info, None)
        if control == WalkControl.STOP:
            return False
        if not info.is_dir or control == WalkControl.SKIP_DIR:
            return True
        if info.path in self.unreadable:
            err = PermissionError(errno.EACCES, "permission denied", info.path)
            return visit(info.path, None, err) != WalkControl.STOP
        for child in self._children(info.path):
            if not self._walk(self.entries[child], visit):
                return False
        return True

    def _children(self, path: str) -> list[str]:
        return sorted(
            p for p in self.entries if p != path and os.path.dirname(p) == path
        )

    def chmod(self, path: str, mode: int) -> None:
        self.chmods.append((path, mode))
        self.entries[path] = replace(self.entries[path], mode=mode)

    def mkdir_all(self, path: str, mode: int) -> None:
        if path in self.fail_mkdir:
            raise OSError(errno.EACCES, "mkdir failed", path)
        self.created_dirs.append(path)
        self.add_dir(path)

    def copy_file(self, src: str, dest: str, src_info: FileDescriptor) -> None:
        if src in self.fail_copy:
            raise CopyError(f"cannot copy {src!r}")
        self.copied.append(src)
        self.entries[dest] = replace(src_info, path=dest, mode=0o100660)


@pytest.fixture
def memory_fs():
    """Provide an empty in-memory filesystem."""
    return MemoryFileOperations()


@pytest.fixture
def buffer():
    """Provide a text buffer capturing backup output."""
    return io.StringIO()


@pytest.fixture
def output(buffer):
    """Provide an output formatter writing into ``buffer``."""
    return OutputFormatter(file=buffer)


@pytest.fixture
def settings():
    """Provide POSIX-like default settings."""
    return Settings(enforce_readonly=False, dir_mode=0o770)


@pytest.fixture
def make_settings():
    """Provide a factory for POSIX-like settings with overrides."""

    def factory(**overrides) -> Settings:
        values = {"enforce_readonly": False, "dir_mode": 0o770}
        values.update(overrides)
        return Settings(**values)

    return factory
