"""Temporary folder rule, deleted when the test finishes."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from tessel.rules.base import ExternalResource


class TemporaryFolder(ExternalResource):
    """Files and folders that are removed after each test, pass or fail.

    Example:
        class HasTempFolder:
            folder = rule(TemporaryFolder)

            @test
            def uses_temp_folder(self):
                created_file = self.folder.new_file("myfile.txt")
                created_folder = self.folder.new_folder("subfolder")
    """

    def __init__(self, parent: Path | str | None = None) -> None:
        self.parent = Path(parent) if parent is not None else None
        self._folder: Path | None = None

    def before(self) -> None:
        self.create()

    def after(self) -> None:
        self.delete()

    def create(self) -> None:
        self._folder = self._create_folder_in(self.parent)

    @property
    def root(self) -> Path:
        """Location of the temporary folder."""
        if self._folder is None:
            msg = "the temporary folder has not yet been created"
            raise RuntimeError(msg)
        return self._folder

    def new_file(self, name: str | None = None) -> Path:
        """Create a fresh empty file, with a random name when ``name`` is omitted."""
        if name is None:
            handle, path = tempfile.mkstemp(prefix="tessel", dir=self.root)
            os.close(handle)
            return Path(path)
        file = self.root / name
        try:
            file.touch(exist_ok=False)
        except FileExistsError:
            msg = f"a file with the name '{name}' already exists in the test folder"
            raise FileExistsError(msg) from None
        return file

    def new_folder(self, *names: str) -> Path:
        """Create nested folders under the root, or a randomly named one."""
        if not names:
            return self._create_folder_in(self.root)
        folder = self.root
        for name in names:
            folder = folder / name
            folder.mkdir(exist_ok=True)
        return folder

    def delete(self) -> None:
        """Remove the folder and everything under it."""
        if self._folder is not None:
            shutil.rmtree(self._folder, ignore_errors=True)

    @staticmethod
    def _create_folder_in(parent: Path | None) -> Path:
        return Path(tempfile.mkdtemp(prefix="tessel", dir=parent))
