"""
=============================================================================
DOCUMENT ROOT ACCESS
=============================================================================

Handlers never touch the filesystem directly. They go through a
DocumentRoot, which offers exactly two capabilities:

    open_file(path)   ──► binary file object    or FileUnavailable
    list_files()      ──► [regular file names]  or DirectoryUnreadable

=============================================================================
PATH RESOLUTION
=============================================================================

    /sync/<name>      resolve_named("report.pdf")    ──► <root>/report.pdf
                      Only a bare name: "a/b", "..", "" are unavailable.

    GET <path>        resolve_path("/css/site.css")  ──► <root>/css/site.css

=============================================================================
SECURITY: ROOT CONFINEMENT
=============================================================================

Plain concatenation of root and request path lets a client walk out of
the document root:

    GET /../../etc/passwd  ──►  ./www/../../etc/passwd  ──►  /etc/passwd

With ``confine=True`` (the default) both paths are resolved (following ..
and symlinks) and the result must stay inside the resolved root.
Otherwise the file is reported unavailable, which the handlers turn into
a 404. ``confine=False`` keeps the unchecked concatenation for
deployments that rely on it.

=============================================================================
"""

import os
import logging
from pathlib import Path
from typing import BinaryIO, List, Union


logger = logging.getLogger(__name__)


class FileUnavailable(Exception):
    """The requested file does not exist, cannot be opened or is off-limits."""


class DirectoryUnreadable(Exception):
    """The document root cannot be enumerated."""


class DocumentRoot:
    """
    Filesystem collaborator rooted at one directory.

    Usage:
        docs = DocumentRoot("./www")
        with docs.open_file(docs.resolve_named("a.txt")) as f:
            data = f.read()
        docs.list_files()   # ["a.txt", "b.txt"]
    """

    def __init__(self, root: Union[str, Path], confine: bool = True):
        self.root = Path(root)
        self.confine = confine
        self._resolved_root = self.root.resolve()

    def resolve_named(self, filename: str) -> Path:
        """
        Path of a file directly under the root.

        Raises:
            FileUnavailable: If the name is empty, a dot entry or has a "/".
        """
        if not filename or filename in (".", "..") or "/" in filename:
            raise FileUnavailable(f"Not a plain file name: {filename!r}")
        return self._check(self.root / filename)

    def resolve_path(self, url_path: str) -> Path:
        """
        Path for a request path such as "/docs/index.html".

        Raises:
            FileUnavailable: If confinement is on and the path escapes the root.
        """
        return self._check(self.root / url_path.lstrip("/"))

    def _check(self, path: Path) -> Path:
        if not self.confine:
            return path

        try:
            path.resolve().relative_to(self._resolved_root)
        except ValueError:
            logger.warning(f"Path outside document root refused: {path}")
            raise FileUnavailable(f"Outside document root: {path}") from None
        return path

    def open_file(self, path: Path) -> BinaryIO:
        """
        Open a file for binary reading.

        Raises:
            FileUnavailable: Missing file, directory, permission denied, ...
        """
        try:
            return open(path, "rb")
        except OSError as e:
            raise FileUnavailable(str(e)) from e

    def list_files(self) -> List[str]:
        """
        Names of the regular files directly under the root.

        Directories and symlinks are skipped. Order is the filesystem's
        enumeration order (os.scandir), not sorted.

        Raises:
            DirectoryUnreadable: If the root cannot be opened or read.
        """
        try:
            with os.scandir(self.root) as entries:
                return [
                    entry.name
                    for entry in entries
                    if entry.is_file(follow_symlinks=False)
                ]
        except OSError as e:
            raise DirectoryUnreadable(f"Cannot list {self.root}: {e}") from e
