"""
Dependency lockfile generation for Gradle cache keys.

The lockfile is a plain text file whose content is the concatenation of the
content hashes of every Gradle build script in the project. Cache entries for
the global dependency stores are keyed on this file, so they are invalidated
whenever any build script changes.

Example:
    >>> from pathlib import Path
    >>> from gradlestep.caching.lockfile import DependencyLockfileBuilder
    >>>
    >>> builder = DependencyLockfileBuilder(Path('/path/to/project'))
    >>> lockfile = builder.build()
    >>> print(f"Fingerprinted {len(lockfile.files)} build scripts")
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from gradlestep.core.exceptions import LockfileError
from gradlestep.core.filesystem import (
    FilesystemError,
    atomic_write,
    compute_file_hash,
    walk_tree,
)

logger = logging.getLogger(__name__)

LOCKFILE_NAME = "gradle.deps"
DEPENDENCY_FILE_SUFFIX = ".gradle"
EXCLUDED_DIR_NAMES = ("node_modules",)


@dataclass
class DependencyLockfile:
    """
    A generated dependency lockfile.

    Attributes:
        path: Location of the lockfile on disk
        content: Concatenated fingerprints, in file order
        files: Build scripts that contributed a fingerprint
        skipped: Build scripts that could not be fingerprinted
    """

    path: Path
    content: str
    files: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)


class DependencyLockfileBuilder:
    """
    Builds the dependency lockfile for a project tree.

    Build scripts are matched by file name suffix; directories named in
    ``excluded_dirs`` are never descended into. Matched files are fingerprinted
    in sorted path order so the lockfile is reproducible across runs.

    Attributes:
        project_root: Directory to scan
        lockfile_path: Path the lockfile is written to
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        lockfile_name: str = LOCKFILE_NAME,
        suffix: str = DEPENDENCY_FILE_SUFFIX,
        excluded_dirs: Iterable[str] = EXCLUDED_DIR_NAMES,
        algorithm: str = "md5",
    ):
        self.project_root = Path(project_root)
        self.lockfile_path = self.project_root / lockfile_name
        self.suffix = suffix
        self.excluded_dirs = tuple(excluded_dirs)
        self.algorithm = algorithm

    def find_dependency_files(self) -> List[Path]:
        """
        Find all build scripts under the project root.

        Returns:
            Matching file paths, sorted lexicographically

        Raises:
            LockfileError: If the tree walk fails
        """
        matches = []
        try:
            for dirpath, _dirnames, filenames in walk_tree(
                self.project_root, prune_dirs=self.excluded_dirs
            ):
                for name in filenames:
                    if name.endswith(self.suffix):
                        matches.append(dirpath / name)
        except OSError as e:
            raise LockfileError(
                f"Failed to collect dependency files under {self.project_root}: {e}"
            ) from e

        return sorted(matches)

    def fingerprint(self, file_path: Path) -> Optional[str]:
        """
        Fingerprint a single build script.

        Returns:
            Hex digest, or None if the file could not be read
        """
        try:
            return compute_file_hash(file_path, algorithm=self.algorithm)
        except (OSError, FilesystemError) as e:
            logger.warning(f"Failed to compute hash of file ({file_path}): {e}")
            return None

    def build(self) -> DependencyLockfile:
        """
        Generate the lockfile and write it to disk.

        An existing lockfile is overwritten unconditionally.

        Returns:
            The generated lockfile

        Raises:
            LockfileError: If the tree walk or the write fails
        """
        lockfile = DependencyLockfile(path=self.lockfile_path, content="")
        digests = []

        for file_path in self.find_dependency_files():
            digest = self.fingerprint(file_path)
            if digest is None:
                lockfile.skipped.append(file_path)
                continue
            digests.append(digest)
            lockfile.files.append(file_path)
            logger.debug(f"Fingerprinted {file_path}: {digest}")

        lockfile.content = "".join(digests)

        try:
            atomic_write(self.lockfile_path, lockfile.content)
        except OSError as e:
            raise LockfileError(
                f"Failed to write lockfile {self.lockfile_path}: {e}"
            ) from e

        logger.info(
            f"Generated dependency lockfile from {len(lockfile.files)} build scripts"
            + (f" ({len(lockfile.skipped)} skipped)" if lockfile.skipped else "")
        )
        return lockfile
