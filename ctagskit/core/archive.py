"""
Archive normalization for downloaded ctags releases.

An extractor unpacks a release archive into a private staging directory
inside the install root, moves the ctags executable to the root of the
install directory and then removes the staging directory. The tar.gz and zip
variants differ only in how they unpack and in the executable name they look
for; both end with the same layout:

    <install-root>/
        ctags            (ctags.exe for the zip variant)
        ctags.tar.gz     (the archive, until the caller deletes it)

Unrelated entries already in the install root are left alone. Entries that
carry the name of one of the archive's top-level entries are leftovers of an
interrupted install and are removed, as are stale staging directories.

Usage:
    from ctagskit.core.archive import extractor_for_archive

    extractor = extractor_for_archive("bin/ctags.tar.gz")
    binary = extractor.extract(Path("bin/ctags.tar.gz"), Path("bin"))
"""

import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from ctagskit.core.exceptions import ExtractionError
from ctagskit.core.filesystem import move_file, remove_path, unpack_tar_gz, unpack_zip
from ctagskit.core.platform import PlatformInfo

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".ctagskit-extract-"


class ArchiveExtractor(ABC):
    """
    Abstract base class for release archive extractors.

    Subclasses define:
        binary_name: Executable file name to isolate
        suffixes: Archive file name suffixes the variant handles
        unpack(): Unpack the whole archive into a directory
    """

    binary_name: str = ""
    suffixes: tuple = ()

    @abstractmethod
    def unpack(self, archive_path: Path, destination: Path) -> None:
        """Unpack every member of archive_path into destination."""

    @property
    def archive_name(self) -> str:
        """Local file name for a downloaded archive of this variant."""
        return f"ctags{self.suffixes[0]}"

    def handles(self, archive_path: Union[str, Path]) -> bool:
        """Check whether this variant handles the given archive name."""
        return Path(archive_path).name.lower().endswith(self.suffixes)

    def matches(self, path: Path) -> bool:
        """Check whether an extracted file is the executable (exact or suffix match)."""
        return path.name.endswith(self.binary_name)

    def extract(
        self, archive_path: Union[str, Path], destination: Union[str, Path]
    ) -> Path:
        """
        Extract archive_path into destination and isolate the executable.

        Args:
            archive_path: Downloaded archive
            destination: Install root; created if missing

        Returns:
            Canonical path of the executable (destination / binary_name)

        Raises:
            ExtractionError: If the archive is corrupt or lacks the executable
            FilesystemError: If moving or cleaning up fails
        """
        archive_path = Path(archive_path)
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)
        target = destination / self.binary_name

        self._remove_stale_staging(destination)
        staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=destination))

        try:
            logger.debug(f"Unpacking {archive_path} into {staging}")
            self.unpack(archive_path, staging)

            binary = self._find_binary(staging)
            if binary is None:
                raise ExtractionError(
                    f"Could not find {self.binary_name} in archive {archive_path.name}"
                )

            self._remove_leftovers(staging, destination, keep=(target, archive_path))

            # A previous binary is replaced by the new one
            remove_path(target)
            logger.debug(f"Moving {binary} to {target}")
            move_file(binary, target)
        finally:
            remove_path(staging)

        return target

    def _find_binary(self, staging: Path) -> Optional[Path]:
        """Find the executable in the staging tree, preferring exact and shallow matches."""
        matches = [
            p
            for p in sorted(staging.rglob("*"))
            if p.is_file() and not p.is_symlink() and self.matches(p)
        ]
        if not matches:
            return None

        matches.sort(
            key=lambda p: (
                p.name != self.binary_name,
                len(p.relative_to(staging).parts),
                str(p),
            )
        )
        return matches[0]

    def _remove_leftovers(self, staging: Path, destination: Path, keep: tuple) -> None:
        """Remove root entries named like the archive's top-level entries."""
        keep_paths = {Path(p).resolve() for p in keep}
        for entry in sorted(staging.iterdir()):
            leftover = destination / entry.name
            if leftover.resolve() in keep_paths:
                continue
            if leftover.exists() or leftover.is_symlink():
                logger.debug(f"Removing leftover {leftover}")
                remove_path(leftover)

    def _remove_stale_staging(self, destination: Path) -> None:
        """Remove staging directories left behind by an interrupted extraction."""
        for entry in destination.glob(f"{STAGING_PREFIX}*"):
            logger.debug(f"Removing stale staging directory {entry}")
            remove_path(entry)


class TarGzExtractor(ArchiveExtractor):
    """Extractor for the uctags-*.tar.gz releases (macOS, Linux)."""

    binary_name = "ctags"
    suffixes = (".tar.gz", ".tgz")

    def unpack(self, archive_path: Path, destination: Path) -> None:
        unpack_tar_gz(archive_path, destination)


class ZipExtractor(ArchiveExtractor):
    """Extractor for the ctags-*.zip releases (Windows)."""

    binary_name = "ctags.exe"
    suffixes = (".zip",)

    def unpack(self, archive_path: Path, destination: Path) -> None:
        unpack_zip(archive_path, destination)


EXTRACTORS = (TarGzExtractor, ZipExtractor)


def get_extractor(platform: PlatformInfo) -> ArchiveExtractor:
    """Return the extractor for the archives published for a platform."""
    return ZipExtractor() if platform.is_windows else TarGzExtractor()


def extractor_for_archive(archive_path: Union[str, Path]) -> ArchiveExtractor:
    """
    Return the extractor that handles an archive, based on its file name.

    Raises:
        ExtractionError: If no extractor handles the archive format
    """
    for extractor_cls in EXTRACTORS:
        extractor = extractor_cls()
        if extractor.handles(archive_path):
            return extractor

    raise ExtractionError(
        f"Unsupported archive format: {Path(archive_path).name}. "
        "Supported: .tar.gz, .tgz, .zip"
    )
