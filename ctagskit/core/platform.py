"""
Platform detection for ctagskit.

Maps the running operating system and CPU architecture onto the naming
convention used by the Universal Ctags release artifacts.

Usage:
    from ctagskit.core.platform import detect_platform

    platform_info = detect_platform()
    print(f"OS: {platform_info.os}")
    print(f"Architecture: {platform_info.arch}")
    print(f"Binary: {platform_info.binary_name}")
"""

import functools
import platform
from dataclasses import dataclass

# Raw machine identifiers -> release artifact architecture token
ARCH_MAP = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "i386": "i686",
    "i686": "i686",
    "x86": "i686",
    "ia32": "i686",
}

KNOWN_ARCHITECTURES = frozenset(ARCH_MAP.values())


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform information relevant to picking a ctags release.

    Attributes:
        os: Operating system ('windows', 'macos', 'linux', or the raw
            lower-case system name for anything else)
        arch: Normalized architecture ('x86_64', 'aarch64', 'i686') or the
            raw machine identifier when unrecognized
        machine: Raw machine identifier as reported by the interpreter
    """

    os: str
    arch: str
    machine: str = ""

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    @property
    def is_mac(self) -> bool:
        return self.os == "macos"

    @property
    def is_linux(self) -> bool:
        return self.os == "linux"

    @property
    def binary_name(self) -> str:
        """File name of the ctags executable on this platform."""
        return "ctags.exe" if self.is_windows else "ctags"

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x86_64', 'macos-aarch64').

        Example:
            >>> PlatformInfo("linux", "x86_64").platform_string()
            'linux-x86_64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


def normalize_architecture(machine: str) -> str:
    """
    Normalize a raw CPU architecture identifier.

    Unrecognized identifiers pass through unchanged.

    Example:
        >>> normalize_architecture("AMD64")
        'x86_64'
        >>> normalize_architecture("riscv64")
        'riscv64'
    """
    return ARCH_MAP.get(machine.lower(), machine)


def normalize_os(system: str) -> str:
    """Normalize platform.system() output ('Darwin' -> 'macos')."""
    system = system.lower()
    if system == "darwin":
        return "macos"
    if system.startswith(("win", "cygwin", "msys")):
        return "windows"
    return system


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Example:
        >>> platform_info = detect_platform()
        >>> print(f"Running on {platform_info.platform_string()}")
        Running on linux-x86_64
    """
    machine = platform.machine()
    return PlatformInfo(
        os=normalize_os(platform.system()),
        arch=normalize_architecture(machine),
        machine=machine,
    )


def clear_platform_cache() -> None:
    """Clear the cached platform detection result (useful in tests)."""
    detect_platform.cache_clear()
