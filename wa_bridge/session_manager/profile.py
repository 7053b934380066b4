"""Chromium executable discovery and browser profile housekeeping."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from ..constants import CHROMIUM_CANDIDATE_PATHS, PROFILE_LOCK_FILES, PROFILE_SOCKET_PREFIX

logger = logging.getLogger(__name__)


@dataclass
class LockCleanupResult:
    """Outcome of a best-effort lock cleanup."""

    removed: list[Path] = field(default_factory=list)
    failed: dict[Path, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def resolve_executable_path(
    override: Optional[str] = None,
    candidates: Iterable[str] = CHROMIUM_CANDIDATE_PATHS,
) -> Optional[str]:
    """Pick the Chromium binary to launch.

    An explicit override wins. Otherwise the first existing executable from
    ``candidates`` is used. ``None`` means Playwright's managed browser.
    """
    if override:
        logger.info(f"Using configured browser executable: {override}")
        return override

    for candidate in candidates:
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            logger.info(f"Found browser executable: {candidate}")
            return candidate

    logger.info("No system Chromium found, falling back to Playwright's managed browser.")
    return None


def ensure_profile_dir(profile_dir: Path) -> Path:
    profile_dir.mkdir(parents=True, exist_ok=True)
    return profile_dir


def clear_profile_locks(profile_dir: Path) -> LockCleanupResult:
    """Remove stale Chromium singleton artifacts left by a crashed process.

    Never raises; failures are reported in the returned result.
    """
    result = LockCleanupResult()
    if not profile_dir.is_dir():
        return result

    targets = [profile_dir / name for name in PROFILE_LOCK_FILES]
    try:
        targets.extend(
            entry for entry in profile_dir.iterdir() if entry.name.startswith(PROFILE_SOCKET_PREFIX)
        )
    except OSError as e:
        result.failed[profile_dir] = str(e)

    for path in targets:
        # SingletonLock is usually a dangling symlink, so exists() is not enough
        if not (path.exists() or path.is_symlink()):
            continue
        try:
            path.unlink()
            result.removed.append(path)
        except OSError as e:
            result.failed[path] = str(e)

    return result


def cleanup_profile_locks(profile_dir: Path) -> LockCleanupResult:
    """Run ``clear_profile_locks`` and log the outcome."""
    result = clear_profile_locks(profile_dir)
    for path in result.removed:
        logger.info(f"Removed stale profile lock: {path.name}")
    for path, error in result.failed.items():
        logger.warning(f"Could not remove {path}: {error}")
    return result
