"""Tests for executable discovery and profile lock cleanup."""

import os

from wa_bridge.session_manager.profile import (
    clear_profile_locks,
    cleanup_profile_locks,
    ensure_profile_dir,
    resolve_executable_path,
)


class TestResolveExecutablePath:

    def test_override_wins(self, tmp_path):
        chrome = tmp_path / "chrome"
        chrome.write_text("")
        chrome.chmod(0o755)
        assert resolve_executable_path("/custom/chrome", [str(chrome)]) == "/custom/chrome"

    def test_first_existing_candidate(self, tmp_path):
        first = tmp_path / "chromium"
        second = tmp_path / "google-chrome"
        for path in (first, second):
            path.write_text("")
            path.chmod(0o755)

        missing = str(tmp_path / "missing")
        assert resolve_executable_path(None, [missing, str(first), str(second)]) == str(first)

    def test_skips_non_executable_files(self, tmp_path):
        plain = tmp_path / "chromium"
        plain.write_text("")
        plain.chmod(0o644)
        assert resolve_executable_path(None, [str(plain)]) is None

    def test_falls_back_to_managed_browser(self, tmp_path):
        assert resolve_executable_path(None, [str(tmp_path / "nope")]) is None


class TestProfileDir:

    def test_creates_nested_directory(self, tmp_path):
        profile = tmp_path / "a" / "b" / "chrome-profile"
        assert ensure_profile_dir(profile) == profile
        assert profile.is_dir()

    def test_existing_directory_is_fine(self, tmp_path):
        ensure_profile_dir(tmp_path)
        assert tmp_path.is_dir()


class TestClearProfileLocks:

    def test_removes_singleton_artifacts(self, tmp_path):
        # Chromium's SingletonLock is a symlink to "<host>-<pid>"
        os.symlink("host-12345", tmp_path / "SingletonLock")
        (tmp_path / "SingletonCookie").write_text("cookie")
        (tmp_path / "SingletonSocket").write_text("")
        (tmp_path / "SingletonSocket-abc").write_text("")
        (tmp_path / "Default").mkdir()
        (tmp_path / "Local State").write_text("{}")

        result = clear_profile_locks(tmp_path)

        assert result.ok
        assert sorted(p.name for p in result.removed) == [
            "SingletonCookie",
            "SingletonLock",
            "SingletonSocket",
            "SingletonSocket-abc",
        ]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["Default", "Local State"]

    def test_missing_profile_dir_is_noop(self, tmp_path):
        result = clear_profile_locks(tmp_path / "absent")
        assert result.ok
        assert result.removed == []

    def test_failures_are_reported_not_raised(self, tmp_path):
        (tmp_path / "SingletonCookie").mkdir()
        (tmp_path / "SingletonLock").write_text("")

        result = cleanup_profile_locks(tmp_path)

        assert not result.ok
        assert tmp_path / "SingletonCookie" in result.failed
        assert [p.name for p in result.removed] == ["SingletonLock"]
