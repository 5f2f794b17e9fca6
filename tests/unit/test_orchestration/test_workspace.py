"""
Unit tests for the run workspace (control file and data buffer).
"""

from unittest.mock import patch

import pytest

from procnetlog.orchestration import RunWorkspace


@pytest.mark.unit
class TestRunWorkspace:
    """Test cases for RunWorkspace creation and cleanup."""

    def test_creates_prefixed_files(self, temp_dir):
        workspace = RunWorkspace(temp_dir)
        with workspace as paths:
            assert paths.control_file.exists()
            assert paths.buffer_file.exists()
            assert paths.control_file.parent == temp_dir.resolve()
            assert paths.control_file.name.startswith("p1log")
            assert paths.buffer_file.name.startswith("p2log")

        assert not paths.control_file.exists()
        assert not paths.buffer_file.exists()

    def test_files_removed_on_exception(self, temp_dir):
        with pytest.raises(RuntimeError):
            with RunWorkspace(temp_dir) as paths:
                raise RuntimeError("interrupted")

        assert not paths.control_file.exists()
        assert not paths.buffer_file.exists()

    def test_concurrent_runs_do_not_collide(self, temp_dir):
        with RunWorkspace(temp_dir) as first, RunWorkspace(temp_dir) as second:
            assert first.control_file != second.control_file
            assert first.buffer_file != second.buffer_file
        assert list(temp_dir.iterdir()) == []

    def test_custom_prefixes(self, temp_dir):
        with RunWorkspace(temp_dir, control_prefix="ctl_", buffer_prefix="buf_") as paths:
            assert paths.control_file.name.startswith("ctl_")
            assert paths.buffer_file.name.startswith("buf_")

    def test_cleanup_is_idempotent(self, temp_dir):
        workspace = RunWorkspace(temp_dir)
        workspace.create()
        workspace.cleanup()
        workspace.cleanup()
        assert list(temp_dir.iterdir()) == []

    def test_cleanup_tolerates_already_removed_files(self, temp_dir):
        workspace = RunWorkspace(temp_dir)
        paths = workspace.create()
        paths.buffer_file.unlink()
        workspace.cleanup()
        assert not paths.control_file.exists()

    def test_create_twice(self, temp_dir):
        workspace = RunWorkspace(temp_dir)
        workspace.create()
        try:
            with pytest.raises(RuntimeError):
                workspace.create()
        finally:
            workspace.cleanup()

    def test_reusable_after_cleanup(self, temp_dir):
        workspace = RunWorkspace(temp_dir)
        with workspace:
            pass
        with workspace as paths:
            assert paths.buffer_file.exists()

    def test_atexit_hook_registered_and_removed(self, temp_dir):
        with patch("procnetlog.orchestration.workspace.atexit") as mock_atexit:
            workspace = RunWorkspace(temp_dir)
            with workspace:
                mock_atexit.register.assert_called_once_with(workspace.cleanup)
            mock_atexit.unregister.assert_called_once_with(workspace.cleanup)

    def test_missing_work_dir(self, temp_dir):
        workspace = RunWorkspace(temp_dir / "missing")
        with pytest.raises(OSError):
            workspace.create()
        assert workspace.paths is None
