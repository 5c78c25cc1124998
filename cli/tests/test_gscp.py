"""Tests for the gscp command-line entry point."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

import config
import gscp
from errors import ListingError, OpenError, PathParseError


@pytest.fixture
def mock_settings():
    with patch.object(gscp.config, "get_settings", return_value=dict(config.DEFAULTS)) as mock:
        yield mock


class TestUsage:
    """Argument errors exit with status 2 before any I/O."""

    @pytest.mark.parametrize("argv", [["cp"], ["cp", "only-source"]])
    @patch.object(gscp.transfer, "copy")
    def test_cp_needs_two_paths(self, mock_copy: MagicMock, mock_settings, argv, capsys):
        with pytest.raises(SystemExit) as exc:
            gscp.main(argv)

        assert exc.value.code == 2
        assert "gscp cp <src> <dst>" in capsys.readouterr().err
        mock_copy.assert_not_called()
        mock_settings.assert_not_called()

    def test_ls_needs_a_path(self, mock_settings):
        with pytest.raises(SystemExit) as exc:
            gscp.main(["ls"])

        assert exc.value.code == 2

    def test_missing_command(self, mock_settings, capsys):
        assert gscp.main([]) == 2
        assert "Missing command" in capsys.readouterr().err

    def test_unknown_command(self, mock_settings):
        with pytest.raises(SystemExit) as exc:
            gscp.main(["mv", "a", "b"])

        assert exc.value.code == 2


class TestDispatch:
    """Commands are routed to the copy and list routines."""

    @patch.object(gscp.transfer, "copy")
    def test_cp(self, mock_copy: MagicMock, mock_settings):
        assert gscp.main(["cp", "gs://bucket/key", "."]) == 0

        mock_copy.assert_called_once_with("gs://bucket/key", ".", settings=config.DEFAULTS)

    @patch.object(gscp.listing, "list_objects")
    def test_ls(self, mock_list: MagicMock, mock_settings):
        assert gscp.main(["ls", "gs://bucket/prefix"]) == 0

        mock_list.assert_called_once_with("gs://bucket/prefix", settings=config.DEFAULTS)


class TestErrors:
    """Errors are reported on stderr and mapped to exit statuses."""

    @patch.object(gscp.transfer, "copy")
    def test_open_error(self, mock_copy: MagicMock, mock_settings, capsys):
        mock_copy.side_effect = OpenError("Cannot open missing.txt: No such file or directory")

        assert gscp.main(["cp", "missing.txt", "-"]) == 1

        captured = capsys.readouterr()
        assert "Cannot open missing.txt" in captured.err
        assert captured.out == ""

    @patch.object(gscp.transfer, "copy")
    def test_path_error_is_usage_status(self, mock_copy: MagicMock, mock_settings):
        mock_copy.side_effect = PathParseError("Malformed path gs://bucket")

        assert gscp.main(["cp", "gs://bucket", "-"]) == 2

    @patch.object(gscp.listing, "list_objects")
    def test_listing_error(self, mock_list: MagicMock, mock_settings, capsys):
        mock_list.side_effect = ListingError("Listing gs://bucket/ failed: [denied]")

        assert gscp.main(["ls", "gs://bucket/"]) == 1
        assert "[denied]" in capsys.readouterr().err

    @patch.object(gscp.transfer, "copy")
    def test_interrupt(self, mock_copy: MagicMock, mock_settings):
        mock_copy.side_effect = KeyboardInterrupt

        assert gscp.main(["cp", "-", "-"]) == 130

    @patch.object(gscp, "silence_stdout")
    @patch.object(gscp.listing, "list_objects")
    def test_closed_stdout_exits_quietly(self, mock_list: MagicMock, mock_silence: MagicMock,
                                         mock_settings, capsys):
        mock_list.side_effect = BrokenPipeError(32, "Broken pipe")

        assert gscp.main(["ls", "gs://bucket/"]) == 1

        assert capsys.readouterr().err == ""
        mock_silence.assert_called_once()
