"""Tests for multipass_rdp.cli module."""

from __future__ import annotations

import os
import re
import signal
from unittest.mock import MagicMock, patch

import pytest

from multipass_rdp import cli
from multipass_rdp.exceptions import ConflictError, ResolutionError
from multipass_rdp.models import ConnectionInfo
from conftest import completed, info_json, list_json


class TestRenderSummary:
    def test_banner_layout(self):
        info = ConnectionInfo(name="rdp-vm", host="192.168.64.5", user="rdpuser", password="pw")
        text = cli.render_summary(info)
        assert "  VM 'rdp-vm' is ready!" in text
        assert "  Host     : 192.168.64.5" in text
        assert "  Port     : 3389" in text
        assert "  Username : rdpuser" in text
        assert "  Password : pw" in text
        assert "mstsc /v:192.168.64.5" in text
        assert "Microsoft Remote Desktop → Add PC → 192.168.64.5" in text
        assert "remmina -c rdp://rdpuser@192.168.64.5" in text
        assert "multipass delete rdp-vm --purge" in text

    def test_rules_frame_banner(self):
        lines = cli.render_summary(ConnectionInfo(name="a", host="h", user="u", password="p")).splitlines()
        assert lines[1] == "━" * 63
        assert lines[-1] == "━" * 63


class TestMain:
    def test_unknown_flag_returns_1_without_running(self, capsys):
        with patch("multipass_rdp.cli.Provisioner") as mock_prov:
            rc = cli.main(["--bogus"])
        assert rc == 1
        mock_prov.assert_not_called()
        assert "unrecognized arguments: --bogus" in capsys.readouterr().err

    def test_abbreviated_flag_returns_1_without_running(self, capsys):
        with patch("multipass_rdp.cli.Provisioner") as mock_prov:
            rc = cli.main(["--pass", "x"])
        assert rc == 1
        mock_prov.assert_not_called()
        assert "unrecognized arguments: --pass x" in capsys.readouterr().err

    def test_unknown_flag_makes_no_multipass_calls(self):
        with patch("multipass_rdp.multipass.run") as mock_run, patch("multipass_rdp.utils.subprocess.run") as sub_run:
            rc = cli.main(["--frobnicate", "x"])
        assert rc == 1
        mock_run.assert_not_called()
        sub_run.assert_not_called()

    def test_success_prints_summary(self):
        info = ConnectionInfo(name="rdp-vm", host="192.168.64.5", user="rdpuser", password="pw")
        fake = MagicMock()
        fake.run.return_value = info
        with (
            patch("multipass_rdp.cli.Provisioner", return_value=fake) as mock_prov,
            patch("multipass_rdp.cli.print_summary") as mock_print,
        ):
            rc = cli.main(["--name", "rdp-vm"])
        assert rc == 0
        assert mock_prov.call_args[0][0].name == "rdp-vm"
        mock_print.assert_called_once_with(info)
        fake.mark_reported.assert_called_once()

    def test_manager_error_returns_1(self):
        fake = MagicMock()
        fake.run.side_effect = ConflictError("A VM named 'rdp-vm' already exists.")
        with (
            patch("multipass_rdp.cli.Provisioner", return_value=fake),
            patch("multipass_rdp.cli.log") as mock_log,
        ):
            rc = cli.main([])
        assert rc == 1
        mock_log.assert_called_with("ERROR", "A VM named 'rdp-vm' already exists.")
        fake.mark_reported.assert_not_called()

    def test_keyboard_interrupt_returns_130(self):
        fake = MagicMock()
        fake.run.side_effect = KeyboardInterrupt
        with patch("multipass_rdp.cli.Provisioner", return_value=fake), patch("multipass_rdp.cli.log"):
            assert cli.main([]) == 130

    def test_unexpected_error_returns_1(self):
        fake = MagicMock()
        fake.run.side_effect = RuntimeError("boom")
        with (
            patch("multipass_rdp.cli.Provisioner", return_value=fake),
            patch("multipass_rdp.cli.log") as mock_log,
            patch("traceback.print_exc"),
        ):
            rc = cli.main([])
        assert rc == 1
        mock_log.assert_called_with("ERROR", "Unexpected error: boom")

    def test_sigterm_handler_restored(self):
        before = signal.getsignal(signal.SIGTERM)
        fake = MagicMock()
        fake.run.side_effect = ResolutionError("no ip")
        with patch("multipass_rdp.cli.Provisioner", return_value=fake), patch("multipass_rdp.cli.log"):
            cli.main([])
        assert signal.getsignal(signal.SIGTERM) is before

    def test_terminate_raises_system_exit(self):
        with pytest.raises(SystemExit) as exc:
            cli._terminate(signal.SIGTERM, None)
        assert exc.value.code == 128 + signal.SIGTERM


class TestEndToEnd:
    """Drive main() against scripted multipass responses."""

    def _run(self, argv, responses, template_path, monkeypatch):
        monkeypatch.setenv("CLOUD_INIT_TEMPLATE", str(template_path))
        with (
            patch("multipass_rdp.provisioner.require_command", return_value="/usr/bin/multipass"),
            patch("multipass_rdp.multipass.run", side_effect=responses) as mock_run,
        ):
            rc = cli.main(argv)
        return rc, mock_run

    def test_fixed_responses(self, template_path, monkeypatch, capsys):
        responses = [
            completed('{"list": []}'),
            completed(),
            completed(),
            completed(info_json("rdp-vm", ["192.168.64.5"])),
        ]
        rc, mock_run = self._run(["--password", "pw123"], responses, template_path, monkeypatch)
        assert rc == 0
        out = capsys.readouterr().out
        assert "Host     : 192.168.64.5" in out
        assert "Port     : 3389" in out
        assert "Username : rdpuser" in out
        assert "Password : pw123" in out

        launch_cmd = mock_run.call_args_list[1][0][0]
        assert launch_cmd[:2] == ["multipass", "launch"]
        payload_path = launch_cmd[launch_cmd.index("--cloud-init") + 1]
        assert not os.path.exists(payload_path)
        assert mock_run.call_args_list[2][0][0][1] == "exec"

    def test_generated_password_reported(self, template_path, monkeypatch, capsys):
        responses = [
            completed('{"list": []}'),
            completed(),
            completed(),
            completed(info_json("rdp-vm", ["192.168.64.5"])),
        ]
        rc, _ = self._run([], responses, template_path, monkeypatch)
        assert rc == 0
        match = re.search(r"Password : (\S+)", capsys.readouterr().out)
        assert match is not None
        assert len(match.group(1)) == 16

    def test_existing_name_conflicts(self, template_path, monkeypatch, capsys):
        rc, mock_run = self._run(["-n", "rdp-vm"], [completed(list_json("rdp-vm"))], template_path, monkeypatch)
        assert rc == 1
        assert mock_run.call_count == 1
        assert "already exists" in capsys.readouterr().err

    def test_no_address_fails(self, template_path, monkeypatch, capsys):
        responses = [
            completed('{"list": []}'),
            completed(),
            completed(),
            completed(info_json("rdp-vm", [])),
        ]
        rc, mock_run = self._run([], responses, template_path, monkeypatch)
        assert rc == 1
        assert mock_run.call_count == 4
        assert "Could not determine IP address for 'rdp-vm'." in capsys.readouterr().err
