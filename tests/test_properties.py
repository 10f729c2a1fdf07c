import logging
import subprocess

from adbroot.properties import RecordingControl, SetpropControl


def test_setprop_invokes_tool(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(subprocess, "run", fake_run)
    control = SetpropControl()
    assert control.set_property("service.adb.root", "0")
    assert control.restart("adbd")
    assert calls == [
        ["setprop", "service.adb.root", "0"],
        ["setprop", "ctl.restart", "adbd"],
    ]


def test_missing_setprop_logs_error(caplog):
    control = SetpropControl(setprop="/nonexistent/setprop")
    with caplog.at_level(logging.ERROR, logger="adbroot.properties"):
        assert control.restart("adbd") is False
    assert "command not found" in caplog.text


def test_failing_setprop_logs_stderr(monkeypatch, caplog):
    def fake_run(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd, stderr="permission denied\n")

    monkeypatch.setattr(subprocess, "run", fake_run)
    with caplog.at_level(logging.ERROR, logger="adbroot.properties"):
        assert SetpropControl().set_property("service.adb.root", "0") is False
    assert "permission denied" in caplog.text


def test_recording_control():
    control = RecordingControl()
    control.set_property("a", "1")
    control.restart("adbd")
    assert control.properties == {"a": "1", "ctl.restart": "adbd"}
    assert control.restarts == ["adbd"]
