"""Tests for the aquosctl command line."""

import serial

from sharp_aquos_mcp.cli import format_command_list, main
from sharp_aquos_mcp.protocol.commands import ProtocolVariant, get_command_table


def test_dry_run_prints_frames(capsys):
    assert main(["-n", "dcabl1", "105.3"]) == 0
    out = capsys.readouterr().out
    assert "command='DC2U', parameter='105 '" in out
    assert "command='DC2L', parameter='003 '" in out


def test_dry_run_does_not_open_port(capsys):
    def refuse(**kwargs):
        raise AssertionError("port opened in dry-run mode")

    assert main(["-n", "power", "on"], serial_cls=refuse) == 0


def test_success(fake_serial, capsys):
    fake_serial.queue(b"OK\r")
    assert main(["-p", "FAKE", "vol", "20"], serial_cls=fake_serial.factory) == 0
    assert fake_serial.writes == [b"VOLM20  \r"]
    assert fake_serial.open_kwargs["port"] == "FAKE"
    assert not fake_serial.is_open


def test_no_response_reports_completed_steps(fake_serial, capsys):
    fake_serial.queue(b"OK\r", b"")
    argv = ["-v", "--timeout", "0.05", "-p", "FAKE", "dcabl1", "5.1"]
    assert main(argv, serial_cls=fake_serial.factory) == 1
    lines = capsys.readouterr().out.splitlines()
    assert lines[1:] == [
        "command='DC2U', parameter='005 '",
        "Success.",
        "command='DC2L', parameter='001 '",
        "No response.",
    ]


def test_port_failure_after_open(fake_serial, capsys):
    def unplugged(data):
        raise serial.SerialException("write failed: device disconnected")

    fake_serial.write = unplugged
    assert main(["-p", "FAKE", "power", "on"], serial_cls=fake_serial.factory) == 1
    err = capsys.readouterr().err
    assert "I/O error on FAKE" in err
    assert "device disconnected" in err
    assert not fake_serial.is_open


def test_verbose_reports_success(fake_serial, capsys):
    fake_serial.queue(b"OK\r")
    assert main(["-v", "-p", "FAKE", "mute", "on"], serial_cls=fake_serial.factory) == 0
    out = capsys.readouterr().out
    assert "port=FAKE" in out
    assert "command='MUTE', parameter='1   '" in out
    assert "Success." in out


def test_device_error(fake_serial, capsys):
    fake_serial.queue(b"ERR\r")
    assert main(["power", "on"], serial_cls=fake_serial.factory) == 1
    assert "Error: command/param 'POWR1   '" in capsys.readouterr().err


def test_unexpected_response(fake_serial, capsys):
    fake_serial.queue(b"WAIT\r")
    assert main(["power", "on"], serial_cls=fake_serial.factory) == 1
    assert "unexpected response 'WAIT'" in capsys.readouterr().err


def test_no_response(fake_serial, capsys):
    assert main(["--timeout", "0.05", "chup"], serial_cls=fake_serial.factory) == 1
    assert "No response." in capsys.readouterr().out
    assert not fake_serial.is_open


def test_bad_command_before_opening_port(capsys):
    def refuse(**kwargs):
        raise AssertionError("port opened for an invalid command")

    assert main(["volume", "10"], serial_cls=refuse) == 1
    assert "bad command 'volume'" in capsys.readouterr().err


def test_invalid_parameter(capsys):
    assert main(["-n", "vol", "61"]) == 1
    err = capsys.readouterr().err
    assert 'Invalid parameter "61" for command vol' in err


def test_oversized_parameter(capsys):
    assert main(["-n", "vol", "9" * 5000]) == 1
    assert "Invalid parameter" in capsys.readouterr().err


def test_port_open_failure(capsys):
    def refuse(**kwargs):
        raise serial.SerialException("No such file or directory")

    assert main(["-p", "/dev/nope", "power", "on"], serial_cls=refuse) == 1
    assert "cannot open /dev/nope" in capsys.readouterr().err


def test_protocol_flag(capsys):
    assert main(["-n", "button", "menu"]) == 1
    assert main(["-n", "--protocol", "extended", "button", "menu"]) == 0
    assert "command='RCKY', parameter='38  '" in capsys.readouterr().out


def test_protocol_from_environment(monkeypatch, capsys):
    monkeypatch.setenv("AQUOS_PROTOCOL", "extended")
    assert main(["-n", "3d", "sbs"]) == 0


def test_list(capsys):
    assert main(["--list"]) == 0
    out = capsys.readouterr().out
    assert "command protocol revision 12/16/05" in out
    assert "dcabl2" in out
    assert "button" not in out


def test_no_command_prints_usage_and_fails(capsys):
    assert main([]) == 1
    assert "command    args" in capsys.readouterr().err


def test_format_command_list_extended():
    text = format_command_list(get_command_table(ProtocolVariant.EXTENDED))
    assert "revision 12/17/10" in text
    assert "{ button on remote }" in text
    assert "[ tv | 1 - 8 ]" in text
