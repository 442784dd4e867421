"""Tests for command dispatch over a scripted serial port."""

from unittest.mock import MagicMock

import pytest

from sharp_aquos_mcp.dispatcher import DispatchContext, Dispatcher, DispatchState
from sharp_aquos_mcp.exceptions import (
    ArgumentValidationError,
    CommandRejectedError,
    NoResponseError,
    TransportError,
    UnexpectedResponseError,
    UnknownCommandError,
)
from sharp_aquos_mcp.protocol.commands import ProtocolVariant, get_command_table
from sharp_aquos_mcp.protocol.parser import ResponseOutcome


def make_dispatcher(connection, variant=ProtocolVariant.LEGACY):
    context = DispatchContext(connection=connection, timeout=0.05)
    return Dispatcher(get_command_table(variant), context)


def test_single_frame_success(connection, fake_serial):
    fake_serial.queue(b"OK\r")
    result = make_dispatcher(connection).dispatch("power", ["on"])
    assert result.ok
    assert result.state is DispatchState.DONE
    assert fake_serial.writes == [b"POWR1   \r"]
    assert [step.response.outcome for step in result.steps] == [ResponseOutcome.SUCCESS]
    result.raise_for_status()


def test_two_frame_success(connection, fake_serial):
    fake_serial.queue(b"OK\r", b"OK\r")
    result = make_dispatcher(connection).dispatch("dcabl1", ["105.3"])
    assert result.ok
    assert fake_serial.writes == [b"DC2U105 \r", b"DC2L003 \r"]
    assert len(result.steps) == 2


def test_error_on_first_frame_skips_second(connection, fake_serial):
    fake_serial.queue(b"ERR\r", b"OK\r")
    result = make_dispatcher(connection).dispatch("dcabl1", ["105.3"])
    assert not result.ok
    assert result.state is DispatchState.FAILED
    assert fake_serial.writes == [b"DC2U105 \r"]
    assert len(result.steps) == 1
    assert result.failed_step.frame.opcode == "DC2U"
    with pytest.raises(CommandRejectedError) as exc_info:
        result.raise_for_status()
    assert "DC2U105 " in str(exc_info.value)


def test_unexpected_payload_fails(connection, fake_serial):
    fake_serial.queue(b"GARBLED\r")
    result = make_dispatcher(connection).dispatch("vol", ["20"])
    assert not result.ok
    assert result.steps[0].response.payload == "GARBLED"
    with pytest.raises(UnexpectedResponseError) as exc_info:
        result.raise_for_status()
    assert exc_info.value.payload == "GARBLED"


def test_timeout_is_fatal(connection, fake_serial):
    fake_serial.queue(b"", b"OK\r")
    dispatcher = make_dispatcher(connection)
    with pytest.raises(NoResponseError) as exc_info:
        dispatcher.dispatch("dcabl1", ["5.1"])
    assert exc_info.value.frame_text == "DC2U005 "
    assert dispatcher.state is DispatchState.FAILED
    assert fake_serial.writes == [b"DC2U005 \r"]


def test_unknown_command_does_no_io():
    connection = MagicMock()
    dispatcher = make_dispatcher(connection)
    with pytest.raises(UnknownCommandError):
        dispatcher.dispatch("volume", ["10"])
    connection.write.assert_not_called()
    connection.read_line.assert_not_called()
    assert dispatcher.state is DispatchState.FAILED


def test_validation_error_does_no_io():
    connection = MagicMock()
    with pytest.raises(ArgumentValidationError):
        make_dispatcher(connection).dispatch("vol", ["61"])
    connection.write.assert_not_called()


def test_variant_specific_command_unknown_in_legacy():
    with pytest.raises(UnknownCommandError):
        make_dispatcher(MagicMock()).dispatch("button", ["menu"])


def test_dry_run_never_writes():
    connection = MagicMock()
    context = DispatchContext(connection=connection, dry_run=True)
    result = Dispatcher(get_command_table(ProtocolVariant.LEGACY), context).dispatch(
        "dcabl1", ["105.3"]
    )
    assert result.ok
    assert result.dry_run
    assert [step.frame.text for step in result.steps] == ["DC2U105 ", "DC2L003 "]
    assert all(not step.sent for step in result.steps)
    connection.write.assert_not_called()
    connection.read_line.assert_not_called()


def test_dry_run_needs_no_connection():
    context = DispatchContext(dry_run=True)
    result = Dispatcher(get_command_table(ProtocolVariant.EXTENDED), context).dispatch(
        "button", ["menu"]
    )
    assert result.ok
    assert result.frames[0].to_bytes() == b"RCKY38  \r"


def test_context_requires_connection_when_sending():
    with pytest.raises(ValueError):
        DispatchContext()


def test_prepare_returns_frames_without_io():
    connection = MagicMock()
    frames = make_dispatcher(connection).prepare("input", ["tv"])
    assert [frame.text for frame in frames] == ["ITVD0   "]
    connection.write.assert_not_called()


def test_result_to_dict(connection, fake_serial):
    fake_serial.queue(b"OK\r")
    data = make_dispatcher(connection).dispatch("mute", []).to_dict()
    assert data["ok"] is True
    assert data["state"] == "done"
    assert data["steps"][0]["frame"] == "MUTE0   \r"
    assert data["steps"][0]["outcome"] == "success"


def test_timeout_carries_completed_steps(connection, fake_serial):
    fake_serial.queue(b"OK\r", b"")
    with pytest.raises(NoResponseError) as exc_info:
        make_dispatcher(connection).dispatch("dcabl1", ["5.1"])
    steps = exc_info.value.result.steps
    assert [step.response.outcome for step in steps] == [
        ResponseOutcome.SUCCESS,
        ResponseOutcome.TIMEOUT,
    ]
    assert exc_info.value.frame_text == "DC2L001 "


def test_transport_failure_marks_dispatch_failed():
    connection = MagicMock()
    connection.write.side_effect = TransportError("FAKE", "device disconnected")
    dispatcher = make_dispatcher(connection)
    with pytest.raises(TransportError):
        dispatcher.dispatch("power", ["on"])
    assert dispatcher.state is DispatchState.FAILED
    connection.read_line.assert_not_called()
