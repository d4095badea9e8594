"""Unit tests for state.py: ErrorStatus, DeviceState."""

import threading

import pytest

from pjlink.class1.enums import (
    CommandCodes,
    ErrorFlags,
    InputCode,
    MuteState,
    PowerState,
    Severity,
    Subsystem,
)
from pjlink.class1.state import DeviceState, ErrorStatus

# --- ErrorStatus ---


def test_error_status_from_digits():
    errors = ErrorStatus.from_digits("001000")
    assert errors.temperature == Severity.WARNING
    assert errors.get(Subsystem.FAN) == Severity.NONE
    assert errors.to_flags() == ErrorFlags.TEMPERATURE_WARNING


def test_error_status_all_errors():
    flags = ErrorStatus.from_digits("222222").to_flags()
    for subsystem in Subsystem:
        assert flags & ErrorFlags.for_severity(subsystem, Severity.ERROR)
        assert not flags & ErrorFlags.for_severity(subsystem, Severity.WARNING)


def test_error_status_mixed():
    flags = ErrorStatus.from_digits("120001").to_flags()
    assert flags == ErrorFlags.FAN_WARNING | ErrorFlags.LAMP_ERROR | ErrorFlags.OTHER_WARNING


@pytest.mark.parametrize("digits", ["", "00100", "0010000", "00a000", "003000", "-10000"])
def test_error_status_invalid(digits):
    with pytest.raises(ValueError):
        ErrorStatus.from_digits(digits)


def test_error_status_default():
    assert ErrorStatus().to_flags() == ErrorFlags.NONE


# --- DeviceState defaults ---


def test_initial_state():
    state = DeviceState()
    assert state.confirmed.power == PowerState.OFF
    assert state.confirmed.input == InputCode.RGB_1
    assert state.confirmed.av_mute == MuteState.OFF
    assert state.confirmed.lamp_hours == 0
    assert state.confirmed.connection_error is False
    assert state.pending.power == PowerState.OFF
    assert state.pending.audio_mute_restore is False


def test_to_dict(state):
    state.report_lamp_hours(42)
    data = state.to_dict()
    assert data["LAMP_HOURS"] == 42
    assert data["POWER"] == PowerState.OFF
    assert data["AV_MUTE"] == MuteState.OFF
    assert data["ERRORS"] == ErrorFlags.NONE
    assert "DeviceState" in repr(state)


# --- Outstanding set-commands ---


def test_begin_finish(state):
    state.begin(CommandCodes.POWER)
    state.begin(CommandCodes.POWER)
    assert state.outstanding(CommandCodes.POWER)
    state.finish("%1POWR 1")
    assert state.outstanding(CommandCodes.POWER)
    state.finish("%1POWR 0")
    assert not state.outstanding(CommandCodes.POWER)


def test_finish_ignores_queries(state):
    state.begin(CommandCodes.AV_MUTE)
    state.finish("%1AVMT ?")
    assert state.outstanding(CommandCodes.AV_MUTE)


def test_finish_never_goes_negative(state):
    state.finish("%1INPT 31")
    state.begin(CommandCodes.INPUT)
    assert state.outstanding(CommandCodes.INPUT)


def test_finish_ignores_garbage(state):
    state.finish("hello")
    state.finish("%1CLSS 1")
    assert not state.outstanding(CommandCodes.POWER)


@pytest.mark.parametrize(
    "first,last",
    [("%1AVMT 10", "%1AVMT 21"), ("%1INPT 31", "%1INPT 32"), ("%1POWR 1", "%1POWR 1")],
)
def test_last_finish_resyncs_pending(state, first, last):
    cmd = CommandCodes(first[2:6])
    state.begin(cmd)
    state.begin(cmd)
    state.pending.power = PowerState.ON
    state.pending.input = InputCode.DIGITAL_2
    state.pending.audio_muted = True

    state.finish(first)
    assert (state.pending.power, state.pending.input, state.pending.audio_muted) == (
        PowerState.ON,
        InputCode.DIGITAL_2,
        True,
    )

    state.finish(last)
    assert not state.outstanding(cmd)
    if cmd == CommandCodes.POWER:
        assert state.pending.power == PowerState.OFF
    elif cmd == CommandCodes.INPUT:
        assert state.pending.input == InputCode.RGB_1
    else:
        assert state.pending.audio_muted is False


def test_finish_after_accept_keeps_target(state):
    state.begin(CommandCodes.INPUT)
    state.pending.input = InputCode.DIGITAL_1
    state.accept_input()
    state.finish("%1INPT 31")
    assert state.pending.input == InputCode.DIGITAL_1


def test_begin_from_threads(state):
    def begin_many():
        for _ in range(1000):
            state.begin(CommandCodes.AV_MUTE)

    for _ in range(2000):
        state.begin(CommandCodes.AV_MUTE)
    threads = [threading.Thread(target=begin_many) for _ in range(4)]
    for thread in threads:
        thread.start()
    for _ in range(2000):
        state.finish("%1AVMT 31")
    for thread in threads:
        thread.join()

    for _ in range(3999):
        state.finish("%1AVMT 31")
    assert state.outstanding(CommandCodes.AV_MUTE)
    state.finish("%1AVMT 31")
    assert not state.outstanding(CommandCodes.AV_MUTE)


# --- Reports and reconciliation ---


def test_report_power_syncs_pending(state):
    state.report_power(PowerState.ON)
    assert state.confirmed.power == PowerState.ON
    assert state.pending.power == PowerState.ON


def test_report_power_keeps_pending_while_outstanding(state):
    state.begin(CommandCodes.POWER)
    state.pending.power = PowerState.WARMING
    state.report_power(PowerState.OFF)
    assert state.confirmed.power == PowerState.OFF
    assert state.pending.power == PowerState.WARMING


def test_accept_power(state):
    state.pending.power = PowerState.WARMING
    state.accept_power()
    assert state.confirmed.power == PowerState.WARMING


def test_input_accept_and_reject(state):
    state.pending.input = InputCode.DIGITAL_1
    state.accept_input()
    assert state.confirmed.input == InputCode.DIGITAL_1

    state.pending.input = InputCode.NETWORK_1
    state.reject_input()
    assert state.pending.input == InputCode.DIGITAL_1


def test_report_input(state):
    state.report_input(3)
    assert state.confirmed.input == 3
    assert state.pending.input == 3


def test_av_mute_report_accept_reject(state):
    state.report_av_mute(True, True)
    assert state.confirmed.av_mute == MuteState.AUDIO_VIDEO
    assert state.pending.video_muted

    state.begin(CommandCodes.AV_MUTE)
    state.pending.audio_muted = False
    state.pending.video_muted = False
    state.report_av_mute(True, False)
    assert state.confirmed.av_mute == MuteState.AUDIO_ONLY
    assert not state.pending.audio_muted

    state.reject_av_mute()
    assert state.pending.audio_muted
    assert not state.pending.video_muted

    state.pending.audio_muted = False
    state.accept_av_mute()
    assert state.confirmed.av_mute == MuteState.OFF


def test_report_errors(state):
    errors = ErrorStatus.from_digits("000020")
    state.report_errors(errors)
    assert state.confirmed.errors.to_flags() == ErrorFlags.FILTER_ERROR


def test_set_connection_error_returns_previous(state):
    assert state.set_connection_error(True) is False
    assert state.set_connection_error(True) is True
    assert state.set_connection_error(False) is True
    assert state.set_connection_error(False) is False
    assert state.confirmed.connection_error is False
