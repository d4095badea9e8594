"""Interpretation of PJLink response lines.

Each line a device sends after the greeting is matched on literal
prefixes and suffixes, in a fixed order. Recognised lines update the
`DeviceState` and raise events through the `EventNotifier`. Lines that
fail a format or length check are logged and ignored.
"""

import logging

from .enums import ErrorFlags, EventType, InputCode, MuteState, PowerState
from .events import Event, EventNotifier
from .exceptions import AuthenticationFailed
from .state import DeviceState, ErrorStatus

_LOGGER = logging.getLogger(__name__)

RESPONSE_POWER = "%1POWR="
RESPONSE_INPUT = "%1INPT="
RESPONSE_AV_MUTE = "%1AVMT="
RESPONSE_ERROR_STATUS = "%1ERST="
RESPONSE_LAMP = "%1LAMP="
RESPONSE_INPUT_LIST = "%1INST="

RESPONSE_OK = "OK"
RESPONSE_ERRA = " ERRA"
RESPONSE_ERR1 = "ERR1"
RESPONSE_ERR2 = "ERR2"
RESPONSE_ERR3 = "ERR3"
RESPONSE_ERR4 = "ERR4"

_DATA_OFFSET = 7
_ERROR_STATUS_LENGTH = 13

_AV_MUTE_FLAGS = {
    MuteState.VIDEO_ONLY: (False, True),
    MuteState.AUDIO_ONLY: (True, False),
    MuteState.AUDIO_VIDEO: (True, True),
    MuteState.OFF: (False, False),
}


class ResponseParser:
    def __init__(self, state: DeviceState, notifier: EventNotifier) -> None:
        self._state = state
        self._notifier = notifier

    def parse(self, line: str) -> None:
        """Apply one response line.

        Raises AuthenticationFailed when the device rejected the
        challenge response, after which the session must be dropped.
        """
        _LOGGER.debug("Parsing %r", line)

        if RESPONSE_ERRA in line:
            _LOGGER.error("Authentication rejected by projector")
            self._notifier.notify(Event.error(ErrorFlags.AUTHENTICATION))
            raise AuthenticationFailed(line)

        if line.endswith(RESPONSE_ERR1):
            self._notifier.notify(Event.error(ErrorFlags.UNDEFINED_COMMAND))

        if line.endswith(RESPONSE_ERR3):
            self._notifier.notify(Event.error(ErrorFlags.UNAVAILABLE_TIME))
        elif line.endswith(RESPONSE_ERR4):
            self._notifier.notify(Event.error(ErrorFlags.PROJECTOR_FAILURE))
        elif line.startswith(RESPONSE_POWER):
            self._parse_power(line)
        elif line.startswith(RESPONSE_INPUT):
            self._parse_input(line)
        elif line.startswith(RESPONSE_AV_MUTE):
            self._parse_av_mute(line)
        elif line.startswith(RESPONSE_ERROR_STATUS):
            self._parse_error_status(line)
        elif line.startswith(RESPONSE_LAMP):
            self._parse_lamp(line)
        elif line.startswith(RESPONSE_INPUT_LIST):
            # Input list enumeration is not interpreted
            pass

    def _parse_power(self, line: str) -> None:
        if line.endswith(RESPONSE_OK):
            self._state.accept_power()
        else:
            try:
                power = PowerState(int(line[_DATA_OFFSET:]))
            except ValueError:
                _LOGGER.warning("Ignoring invalid power response %r", line)
                return
            self._state.report_power(power)
        self._notifier.notify(Event(EventType.POWER, self._state.confirmed.power))

    def _parse_input(self, line: str) -> None:
        if line.endswith(RESPONSE_OK):
            self._state.accept_input()
        elif line.endswith(RESPONSE_ERR2):
            self._state.reject_input()
            self._notifier.notify(Event(EventType.INPUT, InputCode.NONEXISTENT_SOURCE))
            return
        else:
            # Only the input class digit is read, not the full code
            try:
                input_class = int(line[_DATA_OFFSET : _DATA_OFFSET + 1])
            except ValueError:
                _LOGGER.warning("Ignoring invalid input response %r", line)
                return
            if input_class > 0:
                self._state.report_input(input_class)
        self._notifier.notify(Event(EventType.INPUT, self._state.confirmed.input))

    def _parse_av_mute(self, line: str) -> None:
        if line.endswith(RESPONSE_OK):
            self._state.accept_av_mute()
        elif line.endswith(RESPONSE_ERR2):
            self._state.reject_av_mute()
            self._notifier.notify(Event(EventType.AV_MUTE, MuteState.CANNOT_MUTE))
            return
        else:
            try:
                code = int(line[_DATA_OFFSET : _DATA_OFFSET + 2])
            except ValueError:
                _LOGGER.warning("Ignoring invalid A/V mute response %r", line)
                return
            flags = _AV_MUTE_FLAGS.get(code)
            if flags is not None:
                self._state.report_av_mute(*flags)
        self._notifier.notify(Event(EventType.AV_MUTE, self._state.confirmed.av_mute))

    def _parse_error_status(self, line: str) -> None:
        if len(line) != _ERROR_STATUS_LENGTH:
            _LOGGER.debug("Ignoring error status of unexpected length %r", line)
            return
        try:
            errors = ErrorStatus.from_digits(line[_DATA_OFFSET:])
        except ValueError:
            _LOGGER.warning("Ignoring invalid error status %r", line)
            return
        self._state.report_errors(errors)
        self._notifier.notify(Event.error(errors.to_flags()))

    def _parse_lamp(self, line: str) -> None:
        hours, _, _ = line[_DATA_OFFSET:].partition(" ")
        try:
            lamp_hours = int(hours)
        except ValueError:
            _LOGGER.warning("Ignoring invalid lamp response %r", line)
            return
        self._state.report_lamp_hours(lamp_hours)
        self._notifier.notify(Event(EventType.LAMP, lamp_hours))
