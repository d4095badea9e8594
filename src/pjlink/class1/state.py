"""Device state for a PJLink projector.

Keeps two views of the projector: the confirmed state, as last reported by
the device, and the pending state, the optimistic target set when a command
is issued. Pending equals confirmed except for fields targeted by a
set-command that has not finished executing yet.
"""

import logging
import threading
from collections import Counter
from typing import Any

import attr

from .enums import (
    CommandCodes,
    ErrorFlags,
    InputCode,
    MuteState,
    PowerState,
    Severity,
    Subsystem,
)
from .exceptions import InvalidPacket
from .packets import CommandPacket

_LOGGER = logging.getLogger(__name__)


@attr.s
class ErrorStatus:
    """Severity of each subsystem as reported by ERST."""

    fan: Severity = attr.ib(default=Severity.NONE)
    lamp: Severity = attr.ib(default=Severity.NONE)
    temperature: Severity = attr.ib(default=Severity.NONE)
    cover: Severity = attr.ib(default=Severity.NONE)
    filter: Severity = attr.ib(default=Severity.NONE)
    other: Severity = attr.ib(default=Severity.NONE)

    def get(self, subsystem: Subsystem) -> Severity:
        return getattr(self, subsystem.name.lower())

    def to_flags(self) -> ErrorFlags:
        flags = ErrorFlags.NONE
        for subsystem in Subsystem:
            flags |= ErrorFlags.for_severity(subsystem, self.get(subsystem))
        return flags

    @staticmethod
    def from_digits(digits: str) -> "ErrorStatus":
        """Parse the six ERST digits, in subsystem order.

        Raises ValueError for anything but six digits in 0-2.
        """
        if len(digits) != len(Subsystem) or not digits.isdigit():
            raise ValueError(f"Invalid error status {digits!r}")
        return ErrorStatus(*(Severity(int(digit)) for digit in digits))


@attr.s
class ConfirmedState:
    power: PowerState = attr.ib(default=PowerState.OFF)
    input: int = attr.ib(default=InputCode.RGB_1)
    audio_muted: bool = attr.ib(default=False)
    video_muted: bool = attr.ib(default=False)
    lamp_hours: int = attr.ib(default=0)
    errors: ErrorStatus = attr.ib(factory=ErrorStatus)
    connection_error: bool = attr.ib(default=False)

    @property
    def av_mute(self) -> MuteState:
        return MuteState.from_flags(self.audio_muted, self.video_muted)


@attr.s
class PendingState:
    power: PowerState = attr.ib(default=PowerState.OFF)
    input: int = attr.ib(default=InputCode.RGB_1)
    audio_muted: bool = attr.ib(default=False)
    video_muted: bool = attr.ib(default=False)
    # Audio mute to restore once video is unmuted again
    audio_mute_restore: bool = attr.ib(default=False)


class DeviceState:
    """Confirmed and pending state plus the reconciliation between them.

    Confirmed values are only written through the ``report_*``, ``accept_*``
    and ``reject_*`` methods, which the response parser calls. Pending values
    are written by the projector's command methods while holding `lock`.

    When the last outstanding set-command of a code finishes, pending is
    reset to confirmed for that code, whether the command succeeded, was
    refused or never reached the device.
    """

    def __init__(self) -> None:
        self.confirmed = ConfirmedState()
        self.pending = PendingState()
        self.lock = threading.RLock()
        self._outstanding: Counter[CommandCodes] = Counter()

    def to_dict(self) -> dict[str, Any]:
        return {
            "POWER": self.confirmed.power,
            "INPUT": self.confirmed.input,
            "AV_MUTE": self.confirmed.av_mute,
            "LAMP_HOURS": self.confirmed.lamp_hours,
            "ERRORS": self.confirmed.errors.to_flags(),
            "CONNECTION_ERROR": self.confirmed.connection_error,
        }

    def __repr__(self) -> str:
        return f"DeviceState ({self.to_dict()}) Pending ({self.pending})"

    # --- Outstanding set-commands ---

    def begin(self, cmd: CommandCodes) -> None:
        """Record that a set-command for *cmd* has been queued."""
        with self.lock:
            self._outstanding[cmd] += 1

    def finish(self, command: str) -> None:
        """Record that *command* has finished executing, whatever the outcome."""
        try:
            packet = CommandPacket.from_str(command)
        except InvalidPacket:
            return
        if packet.is_query:
            return
        with self.lock:
            if self._outstanding[packet.cmd] == 0:
                return
            self._outstanding[packet.cmd] -= 1
            if self._outstanding[packet.cmd] == 0:
                self._resync(packet.cmd)

    def outstanding(self, cmd: CommandCodes) -> bool:
        with self.lock:
            return self._outstanding[cmd] > 0

    def _resync(self, cmd: CommandCodes) -> None:
        if cmd == CommandCodes.POWER:
            self.pending.power = self.confirmed.power
        elif cmd == CommandCodes.INPUT:
            self.reject_input()
        elif cmd == CommandCodes.AV_MUTE:
            self.reject_av_mute()

    # --- Power ---

    def report_power(self, power: PowerState) -> None:
        with self.lock:
            self.confirmed.power = power
            if not self.outstanding(CommandCodes.POWER):
                self.pending.power = power

    def accept_power(self) -> None:
        with self.lock:
            self.confirmed.power = self.pending.power

    # --- Input ---

    def report_input(self, value: int) -> None:
        with self.lock:
            self.confirmed.input = value
            if not self.outstanding(CommandCodes.INPUT):
                self.pending.input = value

    def accept_input(self) -> None:
        with self.lock:
            self.confirmed.input = self.pending.input

    def reject_input(self) -> None:
        with self.lock:
            self.pending.input = self.confirmed.input

    # --- A/V mute ---

    def report_av_mute(self, audio_muted: bool, video_muted: bool) -> None:
        with self.lock:
            self.confirmed.audio_muted = audio_muted
            self.confirmed.video_muted = video_muted
            if not self.outstanding(CommandCodes.AV_MUTE):
                self.pending.audio_muted = audio_muted
                self.pending.video_muted = video_muted

    def accept_av_mute(self) -> None:
        with self.lock:
            self.confirmed.audio_muted = self.pending.audio_muted
            self.confirmed.video_muted = self.pending.video_muted

    def reject_av_mute(self) -> None:
        with self.lock:
            self.pending.audio_muted = self.confirmed.audio_muted
            self.pending.video_muted = self.confirmed.video_muted

    # --- Status ---

    def report_errors(self, errors: ErrorStatus) -> None:
        self.confirmed.errors = errors

    def report_lamp_hours(self, hours: int) -> None:
        self.confirmed.lamp_hours = hours

    def set_connection_error(self, value: bool) -> bool:
        """Set the connection error flag, returning the previous value."""
        previous = self.confirmed.connection_error
        self.confirmed.connection_error = value
        if previous != value:
            _LOGGER.debug("Connection error changed to %s", value)
        return previous
