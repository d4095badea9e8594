"""Public API for controlling a PJLink projector.

`Projector` turns user intent (power, input, mute) into queued protocol
commands, maintains optimistic pending state, and exposes the last
confirmed device state. Use `ProjectorContext` to run the command worker
and the poller for the duration of an ``async with`` block::

    projector = Projector("192.168.1.50", password="secret")
    projector.add_listener(print)
    async with ProjectorContext(projector):
        projector.power_on()
"""

import logging

from .client import Client
from .enums import (
    DEFAULT_PORT,
    INPUT_MAX,
    INPUT_MIN,
    CommandCodes,
    MuteState,
    PowerState,
)
from .events import EventNotifier, Listener
from .packets import CommandPacket
from .poller import DEFAULT_POLL_INTERVAL, PollingScheduler
from .state import DeviceState
from .worker import CommandQueue

_LOGGER = logging.getLogger(__name__)
_PACKAGE_LOGGER = logging.getLogger(__name__.rsplit(".", 1)[0])


class Projector:
    """A PJLink Class 1 projector.

    Command methods only queue work and return immediately. Results arrive
    as events on registered listeners and in `state`.

    Args:
        host: Hostname or IP address. Empty leaves the projector idle.
        port: TCP port (default 4352).
        password: Password used when the projector asks for authentication.
        polling: Whether to poll the projector periodically.
        poll_interval: Seconds between polls.
    """

    def __init__(
        self,
        host: str = "",
        port: int = DEFAULT_PORT,
        password: str = "",
        *,
        polling: bool = True,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.state = DeviceState()
        self.notifier = EventNotifier()
        self.client = Client(self.state, self.notifier, host, port, password)
        self.queue = CommandQueue(self.client.send_command)
        self.poller = PollingScheduler(self.poll, poll_interval)
        self._polling = polling
        self._debug = False

    def __repr__(self) -> str:
        return f"Projector({self.host}:{self.port}) {self.state!r}"

    # --- Listeners ---

    def add_listener(self, listener: Listener) -> None:
        self.notifier.add_listener(listener)

    def remove_listener(self, listener: Listener) -> None:
        self.notifier.remove_listener(listener)

    def listen(self, listener: Listener):
        return self.notifier.listen(listener)

    # --- Lifecycle ---

    async def start(self) -> None:
        """Start the command worker and the poller."""
        await self.queue.start()
        await self.poller.start()

    async def stop(self) -> None:
        await self.poller.stop()
        await self.queue.stop()

    # --- Configuration ---

    @property
    def host(self) -> str:
        return self.client.host

    def set_host(self, host: str) -> None:
        """Set the projector address, refreshing all state if it is non-empty."""
        self.client.host = host
        if host:
            _LOGGER.info("PJLink address set to %s", host)
            self.query_all()
        else:
            _LOGGER.info("PJLink address cleared")

    @property
    def port(self) -> int:
        return self.client.port

    def set_port(self, port: int) -> None:
        self.client.port = port

    def set_password(self, password: str) -> None:
        self.client.password = password

    @property
    def debug(self) -> bool:
        return self._debug

    def set_debug(self, debug: bool) -> None:
        """Log every command and response of this package at DEBUG level."""
        self._debug = debug
        _PACKAGE_LOGGER.setLevel(logging.DEBUG if debug else logging.NOTSET)

    @property
    def polling(self) -> bool:
        return self._polling

    def set_polling(self, enabled: bool) -> None:
        self._polling = enabled

    @property
    def poll_interval(self) -> float:
        return self.poller.interval

    def set_poll_interval(self, seconds: float) -> None:
        self.poller.interval = seconds

    @property
    def connection_error(self) -> bool:
        return self.state.confirmed.connection_error

    # --- Commands ---

    def _push(self, packet: CommandPacket) -> None:
        if not packet.is_query:
            self.state.begin(packet.cmd)
        self.queue.push(packet.to_str())

    def power_on(self) -> None:
        with self.state.lock:
            self._push(CommandPacket.power(True))
            if self.state.confirmed.power == PowerState.OFF:
                self.state.pending.power = PowerState.WARMING if self._polling else PowerState.ON
        if self._polling:
            self.query_power()

    def power_off(self) -> None:
        with self.state.lock:
            self._push(CommandPacket.power(False))
            if self.state.confirmed.power == PowerState.ON:
                self.state.pending.power = PowerState.COOLING if self._polling else PowerState.OFF
        if self._polling:
            self.query_power()

    def switch_input(self, code: int) -> None:
        """Select input *code* (11-59); other values are ignored."""
        if code < INPUT_MIN or code > INPUT_MAX:
            _LOGGER.debug("Ignoring out of range input %s", code)
            return
        with self.state.lock:
            self._push(CommandPacket.select_input(code))
            self.state.pending.input = code

    def mute_audio(self) -> None:
        with self.state.lock:
            pending = self.state.pending
            if pending.audio_muted:
                return
            pending.audio_muted = True
            self._send_av_mute()

    def unmute_audio(self) -> None:
        with self.state.lock:
            pending = self.state.pending
            if not pending.audio_muted:
                return
            # Audio stays muted for as long as video is
            if not pending.video_muted:
                pending.audio_muted = False
            self._send_av_mute()

    def mute_video(self) -> None:
        with self.state.lock:
            pending = self.state.pending
            if pending.video_muted:
                return
            pending.audio_mute_restore = pending.audio_muted
            pending.video_muted = True
            pending.audio_muted = True
            self._send_av_mute()

    def unmute_video(self) -> None:
        with self.state.lock:
            pending = self.state.pending
            if not pending.video_muted:
                return
            pending.audio_muted = pending.audio_mute_restore
            pending.video_muted = False
            self._send_av_mute()

    def _send_av_mute(self) -> None:
        pending = self.state.pending
        if pending.video_muted:
            self._push(CommandPacket.av_mute(MuteState.AUDIO_VIDEO))
        elif pending.audio_muted:
            # There is no single code for audio muted with video unmuted
            self._push(CommandPacket.av_mute(MuteState.UNMUTE_VIDEO))
            self._push(CommandPacket.av_mute(MuteState.AUDIO_ONLY))
        else:
            self._push(CommandPacket.av_mute(MuteState.OFF))

        if self._polling:
            self.query_av_mute()

    # --- Queries ---

    def get_power_state(self) -> PowerState:
        """Queue a power query and return the last confirmed power state."""
        self.query_power()
        return self.state.confirmed.power

    def query_all(self) -> None:
        """Query error status, power, input, A/V mute and lamp hours.

        The input list is not included.
        """
        self.query_error_status()
        self.query_power()
        self.query_input()
        self.query_av_mute()
        self.query_lamp_hours()

    def query_power(self) -> None:
        self._push(CommandPacket.query(CommandCodes.POWER))

    def query_input(self) -> None:
        self._push(CommandPacket.query(CommandCodes.INPUT))

    def query_av_mute(self) -> None:
        self._push(CommandPacket.query(CommandCodes.AV_MUTE))

    def query_error_status(self) -> None:
        self._push(CommandPacket.query(CommandCodes.ERROR_STATUS))

    def query_lamp_hours(self) -> None:
        self._push(CommandPacket.query(CommandCodes.LAMP))

    def query_input_list(self) -> None:
        self._push(CommandPacket.query(CommandCodes.INPUT_LIST))

    def poll(self) -> None:
        """One poll cycle; does nothing without a host or with polling off."""
        if self.host and self._polling:
            self.query_all()


class ProjectorContext:
    """Async context manager that starts and stops a Projector.

    Usage::

        async with ProjectorContext(projector) as p:
            p.query_all()
    """

    def __init__(self, projector: Projector):
        self._projector = projector

    async def __aenter__(self) -> Projector:
        await self._projector.start()
        return self._projector

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._projector.stop()
