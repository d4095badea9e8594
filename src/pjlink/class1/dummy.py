"""Dummy server for development and testing.

Provides a simulated PJLink projector that responds to Class 1 commands
with in-memory state. Useful for integration testing and development
without physical hardware.
"""

from .enums import (
    DEFAULT_PORT,
    CommandCodes,
    InputCode,
    MuteState,
    PowerState,
    Subsystem,
)
from .exceptions import OutOfParameter, UnavailableTime
from .packets import QUERY
from .server import Server
from .state import ErrorStatus

RESPONSE_OK = "OK"

_DEFAULT_INPUTS = (
    InputCode.RGB_1,
    InputCode.RGB_2,
    InputCode.DIGITAL_1,
    InputCode.DIGITAL_2,
    InputCode.NETWORK_1,
)

# AVMT parameter -> (audio, video), None leaves that side unchanged
_AV_MUTE_COMMANDS: dict[str, tuple[bool | None, bool | None]] = {
    "10": (None, False),
    "11": (None, True),
    "20": (False, None),
    "21": (True, None),
    "30": (False, False),
    "31": (True, True),
}


class DummyServer(Server):
    """Simulated PJLink Class 1 projector.

    Implements power, input selection, A/V mute, error status, lamp and
    input list handlers. Power changes take effect immediately, and input
    changes are refused with ERR3 while the projector is not on.

    Args:
        host: Bind address for the TCP server.
        port: Port number (default 4352).
        password: Enables authentication when set.
        inputs: Input codes the projector offers.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        password: str | None = None,
        inputs: tuple[int, ...] = _DEFAULT_INPUTS,
    ) -> None:
        super().__init__(host, port, password)

        self._inputs = tuple(inputs)
        self.power = PowerState.OFF
        self.input = self._inputs[0]
        self.audio_muted = False
        self.video_muted = False
        self.lamp_hours = 1500
        self.errors = ErrorStatus()

        self.register_handler(CommandCodes.POWER, QUERY, self.get_power)
        self.register_handler(CommandCodes.POWER, None, self.set_power)
        self.register_handler(CommandCodes.INPUT, QUERY, self.get_input)
        self.register_handler(CommandCodes.INPUT, None, self.set_input)
        self.register_handler(CommandCodes.AV_MUTE, QUERY, self.get_av_mute)
        self.register_handler(CommandCodes.AV_MUTE, None, self.set_av_mute)
        self.register_handler(CommandCodes.ERROR_STATUS, QUERY, self.get_error_status)
        self.register_handler(CommandCodes.LAMP, QUERY, self.get_lamp)
        self.register_handler(CommandCodes.INPUT_LIST, QUERY, self.get_input_list)

    def get_power(self, **kwargs: str) -> str:
        return str(int(self.power))

    def set_power(self, param: str, **kwargs: str) -> str:
        if param == "1":
            self.power = PowerState.ON
        elif param == "0":
            self.power = PowerState.OFF
        else:
            raise OutOfParameter(CommandCodes.POWER)
        return RESPONSE_OK

    def get_input(self, **kwargs: str) -> str:
        return f"{self.input:02d}"

    def set_input(self, param: str, **kwargs: str) -> str:
        if self.power != PowerState.ON:
            raise UnavailableTime(CommandCodes.INPUT)
        if not param.isdigit() or int(param) not in self._inputs:
            raise OutOfParameter(CommandCodes.INPUT)
        self.input = int(param)
        return RESPONSE_OK

    def get_av_mute(self, **kwargs: str) -> str:
        return f"{MuteState.from_flags(self.audio_muted, self.video_muted):02d}"

    def set_av_mute(self, param: str, **kwargs: str) -> str:
        try:
            audio, video = _AV_MUTE_COMMANDS[param]
        except KeyError:
            raise OutOfParameter(CommandCodes.AV_MUTE) from None
        if audio is not None:
            self.audio_muted = audio
        if video is not None:
            self.video_muted = video
        return RESPONSE_OK

    def get_error_status(self, **kwargs: str) -> str:
        return "".join(str(int(self.errors.get(subsystem))) for subsystem in Subsystem)

    def get_lamp(self, **kwargs: str) -> str:
        lit = 1 if self.power == PowerState.ON else 0
        return f"{self.lamp_hours} {lit}"

    def get_input_list(self, **kwargs: str) -> str:
        return " ".join(f"{code:02d}" for code in self._inputs)
