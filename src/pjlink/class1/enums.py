"""Protocol constants and enumerations for PJLink Class 1."""

import enum
from enum import IntEnum, IntFlag

DEFAULT_PORT = 4352


class PowerState(IntEnum):
    OFF = 0
    ON = 1
    COOLING = 2
    WARMING = 3


class InputCode(IntEnum):
    """Input selection codes, two digits: class (1-5) then index (1-9)."""

    NONEXISTENT_SOURCE = 2

    RGB_1 = 11
    RGB_2 = 12
    RGB_3 = 13
    RGB_4 = 14
    RGB_5 = 15
    RGB_6 = 16
    RGB_7 = 17
    RGB_8 = 18
    RGB_9 = 19

    VIDEO_1 = 21
    VIDEO_2 = 22
    VIDEO_3 = 23
    VIDEO_4 = 24
    VIDEO_5 = 25
    VIDEO_6 = 26
    VIDEO_7 = 27
    VIDEO_8 = 28
    VIDEO_9 = 29

    DIGITAL_1 = 31
    DIGITAL_2 = 32
    DIGITAL_3 = 33
    DIGITAL_4 = 34
    DIGITAL_5 = 35
    DIGITAL_6 = 36
    DIGITAL_7 = 37
    DIGITAL_8 = 38
    DIGITAL_9 = 39

    STORAGE_1 = 41
    STORAGE_2 = 42
    STORAGE_3 = 43
    STORAGE_4 = 44
    STORAGE_5 = 45
    STORAGE_6 = 46
    STORAGE_7 = 47
    STORAGE_8 = 48
    STORAGE_9 = 49

    NETWORK_1 = 51
    NETWORK_2 = 52
    NETWORK_3 = 53
    NETWORK_4 = 54
    NETWORK_5 = 55
    NETWORK_6 = 56
    NETWORK_7 = 57
    NETWORK_8 = 58
    NETWORK_9 = 59


INPUT_MIN = InputCode.RGB_1
INPUT_MAX = InputCode.NETWORK_9


class MuteState(IntEnum):
    CANNOT_MUTE = 2

    VIDEO_ONLY = 11
    AUDIO_ONLY = 21
    OFF = 30
    AUDIO_VIDEO = 31

    # Only valid as a command, the device never reports it
    UNMUTE_VIDEO = 10

    @staticmethod
    def from_flags(audio_muted: bool, video_muted: bool) -> "MuteState":
        if video_muted and audio_muted:
            return MuteState.AUDIO_VIDEO
        if video_muted:
            return MuteState.VIDEO_ONLY
        if audio_muted:
            return MuteState.AUDIO_ONLY
        return MuteState.OFF


class Severity(IntEnum):
    NONE = 0
    WARNING = 1
    ERROR = 2


class Subsystem(IntEnum):
    """Position of each subsystem in an ERST response, also its bit slot."""

    FAN = 0
    LAMP = 1
    TEMPERATURE = 2
    COVER = 3
    FILTER = 4
    OTHER = 5


class ErrorFlags(IntFlag):
    """Packed error word delivered with ERROR events.

    | 16 | 15 | 14 | 13 | 12 | 11 10 | 9 8  | 7 6 | 5 4 | 3 2 | 1 0 |
    |Auth|Fail|Unav|Undf|Conn| Other |Filter|Cover|Temp |Lamp | Fan |
    """

    NONE = 0

    FAN_WARNING = 0x0001
    FAN_ERROR = 0x0002
    LAMP_WARNING = 0x0004
    LAMP_ERROR = 0x0008
    TEMPERATURE_WARNING = 0x0010
    TEMPERATURE_ERROR = 0x0020
    COVER_WARNING = 0x0040
    COVER_ERROR = 0x0080
    FILTER_WARNING = 0x0100
    FILTER_ERROR = 0x0200
    OTHER_WARNING = 0x0400
    OTHER_ERROR = 0x0800

    CONNECTION = 0x1000
    UNDEFINED_COMMAND = 0x2000
    UNAVAILABLE_TIME = 0x4000
    PROJECTOR_FAILURE = 0x8000
    AUTHENTICATION = 0x10000

    @classmethod
    def for_severity(cls, subsystem: Subsystem, severity: Severity) -> "ErrorFlags":
        return cls(int(severity) << (2 * subsystem))


ERROR_FLAGS_ANY_FAILURE = (
    ErrorFlags.PROJECTOR_FAILURE
    | ErrorFlags.FAN_ERROR
    | ErrorFlags.LAMP_ERROR
    | ErrorFlags.TEMPERATURE_ERROR
    | ErrorFlags.COVER_ERROR
    | ErrorFlags.FILTER_ERROR
    | ErrorFlags.OTHER_ERROR
)


class EventType(IntEnum):
    ERROR = 0
    POWER = 1
    INPUT = 2
    AV_MUTE = 3
    LAMP = 4


class SessionState(enum.Enum):
    IDLE = enum.auto()
    CONNECTING = enum.auto()
    AWAITING_GREETING = enum.auto()
    AUTHENTICATING = enum.auto()
    READY = enum.auto()
    AWAITING_RESPONSE = enum.auto()
    CLOSED = enum.auto()
    ERRORED = enum.auto()

    @property
    def terminal(self) -> bool:
        return self in (SessionState.CLOSED, SessionState.ERRORED)


class CommandCodes(str, enum.Enum):
    POWER = "POWR"
    INPUT = "INPT"
    AV_MUTE = "AVMT"
    ERROR_STATUS = "ERST"
    LAMP = "LAMP"
    INPUT_LIST = "INST"

    @classmethod
    def from_str(cls, value: str) -> "CommandCodes":
        return cls(value.upper())
