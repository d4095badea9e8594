"""Control PJLink Class 1 projectors over TCP."""

from .enums import (
    DEFAULT_PORT,
    ERROR_FLAGS_ANY_FAILURE,
    INPUT_MAX,
    INPUT_MIN,
    CommandCodes,
    ErrorFlags,
    EventType,
    InputCode,
    MuteState,
    PowerState,
    SessionState,
    Severity,
    Subsystem,
)
from .events import Event, EventNotifier
from .exceptions import (
    AuthenticationFailed,
    ConnectionFailed,
    InvalidPacket,
    OutOfParameter,
    PJLinkException,
    ProjectorFailure,
    ResponseException,
    UnavailableTime,
    UndefinedCommand,
)
from .packets import CommandPacket, Greeting, ResponsePacket, auth_digest
from .poller import DEFAULT_POLL_INTERVAL
from .projector import Projector, ProjectorContext
from .state import ConfirmedState, DeviceState, ErrorStatus, PendingState

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_PORT",
    "ERROR_FLAGS_ANY_FAILURE",
    "INPUT_MAX",
    "INPUT_MIN",
    "AuthenticationFailed",
    "CommandCodes",
    "CommandPacket",
    "ConfirmedState",
    "ConnectionFailed",
    "DeviceState",
    "ErrorFlags",
    "ErrorStatus",
    "Event",
    "EventNotifier",
    "EventType",
    "Greeting",
    "InputCode",
    "InvalidPacket",
    "MuteState",
    "OutOfParameter",
    "PJLinkException",
    "PendingState",
    "PowerState",
    "Projector",
    "ProjectorContext",
    "ProjectorFailure",
    "ResponseException",
    "ResponsePacket",
    "SessionState",
    "Severity",
    "Subsystem",
    "UnavailableTime",
    "UndefinedCommand",
    "auth_digest",
]
