"""Exception classes for the PJLink protocol."""

from __future__ import annotations


class PJLinkException(Exception):
    pass


class ConnectionFailed(PJLinkException):
    pass


class AuthenticationFailed(PJLinkException):
    pass


class InvalidPacket(PJLinkException):
    pass


class ResponseException(PJLinkException):
    """Error answer a device returns in place of a value (``ERRn``)."""

    code = ""

    def __init__(self, cmd: str | None = None):
        self.cmd = cmd
        super().__init__(f"'cmd':{cmd}, 'code':{self.code}")

    @staticmethod
    def from_code(code: str, cmd: str | None = None) -> ResponseException:
        if code == UndefinedCommand.code:
            return UndefinedCommand(cmd)
        elif code == OutOfParameter.code:
            return OutOfParameter(cmd)
        elif code == UnavailableTime.code:
            return UnavailableTime(cmd)
        elif code == ProjectorFailure.code:
            return ProjectorFailure(cmd)
        else:
            raise ValueError(f"Unknown error code {code!r}")


class UndefinedCommand(ResponseException):
    code = "ERR1"


class OutOfParameter(ResponseException):
    code = "ERR2"


class UnavailableTime(ResponseException):
    code = "ERR3"


class ProjectorFailure(ResponseException):
    code = "ERR4"
