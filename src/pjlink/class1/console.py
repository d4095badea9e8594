import argparse
import asyncio
import logging
import sys

from .dummy import DummyServer
from .enums import DEFAULT_PORT, ERROR_FLAGS_ANY_FAILURE, ErrorFlags, EventType
from .events import Event
from .projector import Projector, ProjectorContext
from .server import ServerContext

_LOGGER = logging.getLogger(__name__)


def auto_command(x: str) -> str:
    """Accept a raw command with or without the ``%1`` header."""
    x = x.strip()
    if not x.startswith("%1"):
        x = "%1" + x
    return x


parser = argparse.ArgumentParser(description="Communicate with PJLink projectors.")
parser.add_argument("--verbose", action="store_true")

subparsers = parser.add_subparsers(dest="subcommand")

parser_query = subparsers.add_parser("query")
parser_query.add_argument("--host", required=True)
parser_query.add_argument("--port", default=DEFAULT_PORT, type=int)
parser_query.add_argument("--password", default="")

parser_command = subparsers.add_parser("command")
parser_command.add_argument("--host", required=True)
parser_command.add_argument("--port", default=DEFAULT_PORT, type=int)
parser_command.add_argument("--password", default="")
parser_command.add_argument("line", type=auto_command)

parser_server = subparsers.add_parser("server")
parser_server.add_argument("--host", default="localhost")
parser_server.add_argument("--port", default=DEFAULT_PORT, type=int)
parser_server.add_argument("--password")


def print_event(event: Event) -> None:
    if event.type == EventType.ERROR:
        flags = ErrorFlags(event.data)
        failure = " (failure)" if flags & ERROR_FLAGS_ANY_FAILURE else ""
        print(f"{event.type.name}: {flags!r}{failure}")
    else:
        print(f"{event.type.name}: {event.data!r}")


def print_state(projector: Projector) -> None:
    for key, value in projector.state.to_dict().items():
        print(f"{key}: {value!r}")


async def run_query(args: argparse.Namespace) -> None:
    projector = Projector(args.host, args.port, args.password, polling=False)
    async with ProjectorContext(projector):
        projector.query_all()
        await projector.queue.join()
    print_state(projector)


async def run_command(args: argparse.Namespace) -> None:
    projector = Projector(args.host, args.port, args.password, polling=False)
    with projector.listen(print_event):
        async with ProjectorContext(projector):
            projector.queue.push(args.line)
            await projector.queue.join()


async def run_server(args: argparse.Namespace) -> None:
    server = DummyServer(args.host, args.port, args.password)
    async with ServerContext(server):
        while True:
            await asyncio.sleep(delay=1)


def main() -> None:
    args = parser.parse_args()

    if args.verbose:
        root = logging.getLogger()
        root.setLevel(logging.DEBUG)

        channel = logging.StreamHandler(sys.stdout)
        channel.setLevel(logging.DEBUG)
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        channel.setFormatter(formatter)
        root.addHandler(channel)

    if args.subcommand == "query":
        asyncio.run(run_query(args))
    elif args.subcommand == "command":
        asyncio.run(run_command(args))
    elif args.subcommand == "server":
        asyncio.run(run_server(args))


if __name__ == "__main__":
    main()
