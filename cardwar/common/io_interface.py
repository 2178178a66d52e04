"""
Line-oriented input and output for interactive War sessions.

The play session never calls ``print`` or ``input`` directly; it talks to an
`IOInterface`, so the same session can run against a terminal, a log file or a
scripted test double.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Union

QUIT_RESPONSE = "q"


class IOInterface(ABC):
    """
    One line out, one line in.

    Implementations answer `input` with the raw line the user typed; the
    session decides what the line means.
    """

    @abstractmethod
    def output(self, message: str) -> None:
        """Show one line."""

    @abstractmethod
    def input(self, prompt: str) -> str:
        """Show ``prompt`` and return the user's reply."""


class DummyIOInterface(IOInterface):
    """Discards output and answers every prompt with an empty line (play on)."""

    def output(self, message: str) -> None:
        pass

    def input(self, prompt: str) -> str:
        return ""


class TestIOInterface(IOInterface):
    """
    Scripted interface for tests.

    Output lines are collected in ``sent_messages`` and prompts in ``prompts``.
    Replies are taken from ``input_responses`` in order; once they run out every
    prompt is answered with ``q`` so a session under test always terminates.
    """

    __test__ = False

    def __init__(self, input_responses: Optional[Iterable[str]] = None):
        self.sent_messages: List[str] = []
        self.prompts: List[str] = []
        self.input_responses = list(input_responses or [])

    def output(self, message: str) -> None:
        self.sent_messages.append(message)

    def input(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.input_responses:
            return self.input_responses.pop(0)
        return QUIT_RESPONSE


class ConsoleIOInterface(IOInterface):
    """Terminal interface; end of input or Ctrl-C counts as quitting."""

    def output(self, message: str) -> None:
        print(message)

    def input(self, prompt: str) -> str:
        try:
            return input(prompt)
        except (EOFError, KeyboardInterrupt):
            return QUIT_RESPONSE


class LoggingIOInterface(IOInterface):
    """
    Appends every output line to a file and plays unattended.

    Prompts are written to the file with an ``[INPUT PROMPT]`` prefix and
    answered with an empty line, so a session driven through this interface
    runs the game to its end.
    """

    def __init__(self, log_file_path: Union[str, Path]):
        self.log_file_path = Path(log_file_path)
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)

    def output(self, message: str) -> None:
        with self.log_file_path.open("a", encoding="utf-8") as log_file:
            log_file.write(message + "\n")

    def input(self, prompt: str) -> str:
        self.output(f"[INPUT PROMPT] {prompt}")
        return ""


class AsyncIOInterfaceWrapper:
    """
    Awaitable access to a blocking `IOInterface`.

    Calls run on a single worker thread, so they keep their order and the event
    loop stays responsive while a prompt waits for the user. Use it as an async
    context manager, or call `close` when done.
    """

    def __init__(self, io_interface: IOInterface):
        self.io_interface = io_interface
        self.executor = ThreadPoolExecutor(max_workers=1)

    async def output(self, message: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self.executor, self.io_interface.output, message)

    async def input(self, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.io_interface.input, prompt)

    def close(self) -> None:
        self.executor.shutdown(wait=False)

    async def __aenter__(self) -> "AsyncIOInterfaceWrapper":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
