from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable

from losh.console import Console
from losh.errors import InputClosedError

# A check returns True to accept, False to silently ask again, or a message
# to print before asking again.
Check = Callable[[str], "bool | str"]


class Prompter:
    def __init__(self, console: Console, reader: Callable[[str], str] = input) -> None:
        self.console = console
        self._reader = reader

    async def _read(self, text: str) -> str:
        """Read one line on a daemon thread.

        An interrupt cancels the awaiting task right away; the blocked reader
        thread is abandoned instead of being joined at shutdown.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def _settle(answer: str | None, error: BaseException | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(answer or "")

        def _worker() -> None:
            answer, error = None, None
            try:
                answer = self._reader(text)
            except Exception as exc:  # noqa: BLE001
                error = exc
            try:
                loop.call_soon_threadsafe(_settle, answer, error)
            except RuntimeError:
                # loop already closed; nobody is waiting for the answer
                return

        threading.Thread(target=_worker, name="losh-prompt", daemon=True).start()
        return await future

    async def ask(self, text: str) -> str:
        try:
            return await self._read(text)
        except EOFError as exc:
            raise InputClosedError(text) from exc

    async def ask_while(self, text: str, check: Check) -> str:
        while True:
            answer = await self.ask(text)
            verdict = check(answer)
            if verdict is True:
                return answer
            if isinstance(verdict, str):
                self.console.error(verdict)

    async def confirm(self, text: str) -> bool:
        def _yes_no(answer: str) -> bool | str:
            if answer.strip() not in ("y", "n"):
                return 'Please use "y" for yes and "n" for no.'
            return True

        answer = await self.ask_while(f"{text} [y/n]: ", _yes_no)
        return answer.strip() == "y"
