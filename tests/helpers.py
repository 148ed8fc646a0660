"""Test doubles and helpers shared across test modules."""

import asyncio
import re
from typing import List, Tuple

from imgman.models.paste import FetchOutcome, ImageSource


MARKER_RE = re.compile(r"!\[Downloading file\.\.\.([0-9a-z]{5})\]\(\)")


def find_paste_ids(text: str) -> List[str]:
    """Paste ids of the placeholders present in ``text``, in buffer order."""
    return MARKER_RE.findall(text)


class ControlledFetchStore:
    """Fetch-and-store double whose results are released by the test."""

    def __init__(self):
        self.calls: List[Tuple[ImageSource, str, asyncio.Future]] = []

    async def fetch_and_store(self, source: ImageSource, target_dir: str) -> FetchOutcome:
        future = asyncio.get_running_loop().create_future()
        self.calls.append((source, target_dir, future))
        return await future

    def complete(self, index: int, outcome: FetchOutcome) -> None:
        self.calls[index][2].set_result(outcome)

    def fail_with(self, index: int, exc: BaseException) -> None:
        self.calls[index][2].set_exception(exc)


async def settle(rounds: int = 3) -> None:
    """Let freshly scheduled tasks run up to their first suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)
