from __future__ import annotations

import base64
import random
import time
from typing import Callable, Protocol

DEFAULT_TAG = "rpcexport"


class IdGenerator(Protocol):
    def next(self) -> str: ...


class TimestampIdGenerator:
    """
    tag + unix seconds + a random fraction, base64 encoded.

    Unique enough to tell auxiliary endpoints apart within one import.
    Not secret and not stable across calls.
    """

    def __init__(
        self,
        tag: str = DEFAULT_TAG,
        clock: Callable[[], float] = time.time,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.tag = tag
        self._clock = clock
        self._rng = rng

    def next(self) -> str:
        source = f"{self.tag}_{round(self._clock())}_{self._rng()}"
        return base64.b64encode(source.encode("utf-8")).decode("ascii")
