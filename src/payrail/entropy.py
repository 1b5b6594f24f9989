"""Entropy sources for the simulated risk checks."""
from __future__ import annotations

import random
import threading
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional


class EntropySource(ABC):
    """Supplies uniform draws in [0, 1)."""

    @abstractmethod
    def next(self) -> float:
        """Return the next draw."""
        pass


class RandomEntropySource(EntropySource):
    """Pseudo-random draws from a private generator.

    Safe to share between concurrent requests.
    """

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)
        self._lock = threading.Lock()

    def next(self) -> float:
        with self._lock:
            return self._random.random()


class SequenceEntropySource(EntropySource):
    """Replays a fixed sequence of draws, wrapping around at the end."""

    def __init__(self, values: Iterable[float]):
        self._values: List[float] = [float(v) for v in values]
        if not self._values:
            raise ValueError("SequenceEntropySource requires at least one value")
        for v in self._values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"Entropy values must be in [0, 1), got {v}")
        self._index = 0
        self._lock = threading.Lock()

    def next(self) -> float:
        with self._lock:
            value = self._values[self._index % len(self._values)]
            self._index += 1
            return value
