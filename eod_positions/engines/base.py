#!filepath: eod_positions/engines/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar


InEvent = TypeVar("InEvent")
OutEvent = TypeVar("OutEvent")


class BaseEngine(ABC, Generic[InEvent, OutEvent]):
    """
    Engine base class (atomic engine layer):

    - no I/O (never opens files)
    - pure "input event → output event" logic
    - steps own the files and feed engines with streams
    """

    @abstractmethod
    def process(self, event: InEvent) -> OutEvent:
        """
        Handle a single event (smallest unit of work).
        """
        raise NotImplementedError
