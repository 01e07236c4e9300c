"""
Common capability interface for analysers.

The engine only depends on ``analyze(input) -> Signal``; tests substitute stub
analysers (including ones that raise, to exercise the fallback path).
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

InputT = TypeVar("InputT", contravariant=True)
SignalT = TypeVar("SignalT", covariant=True)


@runtime_checkable
class Analyzer(Protocol[InputT, SignalT]):
    """Anything that turns one input into one signal without side effects."""

    def analyze(self, value: InputT) -> SignalT:
        ...
