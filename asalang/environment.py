from contextlib import contextmanager
from typing import Dict, Iterator, List

from asalang.errors import AsaError
from asalang.types import ErrorVal, Value


class Frame:
    """Variables of one active function call, mapping identifiers to values."""
    def __init__(self):
        self.values: Dict[str, Value] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def get(self, name: str) -> Value:
        if name in self.values:
            return self.values[name]
        raise AsaError(ErrorVal('NameError', f'undefined variable: {name}'))

    def set(self, name: str, value: Value):
        self.values[name] = value


class CallStack:
    """Frames of the active calls, innermost last.

    Lookups only ever see the innermost frame; there is no chain to the
    caller's variables.
    """
    def __init__(self):
        self.frames: List[Frame] = []

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def top(self) -> Frame:
        if not self.frames:
            raise AsaError(ErrorVal('NameError', 'undefined variable: no function is running'))
        return self.frames[-1]

    def lookup(self, name: str) -> Value:
        if not self.frames:
            raise AsaError(ErrorVal('NameError', f'undefined variable: {name} (no function is running)'))
        return self.frames[-1].get(name)

    @contextmanager
    def push(self, frame: Frame) -> Iterator[Frame]:
        """Make `frame` current for the duration of the block.

        The frame is popped when the block exits, whether it returned
        normally or raised.
        """
        self.frames.append(frame)
        try:
            yield frame
        finally:
            self.frames.pop()
