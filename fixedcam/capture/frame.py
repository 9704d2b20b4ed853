"""Frame data passed through a single tick."""

from dataclasses import dataclass
from datetime import datetime

import numpy as np


@dataclass(frozen=True, slots=True)
class CapturedFrame:
    """One frame read from the camera, tagged with the tick that produced it."""

    data: np.ndarray  # BGR image data, annotated in place
    counter: int  # Sequence number within the session, starts at 1
    captured_at: datetime  # Wall clock time of the read

    @property
    def size(self) -> tuple[int, int]:
        """(width, height)"""
        return (self.data.shape[1], self.data.shape[0])
