"""
Sampling of the kernel network statistics tree into the accumulation buffer.
"""

from .buffer import BUFFER_POLICIES, AccumulationBuffer
from .sampler import ProcNetSampler

__all__ = [
    "AccumulationBuffer",
    "BUFFER_POLICIES",
    "ProcNetSampler",
]
