# label_coarsening/random_functions.py
from __future__ import annotations
from typing import Optional, Union
import numpy as np


class RandomBits:
    """
    Injectable source of fair random bits for tie-breaking.

    Wraps a ``numpy.random.Generator`` so that a run is reproducible under a
    fixed seed and nothing touches process-wide random state.
    """

    def __init__(self, seed: Optional[Union[int, np.random.Generator]] = None):
        if isinstance(seed, np.random.Generator):
            self.generator = seed
        else:
            self.generator = np.random.default_rng(seed)

    def next_bool(self) -> bool:
        return bool(self.generator.integers(0, 2))

    def bits(self, size: int) -> np.ndarray:
        """Return ``size`` independent fair bits as a uint8 array."""
        return self.generator.integers(0, 2, size=int(size), dtype=np.uint8)

    def permutation(self, n: int) -> np.ndarray:
        return self.generator.permutation(int(n)).astype(np.int64, copy=False)


class ConstantBits(RandomBits):
    """Bit source that always returns the same value. Used to pin tie-breaking."""

    def __init__(self, value: bool = False):
        super().__init__(0)
        self.value = bool(value)

    def next_bool(self) -> bool:
        return self.value

    def bits(self, size: int) -> np.ndarray:
        return np.full(int(size), 1 if self.value else 0, dtype=np.uint8)


def as_random_bits(rng=None, seed: Optional[int] = None) -> RandomBits:
    """Coerce ``rng`` (RandomBits, Generator, int or None) into a RandomBits."""
    if isinstance(rng, RandomBits):
        return rng
    if rng is None:
        return RandomBits(seed)
    return RandomBits(rng)
