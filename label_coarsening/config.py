# label_coarsening/config.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, Literal, Optional
import math

NODE_ORDERINGS = ("degree", "random", "identity")


@dataclass
class LabelPropagationConfig:
    """
    Settings for one size-constrained label propagation coarsening step.
    """
    upper_bound_partition: float        # max cluster weight, rounded up
    label_iterations: int = 10          # full passes over all nodes
    node_ordering: Literal["degree", "random", "identity"] = "degree"
    random_state: Optional[int] = 0     # seed when no bit source is injected
    stop_on_convergence: bool = False   # stop after a pass with no moves
    verbose: bool = False

    def __post_init__(self):
        if self.upper_bound_partition is None or not math.isfinite(self.upper_bound_partition):
            raise ValueError(f"upper_bound_partition must be finite, got {self.upper_bound_partition}")
        if self.upper_bound_partition < 0:
            raise ValueError(f"upper_bound_partition must be >= 0, got {self.upper_bound_partition}")
        if int(self.label_iterations) != self.label_iterations or self.label_iterations < 0:
            raise ValueError(f"label_iterations must be a non-negative integer, got {self.label_iterations}")
        self.label_iterations = int(self.label_iterations)
        if self.node_ordering not in NODE_ORDERINGS:
            raise ValueError(f"Unknown node ordering: {self.node_ordering}. "
                             f"Expected one of {', '.join(NODE_ORDERINGS)}")

    @property
    def block_upperbound(self) -> int:
        return int(math.ceil(self.upper_bound_partition))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
