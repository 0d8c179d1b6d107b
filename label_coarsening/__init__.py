"""
Label Coarsening Package - size-constrained label propagation clustering for
the coarsening step of multilevel graph algorithms.
"""

# Import main classes for easy access
from .graph_access import GraphAccess
from .config import LabelPropagationConfig
from .random_functions import RandomBits, ConstantBits
from .node_ordering import NodeOrdering, validate_permutation
from .size_constraint_label_propagation import (
    SizeConstraintLabelPropagation,
    LabelPropagationResult,
    label_propagation,
    remap_cluster_ids,
    create_coarse_mapping,
)
from .contraction import contract_graph
from .coarsen import CoarsenedLevel, coarsen_once

# Import core utilities that might be directly useful
from .core_utilities import PerformanceMonitor

# Define what gets imported with `from label_coarsening import *`
__all__ = [
    # Main classes
    'GraphAccess',
    'LabelPropagationConfig',
    'SizeConstraintLabelPropagation',
    'LabelPropagationResult',
    'NodeOrdering',
    'CoarsenedLevel',

    # Random bit sources
    'RandomBits',
    'ConstantBits',

    # Utility classes
    'PerformanceMonitor',

    # Core functions
    'label_propagation',
    'remap_cluster_ids',
    'create_coarse_mapping',
    'validate_permutation',
    'contract_graph',
    'coarsen_once',
]

# Package metadata
__version__ = '1.0.0'
__author__ = 'Connor Frankston'
