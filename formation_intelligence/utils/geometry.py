"""
Geometry Utilities

Helper functions for distance calculations and spacing metrics on the
normalized 0-100 pitch.
"""
import numpy as np
from typing import List, Sequence
from ..models.schemas import Position


def calculate_distance(pos1: Position, pos2: Position) -> float:
    """
    Calculate Euclidean distance between two pitch positions.

    Args:
        pos1: First position
        pos2: Second position

    Returns:
        Distance in pitch units
    """
    return float(np.sqrt((pos2.x - pos1.x) ** 2 + (pos2.y - pos1.y) ** 2))


def average_pairwise_distance(positions: List[Position]) -> float:
    """
    Mean distance over all unordered pairs of positions.

    Returns 0 for fewer than two positions.
    """
    if len(positions) < 2:
        return 0.0

    total = 0.0
    pairs = 0
    for i in range(len(positions)):
        for j in range(i + 1, len(positions)):
            total += calculate_distance(positions[i], positions[j])
            pairs += 1

    return total / pairs


def clamp01(value: float) -> float:
    """Clamp a score into [0, 1]."""
    return max(0.0, min(1.0, value))


def mean(values: Sequence[float], default: float = 0.0) -> float:
    """Arithmetic mean, or ``default`` for an empty sequence."""
    if len(values) == 0:
        return default
    return sum(values) / len(values)
