"""Utility helpers."""
from .geometry import (
    calculate_distance, average_pairwise_distance, clamp01, mean
)
