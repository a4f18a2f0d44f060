"""
Statistical primitives shared by the forecasters
"""

from typing import List, NamedTuple, Sequence, Tuple

import numpy as np


class Regression(NamedTuple):
    slope: float
    intercept: float
    r2: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


def linear_regression(points: Sequence[Tuple[float, float]]) -> Regression:
    """Ordinary least squares over (x, y) pairs; fewer than two points gives all zeros"""
    if len(points) < 2:
        return Regression(0.0, 0.0, 0.0)

    data = np.asarray(points, dtype=float)
    x, y = data[:, 0], data[:, 1]
    n = len(data)

    denominator = n * np.sum(x * x) - np.sum(x) ** 2
    if denominator == 0:
        return Regression(0.0, 0.0, 0.0)

    slope = (n * np.sum(x * y) - np.sum(x) * np.sum(y)) / denominator
    intercept = (np.sum(y) - slope * np.sum(x)) / n

    ss_tot = np.sum((y - y.mean()) ** 2)
    ss_res = np.sum((y - (slope * x + intercept)) ** 2)
    r2 = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0

    return Regression(float(slope), float(intercept), float(r2))


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation; 0 for fewer than two samples"""
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def mean(values: Sequence[float]) -> float:
    return float(np.mean(values)) if len(values) else 0.0


def moving_average(values: Sequence[float], window: int) -> List[float]:
    """Trailing moving average; the input is returned as-is when shorter than the window"""
    if len(values) < window:
        return list(values)
    kernel = np.ones(window) / window
    return np.convolve(np.asarray(values, dtype=float), kernel, mode="valid").tolist()


def half_split_trend(values: Sequence[float], band: float, rising: str, falling: str) -> str:
    """Compare first-half and second-half means with a +/- band of hysteresis"""
    mid = len(values) // 2
    if mid == 0:
        return "stable"
    first, second = mean(values[:mid]), mean(values[mid:])
    if second > first * (1 + band):
        return rising
    if second < first * (1 - band):
        return falling
    return "stable"
