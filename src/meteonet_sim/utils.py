import random

from meteonet_sim.models import Season


def make_rng(seed: int | None, stream: str) -> random.Random:
    """Independent generator per stream; reproducible when a seed is given."""
    if seed is None:
        return random.Random()
    return random.Random(f"{seed}:{stream}")


def clamp(value: float, min_value: float, max_value: float) -> float:
    """Bound value to [min_value, max_value]."""
    return max(min_value, min(value, max_value))


def gauss_step(rng: random.Random, sigma: float) -> float:
    """Zero-mean Gaussian increment for a random walk."""
    return rng.gauss(0.0, sigma)


def uniform(rng: random.Random, low: float = 0.0, high: float = 1.0) -> float:
    return rng.uniform(low, high)


def chance(rng: random.Random, probability: float) -> bool:
    """Bernoulli draw. rng.random() is in [0, 1), so probability 1.0 always hits."""
    return rng.random() < probability


def daylight_factor(hour: int) -> float:
    """Triangular day curve: 0 at night, peaking at 1.0 at noon."""
    if hour < 6 or hour > 18:
        return 0.0
    return max(0.0, 1.0 - abs(12 - hour) / 6.0)


def season_for_month(month: int) -> Season:
    if month == 12 or month <= 2:
        return Season.WINTER
    if month <= 5:
        return Season.SPRING
    if month <= 8:
        return Season.SUMMER
    return Season.AUTUMN


def wrap_degrees(direction: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = direction % 360.0
    # -1e-17 % 360.0 rounds up to 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped
