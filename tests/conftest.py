from collections.abc import Iterable


class FixedJitter:
    """Deterministic stand-in for random.Random: replays `values` cyclically."""

    def __init__(self, values: Iterable[int] = (1,)) -> None:
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return self.values[(len(self.calls) - 1) % len(self.values)]
