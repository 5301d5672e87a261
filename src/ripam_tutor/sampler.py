"""Weighted random sampling without replacement."""
import random


def weighted_sample(items: list, k: int, rng: random.Random | None = None) -> list:
    """Draw up to k distinct values from (value, weight) pairs.

    Each draw picks a remaining item with probability proportional to its
    weight, then removes it. When the remaining weight is zero the draw
    falls back to a uniform choice. With k >= len(items) every value is
    returned, in input order.
    """
    rng = rng or random
    if k <= 0:
        return []
    if k >= len(items):
        return [value for value, _ in items]

    remaining = [(value, max(0.0, float(weight))) for value, weight in items]
    picked = []
    for _ in range(k):
        total = sum(weight for _, weight in remaining)
        if total <= 0:
            index = rng.randrange(len(remaining))
        else:
            target = rng.random() * total
            # float rounding can leave target >= 0 after the walk
            index = max(i for i, (_, weight) in enumerate(remaining) if weight > 0)
            for i, (_, weight) in enumerate(remaining):
                target -= weight
                if target < 0:
                    index = i
                    break
        picked.append(remaining.pop(index)[0])
    return picked


def shuffled(values: list, rng: random.Random | None = None) -> list:
    """Return a Fisher-Yates shuffled copy."""
    rng = rng or random
    result = list(values)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randrange(i + 1)
        result[i], result[j] = result[j], result[i]
    return result
