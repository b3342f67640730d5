"""
Witten-Bell style interpolation weights.

A context that was followed by many different tokens relative to how often it was
seen is a poor predictor, so more of its mass is handed down to the next lower
order. For a context with ``d`` distinct continuations and ``t`` total
continuations the weight kept at that order is ``1 - d / (d + t)``.
"""

from frequency_table import FrequencyTable


def witten_bell_weight(table: FrequencyTable) -> float:
    """Weight kept by the order owning ``table`` (raw, unnormalized counts)."""
    distinct = table.distinct_count()
    if distinct == 0:
        # context never observed: everything flows to the lower orders
        return 0.0
    total = table.total()
    return 1.0 - distinct / (distinct + total)


def interpolation_weights(tables):
    """
    Chain Witten-Bell weights from the highest-order context down to the bigram.

    ``tables`` holds the raw continuation tables of the contexts, longest history
    first. Every weight is scaled by the mass the higher orders left over and the
    unigram takes the remainder, so the returned tuple (one entry per order,
    unigram last) sums to 1.
    """
    weights = []
    remaining = 1.0
    for table in tables:
        weight = witten_bell_weight(table) * remaining
        weights.append(weight)
        remaining -= weight
    weights.append(remaining)
    return tuple(weights)
