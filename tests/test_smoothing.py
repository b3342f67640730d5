import pytest

from frequency_table import FrequencyTable
from smoothing import interpolation_weights, witten_bell_weight


def make_table(counts):
    table = FrequencyTable()
    for key, count in counts.items():
        table.increment(key, count)
    return table


def test_unseen_context_gets_zero_weight():
    assert witten_bell_weight(FrequencyTable()) == 0.0


def test_weight_formula():
    # d = 2, t = 6
    table = make_table({"a": 4, "b": 2})
    assert witten_bell_weight(table) == pytest.approx(1 - 2 / 8)


def test_repetitive_context_is_trusted_more_than_diverse_one():
    repetitive = make_table({"same": 200})
    diverse = make_table({f"w{i}": 1 for i in range(200)})

    assert witten_bell_weight(repetitive) == pytest.approx(1.0, abs=0.01)
    # d == t leaves exactly half the mass at this order
    assert witten_bell_weight(diverse) == pytest.approx(0.5)
    assert witten_bell_weight(repetitive) > witten_bell_weight(diverse)


def test_bigram_weights():
    lam, rest = interpolation_weights([make_table({"cat": 1, "dog": 1})])
    assert lam == pytest.approx(0.5)
    assert lam + rest == 1.0


def test_trigram_weights_chain_and_sum_to_one():
    trigram_ctx = make_table({"the": 2})
    bigram_ctx = make_table({"the": 2, "a": 1})

    l1, l2, l3 = interpolation_weights([trigram_ctx, bigram_ctx])
    assert l1 == pytest.approx(2 / 3)
    assert l2 == pytest.approx((1 - 2 / 5) * (1 - 2 / 3))
    assert l3 == 1.0 - l1 - l2
    assert l1 + l2 + l3 == pytest.approx(1.0)


def test_unseen_bigram_context_is_guarded():
    l1, l2, l3 = interpolation_weights([FrequencyTable(), FrequencyTable()])
    assert (l1, l2, l3) == (0.0, 0.0, 1.0)


@pytest.mark.parametrize(
    "tri,bi",
    [
        ({}, {"x": 3}),
        ({"x": 1}, {}),
        ({"x": 5, "y": 1}, {"x": 9, "y": 2, "z": 1}),
        ({f"w{i}": 1 for i in range(7)}, {"q": 40}),
    ],
)
def test_trigram_weights_are_a_distribution(tri, bi):
    weights = interpolation_weights([make_table(tri), make_table(bi)])
    assert len(weights) == 3
    assert all(0.0 <= w <= 1.0 for w in weights)
    assert weights[2] == 1.0 - weights[0] - weights[1]
