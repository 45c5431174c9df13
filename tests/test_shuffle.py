import random
from collections import Counter

import pytest

from flashdeck.modules.study.shuffle import shuffle
from conftest import make_cards


@pytest.mark.parametrize("items", [
    [1, 2, 3, 4, 5],
    list(range(50)),
    ["a", "a", "b", "c", "c", "c"],
])
def test_shuffle_is_a_permutation(items):
    out = shuffle(items, random.Random(42))
    assert len(out) == len(items)
    assert Counter(out) == Counter(items)


def test_shuffle_keeps_card_ids():
    deck = make_cards(range(1, 21))
    out = shuffle(deck)
    assert sorted(c.id for c in out) == list(range(1, 21))


def test_shuffle_does_not_mutate_input():
    items = (1, 2, 3, 4)
    as_list = list(items)
    out = shuffle(as_list, random.Random(3))
    assert as_list == [1, 2, 3, 4]
    assert out is not as_list
    assert isinstance(shuffle(items), list)


def test_shuffle_trivial_inputs():
    assert shuffle([]) == []
    assert shuffle(["x"]) == ["x"]


def test_shuffle_is_reproducible_with_seeded_rng():
    items = list(range(10))
    assert shuffle(items, random.Random(7)) == shuffle(items, random.Random(7))


def test_shuffle_is_roughly_uniform():
    rng = random.Random(1234)
    trials = 6000
    counts = Counter(tuple(shuffle([1, 2, 3], rng)) for _ in range(trials))
    # all 3! orderings show up, each near trials / 6
    assert len(counts) == 6
    for perm, n in counts.items():
        assert 850 <= n <= 1150, (perm, n)


def test_shuffle_places_every_item_everywhere():
    rng = random.Random(99)
    first = Counter(shuffle(list(range(4)), rng)[0] for _ in range(4000))
    assert set(first) == {0, 1, 2, 3}
    assert min(first.values()) > 850
