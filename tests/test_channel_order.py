"""Tests for blocked-mode channel order generation."""

from __future__ import annotations

import numpy as np

from VTSE.SMM.config import StimConfig
from VTSE.SGM.channel_order import gen_channel_order, identity_order, shuffle_order


def test_identity_order():
    assert identity_order(StimConfig(channels=5)) == [0, 1, 2, 3, 4]


def test_one_permutation_per_hand():
    rng = np.random.default_rng(0)
    orders = gen_channel_order(rng, StimConfig(channels=4))
    assert len(orders) == 2
    for order in orders:
        assert sorted(order) == [0, 1, 2, 3]


def test_hands_are_independent():
    rng = np.random.default_rng(3)
    config = StimConfig(channels=6)
    differs = any(
        len(set(map(tuple, gen_channel_order(rng, config)))) == 2
        for _ in range(20)
    )
    assert differs


def test_no_repeat_across_generations():
    rng = np.random.default_rng(12)
    config = StimConfig(channels=2)
    orders = gen_channel_order(rng, config)
    for _ in range(500):
        new = gen_channel_order(rng, config, orders)
        for hand in range(config.hands):
            assert new[hand][0] != orders[hand][-1]
        orders = new


def test_two_channels_keep_alternating():
    # [a, b] may only be followed by [a, b]; anything else hits b twice
    rng = np.random.default_rng(5)
    config = StimConfig(channels=2)
    orders = gen_channel_order(rng, config)
    for _ in range(20):
        assert gen_channel_order(rng, config, orders) == orders


def test_shuffle_order_avoid_first():
    rng = np.random.default_rng(9)
    for _ in range(200):
        assert shuffle_order(rng, 3, avoid_first=1)[0] != 1


def test_not_randomized_is_identity_and_draws_nothing():
    rng = np.random.default_rng(1)
    before = rng.bit_generator.state
    orders = gen_channel_order(rng, StimConfig(channels=4, randomize=False), [[3, 2, 1, 0]] * 2)
    assert orders == [[0, 1, 2, 3], [0, 1, 2, 3]]
    assert rng.bit_generator.state == before


def test_same_seed_same_orders():
    config = StimConfig(channels=4)
    a = gen_channel_order(np.random.default_rng(42), config)
    b = gen_channel_order(np.random.default_rng(42), config)
    assert a == b
