# =============================================================================
# channel_order.py — Blocked-mode Channel Order Generator
# =============================================================================
#
# One order per hand: position k of the order is the channel that fires in
# slot k of the cycle.  A fresh order is drawn at start-up and whenever the
# sequencer decides the current one has been repeated often enough.
#
# NO-REPEAT RULE:
#   The first channel of a new order must differ from the last channel of the
#   previous order for the same hand; otherwise that finger would be hit twice
#   in a row across the cycle boundary.  Offending shuffles are redrawn.
# =============================================================================

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from VTSE.SMM.config import StimConfig

log = logging.getLogger(__name__)


def identity_order(config: StimConfig) -> list[int]:
    return list(range(config.channels))


def shuffle_order(
    rng: np.random.Generator,
    channels: int,
    avoid_first: Optional[int] = None,
) -> list[int]:
    """
    Draw a uniform permutation of range(channels) whose first element is not
    `avoid_first`.  Needs channels >= 2 when `avoid_first` is given.
    """
    while True:
        order = [int(c) for c in rng.permutation(channels)]
        if avoid_first is None or order[0] != avoid_first:
            return order


def gen_channel_order(
    rng: np.random.Generator,
    config: StimConfig,
    previous: Optional[Sequence[Sequence[int]]] = None,
) -> list[list[int]]:
    """
    Generate a new channel order for every hand.

    Args:
        rng:      the run's shared generator; untouched when not randomizing.
        config:   run configuration.
        previous: the orders currently in use, one per hand, or None on the
                  very first generation (the no-repeat rule is then vacuous).

    Returns:
        config.hands lists, each a permutation of range(config.channels).
    """
    orders: list[list[int]] = []
    for hand in range(config.hands):
        if not config.randomize:
            orders.append(identity_order(config))
            continue
        last = previous[hand][-1] if previous is not None else None
        orders.append(shuffle_order(rng, config.channels, avoid_first=last))

    log.info("New channel order: %s", " - ".join(str(o) for o in orders))
    return orders
