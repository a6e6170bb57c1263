from __future__ import annotations

import logging
from typing import Dict, Sequence, Tuple

from ..core.agent import Agent
from ..core.food import FoodSource

logger = logging.getLogger(__name__)


def consume_food(agents: Sequence[Agent], food_index: Dict[Tuple[int, int], FoodSource]) -> Tuple[int, int]:
    """
    Let every agent standing on a live food source take one unit, in creation order.

    A source is dropped from `food_index` as soon as its last unit goes, so agents later in the
    order that stand on the same cell find nothing. Returns (units consumed, sources exhausted).
    """

    consumed = 0
    exhausted = 0
    for agent in agents:
        key = agent.position.key
        food = food_index.get(key)
        if food is None or food.is_exhausted:
            continue
        agent.consume(food)
        consumed += 1
        if food.is_exhausted:
            del food_index[key]
            exhausted += 1
            logger.debug("food source at %s exhausted by agent %d", key, agent.id)
    return consumed, exhausted
