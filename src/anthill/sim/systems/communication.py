from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from ..core.agent import Agent
from ..core.position import Position


def find_informant(agents: Sequence[Agent], bucket: Sequence[int]) -> Optional[Position]:
    """Current position of the first agent in `bucket` that knows about food, if any."""
    for index in bucket:
        agent = agents[index]
        if agent.known_food_position is not None:
            return agent.position
    return None


def propagate(agents: Sequence[Agent], bucket: Sequence[int], food_position: Position) -> int:
    informed = 0
    for index in bucket:
        agent = agents[index]
        if agent.known_food_position is None and not agent.carrying_food:
            agent.known_food_position = food_position
            informed += 1
    return informed


def share_food_positions(agents: Sequence[Agent], buckets: Iterable[Tuple[object, List[int]]]) -> int:
    """Run one communication pass over co-located agents. Returns how many agents learned a position."""
    informed = 0
    for _, bucket in buckets:
        if len(bucket) < 2:
            continue
        food_position = find_informant(agents, bucket)
        if food_position is not None:
            informed += propagate(agents, bucket, food_position)
    return informed
