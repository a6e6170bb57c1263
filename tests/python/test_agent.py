from __future__ import annotations

import math

from pytest import approx

from anthill.sim.core.agent import Agent, AgentState
from anthill.sim.core.food import FoodSource
from anthill.sim.core.position import ORIGIN, Position
from conftest import ScriptedRng


def _make_agent(**overrides) -> Agent:
    values = {"id": 0, "position": ORIGIN, "home": ORIGIN}
    values.update(overrides)
    return Agent(**values)


def test_new_agent_wanders_at_home():
    agent = _make_agent(home=Position(2, 2), position=Position(2, 2))
    assert agent.state is AgentState.WANDERING
    assert agent.position == agent.home


def test_state_is_derived_from_memory_and_cargo():
    agent = _make_agent(known_food_position=Position(4, 4))
    assert agent.state is AgentState.SEEKING_FOOD
    agent.carrying_food = True
    assert agent.state is AgentState.RETURNING_HOME


def test_slots_isolate_instances():
    assert hasattr(Agent, "__slots__")
    assert not hasattr(_make_agent(), "__dict__")


def test_wandering_agent_takes_random_step():
    agent = _make_agent()
    agent.move(ScriptedRng((-1, 1)))
    assert agent.position == Position(-1, 1)
    assert agent.state is AgentState.WANDERING


def test_seeking_agent_clears_memory_on_arrival():
    agent = _make_agent(known_food_position=Position(2, 0))
    rng = ScriptedRng((1,))

    agent.move(rng)
    assert agent.position == Position(1, 0)
    assert agent.known_food_position == Position(2, 0)

    agent.move(rng)
    assert agent.position == Position(2, 0)
    assert agent.known_food_position is None
    assert agent.state is AgentState.WANDERING


def test_returning_agent_drops_cargo_at_home_and_keeps_food_memory():
    agent = _make_agent(position=Position(-2, 0), known_food_position=Position(-2, 0), carrying_food=True)
    rng = ScriptedRng((1,))

    agent.move(rng)
    assert agent.position == Position(-1, 0)
    assert agent.carrying_food

    agent.move(rng)
    assert agent.position == ORIGIN
    assert not agent.carrying_food
    assert agent.known_food_position == Position(-2, 0)
    assert agent.state is AgentState.SEEKING_FOOD


def test_returning_agent_ignores_random_source():
    agent = _make_agent(position=Position(0, 3), known_food_position=Position(0, 3), carrying_food=True)
    agent.move(ScriptedRng((1, 1)))
    assert agent.position == Position(0, 2)


def test_consume_takes_unit_and_remembers_source():
    food = FoodSource(Position(3, 3), 5)
    agent = _make_agent(position=Position(3, 3))

    agent.consume(food)

    assert food.remaining_units == 4
    assert agent.carrying_food
    assert agent.known_food_position == Position(3, 3)


def test_heading_follows_last_step_and_persists_when_still():
    agent = _make_agent()
    agent.move(ScriptedRng((0, 1)))
    assert agent.heading == approx(math.pi / 2)

    agent.move(ScriptedRng((1, 0)))
    assert agent.heading == approx(0.0)

    agent.heading = 1.23
    agent.move(ScriptedRng((0,)))
    assert agent.heading == approx(1.23)
