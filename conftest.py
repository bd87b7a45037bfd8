"""
Shared fixtures.

The transformer is replaced by BagOfWordsEncoder in ranking and controller
tests: each distinct word gets its own axis, so cosine similarity is word
overlap and every score can be worked out by hand.
"""
import re
from typing import Dict, List, Optional, Sequence

import numpy as np
import pytest

from jammo.controller import AgentController, AgentState
from jammo.intent import IntentRanker
from jammo.world import (
    KinematicMover,
    Mover,
    RecordingPresenter,
    Vec3,
    build_demo_world,
)


class BagOfWordsEncoder:
    """Deterministic stand-in for the sentence embedder."""

    def __init__(self, dim: int = 512):
        self.dim = dim
        self.vocabulary: Dict[str, int] = {}
        self.calls = 0

    def _index(self, word: str) -> int:
        if word not in self.vocabulary:
            self.vocabulary[word] = len(self.vocabulary) % self.dim
        return self.vocabulary[word]

    def encode(self, sentences: Sequence[str]) -> np.ndarray:
        self.calls += 1
        vectors = np.zeros((len(sentences), self.dim), dtype=np.float32)
        for row, sentence in enumerate(sentences):
            for word in re.findall(r"[a-z']+", sentence.lower()):
                vectors[row, self._index(word)] += 1.0
        norms = np.linalg.norm(vectors, axis=1, keepdims=True) + 1e-9
        return vectors / norms


class ScriptedMover(Mover):
    """Mover whose position and velocity the test sets directly."""

    def __init__(self, position: Optional[Vec3] = None, velocity: float = 0.0):
        self.current = (position or Vec3()).copy()
        self.velocity = velocity
        self.destinations: List[Vec3] = []
        self.stops = 0

    def set_destination(self, point: Vec3) -> None:
        self.destinations.append(point.copy())

    def stop(self) -> None:
        self.stops += 1

    def velocity_magnitude(self) -> float:
        return self.velocity

    def position(self) -> Vec3:
        return self.current.copy()


def run_until_settled(controller: AgentController, mover: Mover, max_ticks: int = 2000, dt: float = 1 / 30):
    """Step mover and controller until the agent is IDLE or HIDING."""
    state = controller.state
    for _ in range(max_ticks):
        mover.step(dt)
        state = controller.update()
        if state in (AgentState.IDLE, AgentState.HIDING):
            break
    return state


@pytest.fixture
def encoder():
    return BagOfWordsEncoder()


@pytest.fixture
def ranker(encoder):
    return IntentRanker(encoder)


@pytest.fixture
def registry():
    return build_demo_world()


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def mover():
    return KinematicMover(Vec3(0.0, 0.0, 0.0), speed=4.0)


@pytest.fixture
def scripted_mover():
    return ScriptedMover()


@pytest.fixture
def controller(registry, mover, ranker, presenter):
    return AgentController(registry, mover, ranker=ranker, presenter=presenter)


@pytest.fixture
def scripted_controller(registry, scripted_mover, ranker, presenter):
    return AgentController(registry, scripted_mover, ranker=ranker, presenter=presenter)


@pytest.fixture
def settle():
    return run_until_settled
