from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from app.services.errors import AssignmentError, DuplicateParticipant, InsufficientParticipants


@dataclass(frozen=True)
class Participant:
    name: str
    contact: Optional[str] = None


@dataclass(frozen=True)
class Assignment:
    giver: str
    receiver: str
    giver_contact: Optional[str] = None


def _ensure_unique(roster: Sequence[Participant]) -> None:
    seen = set()
    for participant in roster:
        if participant.name in seen:
            raise DuplicateParticipant(f"Participant {participant.name!r} is listed more than once.")
        seen.add(participant.name)


def _shuffle(items: List[Participant], rng: random.Random) -> None:
    # Fisher-Yates: every ordering is equally likely.
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


def generate_assignments(
    roster: Sequence[Participant],
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[Assignment]:
    """Arrange the roster into one random cycle and read off giver/receiver pairs.

    Each participant gives exactly once and receives exactly once, nobody draws
    themselves, and following the receivers from anyone walks the whole roster
    before coming back. Two participants end up buying for each other.
    """
    if len(roster) < 2:
        raise InsufficientParticipants("Need at least 2 participants")
    _ensure_unique(roster)

    rng = rng or random.Random(seed)
    order = list(roster)
    _shuffle(order, rng)

    size = len(order)
    assignments = [
        Assignment(
            giver=giver.name,
            receiver=order[(index + 1) % size].name,
            giver_contact=giver.contact,
        )
        for index, giver in enumerate(order)
    ]
    if not is_single_cycle(assignments):
        raise AssignmentError("Drawn assignments do not form a single cycle.")
    return assignments


def follow_cycle(assignments: Sequence[Assignment], start: str) -> List[str]:
    receivers: Dict[str, str] = {item.giver: item.receiver for item in assignments}
    visited = [start]
    current = receivers.get(start)
    while current is not None and current != start and current not in visited:
        visited.append(current)
        current = receivers.get(current)
    return visited


def is_single_cycle(assignments: Sequence[Assignment]) -> bool:
    if not assignments:
        return False
    givers = [item.giver for item in assignments]
    receivers = [item.receiver for item in assignments]
    if len(set(givers)) != len(givers) or set(givers) != set(receivers):
        return False
    if any(item.giver == item.receiver for item in assignments):
        return False
    return len(follow_cycle(assignments, givers[0])) == len(givers)
