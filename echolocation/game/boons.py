"""
Boons: optional modifier cards that change budgets and scoring for a run.

Each chapter unlocks one boon per archetype. Active boons are folded into
a single BoonModifiers result by apply_boon_effects(), which is the only
place boon effects are interpreted.
"""
import random
from functools import reduce
from typing import Dict, Iterable, List, Optional

from echolocation.logging import get_logger
from echolocation.models import Boon, BoonArchetype, BoonEffect, BoonModifiers

log = get_logger('boons')

UNLIMITED = -1


BOONS: List[Boon] = [
    # Chapter 1
    Boon(id='sharper_ears', name='Sharper Ears',
         description='Increase proximity detection range by 15%',
         archetype=BoonArchetype.PRECISION, unlock_chapter=1,
         effect=BoonEffect(proximity_multiplier=1.15)),
    Boon(id='spare_ping', name='Spare Ping',
         description='Gain +1 ping per round',
         archetype=BoonArchetype.EFFICIENCY, unlock_chapter=1,
         effect=BoonEffect(extra_pings=1)),
    Boon(id='echo_trail', name='Echo Trail',
         description='Previous pings leave a visible trail',
         archetype=BoonArchetype.ADAPTABILITY, unlock_chapter=1,
         effect=BoonEffect(show_trail=True)),
    # Chapter 2
    Boon(id='wide_net', name='Wide Net',
         description='Success radius increased by 20%',
         archetype=BoonArchetype.PRECISION, unlock_chapter=2,
         effect=BoonEffect(radius_multiplier=1.2)),
    Boon(id='steady_pace', name='Steady Pace',
         description='Reduce time penalty by 25%',
         archetype=BoonArchetype.EFFICIENCY, unlock_chapter=2,
         effect=BoonEffect(time_penalty_multiplier=0.75)),
    Boon(id='second_listen', name='Second Listen',
         description='Gain +1 extra replay use per round',
         archetype=BoonArchetype.ADAPTABILITY, unlock_chapter=2,
         effect=BoonEffect(extra_replays=1)),
    # Chapter 3
    Boon(id='deep_focus', name='Deep Focus',
         description='Proximity range and success radius +10%',
         archetype=BoonArchetype.PRECISION, unlock_chapter=3,
         effect=BoonEffect(proximity_multiplier=1.1, radius_multiplier=1.1)),
    Boon(id='quick_draw', name='Quick Draw',
         description='Halve the time penalty',
         archetype=BoonArchetype.EFFICIENCY, unlock_chapter=3,
         effect=BoonEffect(time_penalty_multiplier=0.5)),
    Boon(id='echo_memory', name='Echo Memory',
         description='Gain +2 extra replay uses per round',
         archetype=BoonArchetype.ADAPTABILITY, unlock_chapter=3,
         effect=BoonEffect(extra_replays=2)),
    # Chapter 4
    Boon(id='eagle_ear', name='Eagle Ear',
         description='Increase proximity detection range by 25%',
         archetype=BoonArchetype.PRECISION, unlock_chapter=4,
         effect=BoonEffect(proximity_multiplier=1.25)),
    Boon(id='ping_reserve', name='Ping Reserve',
         description='Gain +2 pings per round',
         archetype=BoonArchetype.EFFICIENCY, unlock_chapter=4,
         effect=BoonEffect(extra_pings=2)),
    Boon(id='phantom_sight', name='Phantom Sight',
         description='Phantom targets become slightly translucent',
         archetype=BoonArchetype.ADAPTABILITY, unlock_chapter=4,
         effect=BoonEffect(phantom_visibility=True)),
    # Chapter 5
    Boon(id='true_north', name='True North',
         description='Success radius increased by 30%',
         archetype=BoonArchetype.PRECISION, unlock_chapter=5,
         effect=BoonEffect(radius_multiplier=1.3)),
    Boon(id='master_sonar', name='Master Sonar',
         description='Gain +1 ping and reduce time penalty by 50%',
         archetype=BoonArchetype.EFFICIENCY, unlock_chapter=5,
         effect=BoonEffect(extra_pings=1, time_penalty_multiplier=0.5)),
    Boon(id='echo_veteran', name='Echo Veteran',
         description='+1 replay, ping trail and translucent phantoms',
         archetype=BoonArchetype.ADAPTABILITY, unlock_chapter=5,
         effect=BoonEffect(extra_replays=1, show_trail=True, phantom_visibility=True)),
]

_BOONS_BY_ID: Dict[str, Boon] = {b.id: b for b in BOONS}


def get_boon_by_id(boon_id: str) -> Optional[Boon]:
    return _BOONS_BY_ID.get(boon_id)


def get_unlocked_boons(completed_chapters: Iterable[int]) -> List[Boon]:
    """Boons whose unlock chapter is in the completed set."""
    completed = set(completed_chapters)
    return [b for b in BOONS if b.unlock_chapter in completed]


def _fold_effect(acc: BoonModifiers, effect: BoonEffect) -> BoonModifiers:
    """Fold one boon effect into the accumulator."""
    pings = acc.pings
    if effect.extra_pings:
        pings = max(1, pings + effect.extra_pings)

    replays = acc.replays
    if effect.extra_replays and replays is not None and replays != UNLIMITED:
        replays = max(0, replays + effect.extra_replays)

    return BoonModifiers(
        pings=pings,
        replays=replays,
        proximity_multiplier=acc.proximity_multiplier * (effect.proximity_multiplier or 1.0),
        radius_multiplier=acc.radius_multiplier * (effect.radius_multiplier or 1.0),
        time_penalty_multiplier=acc.time_penalty_multiplier * (
            1.0 if effect.time_penalty_multiplier is None else effect.time_penalty_multiplier
        ),
        phantom_visibility=acc.phantom_visibility or bool(effect.phantom_visibility),
        show_trail=acc.show_trail or bool(effect.show_trail),
    )


def apply_boon_effects(
    base_pings: int,
    base_replays: Optional[int],
    active_boon_ids: Iterable[str],
) -> BoonModifiers:
    """Fold the active boons into one set of round modifiers.

    Args:
        base_pings: Level ping budget
        base_replays: Chapter replay budget (None disabled, -1 unlimited)
        active_boon_ids: Boon ids in activation order; unknown ids are ignored

    Returns:
        BoonModifiers. With no boons this is the identity: base budgets,
        multipliers of 1 and both flags off.
    """
    identity = BoonModifiers(pings=max(1, base_pings), replays=base_replays)

    effects = []
    for boon_id in active_boon_ids:
        boon = get_boon_by_id(boon_id)
        if boon is None:
            log.warning("Ignoring unknown boon id %r", boon_id)
            continue
        effects.append(boon.effect)

    return reduce(_fold_effect, effects, identity)


def draw_boon_offers(
    available: Iterable[Boon],
    active_boon_ids: Iterable[str] = (),
    rng: Optional[random.Random] = None,
) -> List[Boon]:
    """Draw at most one boon per archetype, never one that is already active.

    Offers come back in archetype order (precision, efficiency, adaptability).
    """
    rng = rng or random
    active = set(active_boon_ids)

    by_archetype: Dict[BoonArchetype, List[Boon]] = {a: [] for a in BoonArchetype}
    for boon in available:
        if boon.id not in active:
            by_archetype[boon.archetype].append(boon)

    return [rng.choice(pool) for pool in by_archetype.values() if pool]
