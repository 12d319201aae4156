import math
import random
from dataclasses import dataclass
from typing import Optional

from zombie_lane.models import Zombie


@dataclass(frozen=True)
class SimulationSettings:
    map_width: int = 32
    map_height: int = 10
    zombie_health: int = 100
    shot_damage: int = 50
    zombie_move_per_tick: int = 1
    max_zombies_per_map: int = 100
    new_zombies_per_tick: float = 0.5
    new_zombies_per_tick_increment: float = 0.1
    wave_tick_length: int = 10
    breach_threshold_x: int = -1000000
    rejoin_grace_period_sec: float = 30.0

    @classmethod
    def from_config(cls, config) -> 'SimulationSettings':
        """Build settings from a Flask config mapping, falling back to defaults."""
        defaults = cls()
        return cls(
            map_width=int(config.get('MAP_WIDTH', defaults.map_width)),
            map_height=int(config.get('MAP_HEIGHT', defaults.map_height)),
            zombie_health=int(config.get('ZOMBIE_HEALTH', defaults.zombie_health)),
            shot_damage=int(config.get('SHOT_DAMAGE', defaults.shot_damage)),
            zombie_move_per_tick=int(config.get('ZOMBIE_MOVE_PER_TICK', defaults.zombie_move_per_tick)),
            max_zombies_per_map=int(config.get('MAX_ZOMBIES_PER_MAP', defaults.max_zombies_per_map)),
            new_zombies_per_tick=float(config.get('NEW_ZOMBIES_PER_TICK', defaults.new_zombies_per_tick)),
            new_zombies_per_tick_increment=float(
                config.get('NEW_ZOMBIES_PER_TICK_INCREMENT', defaults.new_zombies_per_tick_increment)
            ),
            wave_tick_length=int(config.get('WAVE_TICK_LENGTH', defaults.wave_tick_length)),
            breach_threshold_x=int(config.get('BREACH_THRESHOLD_X', defaults.breach_threshold_x)),
            rejoin_grace_period_sec=float(config.get('REJOIN_GRACE_PERIOD_SEC', defaults.rejoin_grace_period_sec)),
        )


def make_rng(seed: Optional[object] = None) -> random.Random:
    return random.Random(seed) if seed is not None else random.Random()


def within_map_height(y: int, settings: SimulationSettings) -> int:
    return min(max(y, 0), settings.map_height - 1)


def within_map_width(x: int) -> int:
    # One cell past the left edge is the furthest a zombie can walk
    return max(x, -1)


def move_zombie(zombie: Zombie, rng: random.Random, settings: SimulationSettings) -> Zombie:
    """Advance one zombie by its current velocity, then re-roll its vertical drift.

    The drift is a lazy random walk: a roll of +2 steps up unless already on
    the top row, -2 steps down unless on the bottom row, anything else holds.
    """
    roll = rng.randint(-2, 2)
    zombie.x = within_map_width(zombie.x + zombie.vx)
    zombie.y = within_map_height(zombie.y + zombie.vy, settings)
    if roll == 2 and zombie.y < settings.map_height - 1:
        zombie.vy = settings.zombie_move_per_tick
    elif roll == -2 and zombie.y > 0:
        zombie.vy = -settings.zombie_move_per_tick
    else:
        zombie.vy = 0
    return zombie


def wave_rate(spawn_rate: float, total_ticks: int, wave_tick_length: int) -> float:
    """Expected spawns for this tick: the base rate under a rectified sine envelope."""
    return spawn_rate * (math.sin(total_ticks * math.pi / wave_tick_length) + 1) / 2


def spawn_count(rate: float, rng: random.Random) -> int:
    """Integer spawn count whose expectation equals ``rate``."""
    whole = math.floor(rate)
    return whole + (1 if rng.random() < rate - whole else 0)


def new_zombie(zombie_id: int, rng: random.Random, settings: SimulationSettings) -> Zombie:
    return Zombie(
        id=zombie_id,
        x=settings.map_width - 1,
        y=rng.randrange(settings.map_height),
        vx=-settings.zombie_move_per_tick,
        vy=0,
        health=settings.zombie_health,
    )


def is_breached(zombie: Zombie, settings: SimulationSettings) -> bool:
    return zombie.x < settings.breach_threshold_x
