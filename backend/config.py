import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Lobby listing identity
    SERVER_ID = os.environ.get('SERVER_ID') or 'local'
    HOST_USERNAME = os.environ.get('HOST_USERNAME') or 'host'
    # Simulation timers (seconds)
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '2'))
    REJOIN_GRACE_PERIOD_SEC = float(os.environ.get('REJOIN_GRACE_PERIOD_SEC', '30'))
    # Lane geometry
    MAP_WIDTH = int(os.environ.get('MAP_WIDTH', '32'))
    MAP_HEIGHT = int(os.environ.get('MAP_HEIGHT', '10'))
    # Zombies
    ZOMBIE_HEALTH = int(os.environ.get('ZOMBIE_HEALTH', '100'))
    SHOT_DAMAGE = int(os.environ.get('SHOT_DAMAGE', '50'))
    ZOMBIE_MOVE_PER_TICK = int(os.environ.get('ZOMBIE_MOVE_PER_TICK', '1'))
    MAX_ZOMBIES_PER_MAP = int(os.environ.get('MAX_ZOMBIES_PER_MAP', '100'))
    # Waves: expected spawns per tick, its per-tick ramp and the sine period in ticks
    NEW_ZOMBIES_PER_TICK = float(os.environ.get('NEW_ZOMBIES_PER_TICK', '0.5'))
    NEW_ZOMBIES_PER_TICK_INCREMENT = float(os.environ.get('NEW_ZOMBIES_PER_TICK_INCREMENT', '0.1'))
    WAVE_TICK_LENGTH = int(os.environ.get('WAVE_TICK_LENGTH', '10'))
    # Game over when a zombie's x drops below this value
    BREACH_THRESHOLD_X = int(os.environ.get('BREACH_THRESHOLD_X', '-1000000'))
    # Optional: fixed RNG seed for reproducible rooms. Empty means system entropy.
    RANDOM_SEED = os.environ.get('RANDOM_SEED') or None
    # Optional: heartbeat interval for tick loop logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
