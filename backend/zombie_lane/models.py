from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
import threading


@dataclass
class Client:
    client_id: str
    username: str

    def to_dict(self):
        return {
            'client_id': self.client_id,
            'username': self.username,
        }


@dataclass
class Zombie:
    id: int
    x: int
    y: int
    vx: int
    vy: int
    health: int

    def to_dict(self):
        return {
            'id': self.id,
            'x': self.x,
            'y': self.y,
            'vx': self.vx,
            'vy': self.vy,
            'health': self.health,
        }


@dataclass
class Room:
    room_id: str
    spawn_rate: float
    is_started: bool = False
    is_frozen: bool = False
    started_at: Optional[datetime] = None
    last_tick_at: Optional[float] = None
    grace_deadline: Optional[float] = None
    total_ticks: int = 0
    zombies: List[Zombie] = field(default_factory=list)
    clients: Dict[str, Client] = field(default_factory=dict)
    # Set once the room has been removed from its registry; late holders must not mutate it
    destroyed: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def to_dict(self):
        """Full map snapshot. Zombies and clients are copied out as plain dicts."""
        return {
            'room_id': self.room_id,
            'is_started': self.is_started,
            'is_frozen': self.is_frozen,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'total_ticks': self.total_ticks,
            'spawn_rate': self.spawn_rate,
            'zombies': [z.to_dict() for z in self.zombies],
            'clients': [c.to_dict() for c in self.clients.values()],
        }

    def to_summary(self):
        return {
            'room_id': self.room_id,
            'num_players': len(self.clients),
        }
