"""In-memory room registry and zombie simulator.

All room state lives here. Mutations of a single room are serialized by
that room's lock; the registry lock only guards the room map, the
client -> room index and the zombie id counter. A room lock may be held
while taking the registry lock, never the other way round.
"""

import logging
import random
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from zombie_lane.models import Client, Room
from .simulation import (
    SimulationSettings,
    is_breached,
    move_zombie,
    new_zombie,
    spawn_count,
    wave_rate,
)


logger = logging.getLogger(__name__)

Timer = Callable[..., Any]


class RegistryListener:
    """Receives registry output. Subclasses override what they deliver."""

    def report_map(self, room: Dict[str, Any], client_id: str) -> None:
        pass

    def report_zombie_hit(self, client_id: str, zombie_id: int, killed: bool) -> None:
        pass

    def report_game_over(self, client_id: str, room_id: str) -> None:
        pass

    def rooms_changed(self, summary: Dict[str, Any]) -> None:
        pass


class RoomRegistry:
    def __init__(
        self,
        settings: Optional[SimulationSettings] = None,
        rng: Optional[random.Random] = None,
        timer: Optional[Timer] = None,
        server_id: str = 'local',
        host_username: str = 'host',
    ):
        self.settings = settings or SimulationSettings()
        self.rng = rng or random.Random()
        self.timer = timer
        self.server_id = server_id
        self.host_username = host_username
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        self._client_rooms: Dict[str, str] = {}
        self._last_zombie_id = -1
        self._listeners: List[RegistryListener] = []

    # ---- Listeners ----

    def add_listener(self, listener: RegistryListener) -> None:
        self._listeners.append(listener)

    def _notify(self, method: str, *args) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, method)(*args)
            except Exception:
                logger.exception(f"[listener-error] listener={listener!r} method={method}")

    def _notify_rooms_changed(self) -> None:
        self._notify('rooms_changed', self.summary())

    # ---- Read side ----

    def summary(self) -> Dict[str, Any]:
        """Lobby listing: this server and the player count of each room."""
        with self._lock:
            rooms = list(self._rooms.values())
        return {
            'server_id': self.server_id,
            'host_username': self.host_username,
            'rooms': [room.to_summary() for room in rooms],
        }

    def get_room_snapshot(self, room_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            room = self._rooms.get(room_id)
        if room is None:
            return None
        with room.lock:
            return None if room.destroyed else room.to_dict()

    def room_ids(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def client_room_id(self, client_id: str) -> Optional[str]:
        with self._lock:
            return self._client_rooms.get(client_id)

    def _client_room(self, client_id: str) -> Optional[Room]:
        with self._lock:
            room_id = self._client_rooms.get(client_id)
            return self._rooms.get(room_id) if room_id is not None else None

    def _next_zombie_id(self) -> int:
        with self._lock:
            self._last_zombie_id += 1
            return self._last_zombie_id

    # ---- Player actions ----

    def handle_join(self, client_id: str, username: str, room_id: str) -> None:
        previous_room_id = self.client_room_id(client_id)
        if previous_room_id is not None and previous_room_id != room_id:
            # A client lives in at most one room
            self.handle_leave(client_id)

        client = Client(client_id=client_id, username=username)
        while True:
            with self._lock:
                room = self._rooms.get(room_id)
                created = room is None
                if created:
                    room = Room(
                        room_id=room_id,
                        spawn_rate=self.settings.new_zombies_per_tick,
                        clients={client_id: client},
                    )
                    self._rooms[room_id] = room
                self._client_rooms[client_id] = room_id

            with room.lock:
                if room.destroyed:
                    # Grace period expired between lookup and lock; start over with a fresh room
                    continue
                if created:
                    logger.info(f"[room-create] room={room_id} client={client_id}")
                else:
                    room.clients[client_id] = client
                    if room.is_frozen:
                        room.is_frozen = False
                        room.grace_deadline = None
                        logger.info(f"[room-unfreeze] room={room_id} client={client_id}")
                self._notify('report_map', room.to_dict(), client_id)
                self._notify_rooms_changed()
                return

    def handle_leave(self, client_id: str) -> None:
        room = self._client_room(client_id)
        if room is None:
            logger.debug(f"[leave-skip] client={client_id} not in any room")
            return

        with room.lock:
            if room.destroyed or client_id not in room.clients:
                return
            del room.clients[client_id]
            with self._lock:
                if self._client_rooms.get(client_id) == room.room_id:
                    del self._client_rooms[client_id]

            if not room.clients:
                # Give players a chance to rejoin after connection problems
                delay = self.settings.rejoin_grace_period_sec
                deadline = time.monotonic() + delay
                room.is_frozen = True
                room.grace_deadline = deadline
                logger.info(f"[room-freeze] room={room.room_id} grace={delay}s")
                if self.timer is not None:
                    self.timer(delay, self._expire_grace, room.room_id, deadline)
            self._notify_rooms_changed()

    def handle_start_game(self, client_id: str) -> None:
        room = self._client_room(client_id)
        if room is None:
            return

        with room.lock:
            if room.destroyed or client_id not in room.clients or room.is_started:
                return
            room.is_started = True
            room.started_at = datetime.now(timezone.utc)
            logger.info(f"[room-start] room={room.room_id} client={client_id}")
            self._notify_rooms_changed()

    def handle_shot(self, client_id: str, x: int, y: int) -> Optional[Tuple[int, bool]]:
        """Damage the first zombie standing exactly on (x, y).

        Returns ``(zombie_id, killed)`` for a hit and ``None`` otherwise. The
        result is also reported to the shooter only.
        """
        room = self._client_room(client_id)
        if room is None:
            return None

        with room.lock:
            if room.destroyed or client_id not in room.clients:
                return None
            hit_index = next(
                (i for i, zombie in enumerate(room.zombies) if zombie.x == x and zombie.y == y),
                None,
            )
            if hit_index is None:
                return None
            zombie = room.zombies[hit_index]
            zombie.health -= self.settings.shot_damage
            killed = zombie.health <= 0
            if killed:
                del room.zombies[hit_index]
            self._notify('report_zombie_hit', client_id, zombie.id, killed)
            return zombie.id, killed

    # ---- Lifecycle ----

    def reschedule_grace_timers(self) -> int:
        """Arm a grace timer for every frozen room, keeping each room's deadline.

        Used when a (re)started engine takes over from timers that were
        dropped while it was stopped. A timer that still fires from before
        is harmless: ``_expire_grace`` destroys a room at most once.
        """
        if self.timer is None:
            return 0
        with self._lock:
            rooms = list(self._rooms.values())
        armed = 0
        for room in rooms:
            with room.lock:
                if room.destroyed or not room.is_frozen or room.grace_deadline is None:
                    continue
                deadline = room.grace_deadline
            delay = max(0.0, deadline - time.monotonic())
            self.timer(delay, self._expire_grace, room.room_id, deadline)
            armed += 1
        return armed

    def _expire_grace(self, room_id: str, deadline: float) -> None:
        with self._lock:
            room = self._rooms.get(room_id)
        if room is None:
            return

        with room.lock:
            logger.info(f"[grace-fire] room={room_id} clients={len(room.clients)}")
            if room.destroyed or room.clients or room.grace_deadline != deadline:
                logger.info(f"[grace-abort] room={room_id} rejoined or rescheduled")
                return
            self._destroy(room)

    def _destroy(self, room: Room) -> None:
        """Remove a room from the registry. Caller holds ``room.lock``."""
        room.destroyed = True
        with self._lock:
            if self._rooms.get(room.room_id) is room:
                del self._rooms[room.room_id]
            for client_id in room.clients:
                if self._client_rooms.get(client_id) == room.room_id:
                    del self._client_rooms[client_id]
        logger.info(f"[room-destroy] room={room.room_id}")
        self._notify_rooms_changed()

    # ---- Simulation ----

    def advance(self) -> None:
        """Run one tick for every started, unfrozen room."""
        with self._lock:
            rooms = list(self._rooms.values())
        for room in rooms:
            try:
                self._advance_room(room)
            except Exception:
                logger.exception(f"[tick-error] room={room.room_id}")

    def _advance_room(self, room: Room) -> None:
        settings = self.settings
        with room.lock:
            if room.destroyed or not room.is_started or room.is_frozen:
                return

            now = time.time()
            interval = now - room.last_tick_at if room.last_tick_at else None
            room.last_tick_at = now
            logger.debug(f"[tick] room={room.room_id} tick={room.total_ticks} interval={interval}")

            for zombie in room.zombies:
                move_zombie(zombie, self.rng, settings)

            rate = wave_rate(room.spawn_rate, room.total_ticks, settings.wave_tick_length)
            for _ in range(spawn_count(rate, self.rng)):
                if len(room.zombies) >= settings.max_zombies_per_map:
                    break
                room.zombies.append(new_zombie(self._next_zombie_id(), self.rng, settings))

            room.spawn_rate += settings.new_zombies_per_tick_increment
            room.total_ticks += 1

            snapshot = room.to_dict()
            client_ids = list(room.clients)
            if any(is_breached(zombie, settings) for zombie in room.zombies):
                logger.info(f"[game-over] room={room.room_id} tick={room.total_ticks}")
                for client_id in client_ids:
                    self._notify('report_game_over', client_id, room.room_id)
                self._destroy(room)

            for client_id in client_ids:
                self._notify('report_map', snapshot, client_id)
