import time
from typing import Callable

from .registry import RoomRegistry


class GameEngine:
    """Drives a registry: the periodic tick loop and one-shot grace timers.

    - ``start()`` launches the tick loop as a Socket.IO background task
    - ``stop()`` ends the loop after its current sleep; pending grace timers
      fire into a no-op until ``start()`` rearms them for still-frozen rooms
    - The engine installs itself as the registry's timer so grace periods
      follow the same lifecycle as the tick
    """

    def __init__(self, app, registry: RoomRegistry, socketio):
        self.app = app
        self.registry = registry
        self.socketio = socketio
        self._running = False
        self._generation = 0
        registry.timer = self.schedule_once

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._generation += 1
        interval = float(self.app.config.get('TICK_INTERVAL_SEC', 2))
        self.app.logger.info(f"[engine-start] interval={interval}s generation={self._generation}")
        self.socketio.start_background_task(self._tick_loop, self._generation, interval)
        # Grace timers from a previous run were dropped by stop(); frozen rooms need fresh ones
        armed = self.registry.reschedule_grace_timers()
        if armed:
            self.app.logger.info(f"[timer-resume] rearmed {armed} grace timer(s)")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self.app.logger.info(f"[engine-stop] generation={self._generation}")

    def _alive(self, generation: int) -> bool:
        return self._running and self._generation == generation

    def schedule_once(self, delay: float, fn: Callable, *args) -> None:
        generation = self._generation

        def _runner():
            self.socketio.sleep(delay)
            if not self._alive(generation):
                self.app.logger.info(f"[timer-abort] engine stopped before {getattr(fn, '__name__', fn)} fired")
                return
            fn(*args)

        self.app.logger.info(f"[timer-set] {getattr(fn, '__name__', fn)} delay={delay}s")
        self.socketio.start_background_task(_runner)

    def _tick_loop(self, generation: int, interval: float) -> None:
        hb = int(self.app.config.get('TIMER_HEARTBEAT_SEC', 0))
        ticks = 0
        last_heartbeat = time.time()
        while self._alive(generation):
            self.socketio.sleep(interval)
            if not self._alive(generation):
                break
            self.registry.advance()
            ticks += 1
            if hb > 0 and time.time() - last_heartbeat >= hb:
                last_heartbeat = time.time()
                self.app.logger.info(
                    f"[tick-heartbeat] generation={generation} ticks={ticks} rooms={len(self.registry.room_ids())}"
                )
