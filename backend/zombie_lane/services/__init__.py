"""Room simulation services: registry, wave math and the tick engine.

These modules hold the game rules and know nothing about Socket.IO or
HTTP; transport code talks to them through ``RoomRegistry`` and its
listeners.
"""

from .registry import RegistryListener, RoomRegistry
from .scheduler import GameEngine
from .simulation import SimulationSettings
