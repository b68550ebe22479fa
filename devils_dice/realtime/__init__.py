"""
Devil's Dice Real-time Events.

Typed engine events, the in-process event bus, and optional Supabase
Realtime broadcasting for remote tables.
"""

from devils_dice.realtime.broadcast import SupabaseBroadcaster, attach_broadcaster
from devils_dice.realtime.bus import EventBus
from devils_dice.realtime.events import EventPayload, GameEvent

__all__ = [
    "EventBus",
    "EventPayload",
    "GameEvent",
    "SupabaseBroadcaster",
    "attach_broadcaster",
]
