"""Application context for explicit state passing.

AppContext bundles the long-lived collaborators (config, storage, player) so
they can be passed to the intent executor instead of living in globals.
"""

import queue
from dataclasses import dataclass, field, replace
from typing import Optional

from guitar_looper.core.config import Config
from guitar_looper.core.storage import KeyValueStore, SqliteKeyValueStore
from guitar_looper.domain.loops.store import LoopStore
from guitar_looper.domain.playback.player import PlayerState


@dataclass
class AppContext:
    """Application context passed to the intent executor.

    Attributes:
        config: Application configuration
        kv: Persistent key/value store (loops and history)
        loop_store: Loop persistence on top of `kv`
        player_state: Current MPV player state
        events: Queue of controller events posted by background threads
        ffprobe_checked: Whether a chapter scan has already run the ffprobe check
    """

    config: Config
    kv: KeyValueStore
    loop_store: LoopStore
    player_state: PlayerState = field(default_factory=PlayerState)
    events: queue.Queue = field(default_factory=queue.Queue)
    ffprobe_checked: bool = False

    @classmethod
    def create(cls, config: Config, kv: Optional[KeyValueStore] = None) -> "AppContext":
        """Create the initial context, defaulting to the SQLite store."""
        store = kv if kv is not None else SqliteKeyValueStore()
        return cls(config=config, kv=store, loop_store=LoopStore(store))

    def with_player_state(self, player_state: PlayerState) -> "AppContext":
        return replace(self, player_state=player_state)
