from typing import Optional

from relay.bus import EventBus
from relay.config import Settings
from relay.producers.chat_producer import MessageRelay

settings: Optional[Settings] = None
event_bus: Optional[EventBus] = None
relay: Optional[MessageRelay] = None
