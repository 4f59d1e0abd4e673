# models package init
# Input records are importable from a single place.
from gassi.models.event import BREAK_TYPES, Event, EventType  # noqa: F401
from gassi.models.settings import CountdownMode, Settings  # noqa: F401
