"""Live position mapping for one circuit."""

from trackmap.session.mapper import MAX_BACKWARD, CarPosition, TrackSession

__all__ = ["MAX_BACKWARD", "CarPosition", "TrackSession"]
