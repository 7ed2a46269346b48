"""mpdctl - a scriptable MPD playback-control client."""

__version__ = "0.1.0"
