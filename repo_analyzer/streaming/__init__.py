"""Progressive event delivery"""
from .channel import EventChannel, Producer, format_sse, stream_events

__all__ = ["EventChannel", "Producer", "format_sse", "stream_events"]
