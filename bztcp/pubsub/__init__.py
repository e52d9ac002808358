"""
bztcp.pubsub — Redis fan-out for received STREAM records.

Public API:
    RecordPublisher    — publishes StreamData records to Redis channels
    PublisherError     — raised when publishing fails
    SerializationError — raised when a record cannot be encoded
    channels           — channel naming and channels_for_record()
"""
from .publisher import PublisherError, RecordPublisher
from .serializer import SerializationError, serialize
from . import channels

__all__ = [
    "PublisherError",
    "RecordPublisher",
    "SerializationError",
    "channels",
    "serialize",
]
