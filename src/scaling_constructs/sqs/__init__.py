"""SQS queue constructs."""

from .queue_ref import ImportedQueue, Queue, QueueRef

__all__ = ["ImportedQueue", "Queue", "QueueRef"]
