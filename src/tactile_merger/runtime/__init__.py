"""Runtime package: publish loop, scheduler, contact sinks."""

from .publisher import ContactPublisher
from .scheduler import BaseScheduler, SchedulerFault, SimpleScheduler
from .sinks import CSVContactSink, ContactSink, InMemoryContactSink, NoOpContactSink

__all__ = [
    "ContactPublisher",
    "BaseScheduler",
    "SimpleScheduler",
    "SchedulerFault",
    "ContactSink",
    "NoOpContactSink",
    "InMemoryContactSink",
    "CSVContactSink",
]
