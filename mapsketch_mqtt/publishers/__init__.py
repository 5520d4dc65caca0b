"""
MQTT Publishers
==============

Bounded Context: Message Production

Design:
- BasePublisher: Abstract base with connection management
- ShapeEventPublisher: Publishes shape lifecycle messages

Public API
----------
    BasePublisher: Abstract publisher (for custom publishers)
    ShapeEventPublisher: Shape event message publisher
"""

from .base import BasePublisher
from .shape_event import ShapeEventPublisher

__all__ = [
    'BasePublisher',
    'ShapeEventPublisher',
]
