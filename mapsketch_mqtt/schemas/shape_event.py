"""
Shape Event Message Schema
==========================

Bounded Context: Shape Lifecycle Data Structures

Schema for shape notifications published via MQTT.

Design:
- ShapeEventType: created / updated / deleted
- ShapeEventMessage: one notification, carrying the affected ids and,
  for created/updated, their GeoJSON features

Message Flow:
    DrawEngine hook → ShapeEventMessage → ShapeEventPublisher → MQTT → Subscriber
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .common import Timestamp

SCHEMA_VERSION = "1.0"


class ShapeEventType(str, Enum):
    """Shape lifecycle event enumeration."""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


def _empty_collection() -> Dict[str, Any]:
    return {"type": "FeatureCollection", "features": []}


@dataclass(frozen=True)
class ShapeEventMessage:
    """
    Shape lifecycle notification.

    Attributes:
        schema_version: Message schema version (for evolution)
        timestamp: ISO 8601 timestamp of message creation
        session_id: Drawing session / map instance identifier
        event_type: created, updated or deleted
        shape_ids: Affected shape ids
        features: GeoJSON FeatureCollection of the affected shapes
                  (empty for deleted)

    Invariants:
        - session_id is not empty
        - shape_ids is not empty
        - features is a FeatureCollection mapping whose members are mappings
        - created/updated carry one feature per shape id

    Example:
        >>> msg = ShapeEventMessage(
        ...     schema_version="1.0",
        ...     timestamp=Timestamp.now(),
        ...     session_id="map_01",
        ...     event_type=ShapeEventType.CREATED,
        ...     shape_ids=[1],
        ...     features={"type": "FeatureCollection", "features": [feature]}
        ... )
    """
    schema_version: str
    timestamp: Timestamp
    session_id: str
    event_type: ShapeEventType
    shape_ids: List[int]
    features: Dict[str, Any] = field(default_factory=_empty_collection)

    def __post_init__(self):
        """Validate invariants."""
        if not self.session_id:
            raise ValueError("session_id cannot be empty")
        if not self.shape_ids:
            raise ValueError("shape_ids cannot be empty")
        if not isinstance(self.features, dict):
            raise ValueError(
                f"features must be a FeatureCollection mapping, got {type(self.features).__name__}"
            )
        if self.features.get("type") != "FeatureCollection":
            raise ValueError(
                f"features must be a FeatureCollection, got {self.features.get('type')!r}"
            )
        members = self.features.get("features", [])
        if not isinstance(members, list) or not all(isinstance(f, dict) for f in members):
            raise ValueError("features.features must be a list of Feature mappings")
        if self.event_type != ShapeEventType.DELETED:
            feature_count = len(members)
            if feature_count != len(self.shape_ids):
                raise ValueError(
                    f"{self.event_type.value} message needs one feature per id "
                    f"({len(self.shape_ids)} ids, {feature_count} features)"
                )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            'schema_version': self.schema_version,
            'timestamp': self.timestamp.to_dict(),
            'session_id': self.session_id,
            'event_type': self.event_type.value,
            'shape_ids': list(self.shape_ids),
            'features': self.features,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ShapeEventMessage':
        """Deserialize from dict.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            return cls(
                schema_version=str(data['schema_version']),
                timestamp=Timestamp(value=data['timestamp']),
                session_id=str(data['session_id']),
                event_type=ShapeEventType(data['event_type']),
                shape_ids=[int(shape_id) for shape_id in data['shape_ids']],
                features=data.get('features') or _empty_collection(),
            )
        except KeyError as e:
            raise ValueError(f"Missing required ShapeEventMessage field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid ShapeEventMessage data: {e}")

    @classmethod
    def for_shapes(
        cls,
        session_id: str,
        event_type: ShapeEventType,
        features: List[Dict[str, Any]],
    ) -> 'ShapeEventMessage':
        """Build a created/updated message from GeoJSON features."""
        return cls(
            schema_version=SCHEMA_VERSION,
            timestamp=Timestamp.now(),
            session_id=session_id,
            event_type=event_type,
            shape_ids=[feature['properties']['id'] for feature in features],
            features={"type": "FeatureCollection", "features": list(features)},
        )

    @classmethod
    def for_deletion(cls, session_id: str, shape_ids: List[int]) -> 'ShapeEventMessage':
        """Build a deleted message."""
        return cls(
            schema_version=SCHEMA_VERSION,
            timestamp=Timestamp.now(),
            session_id=session_id,
            event_type=ShapeEventType.DELETED,
            shape_ids=list(shape_ids),
        )

    @property
    def shape_count(self) -> int:
        """Number of shapes in this message."""
        return len(self.shape_ids)
