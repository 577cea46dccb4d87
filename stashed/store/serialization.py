"""JSON encoding of record data for durable backends."""

import json
from datetime import datetime
from typing import Any, Dict

from .exceptions import SerializationError

TAG_PREFIX = "__"
DATETIME_TAG = "__datetime__"
DICT_TAG = "__dict__"


class Serializer:
    """Convert record data to and from JSON text.

    Handles the nested dicts stored in stash fields plus a few values JSON
    has no native form for. Datetimes are written as tagged objects and
    restored on load; tuples come back as lists. A dict with any key
    starting with "__" is wrapped in a "__dict__" object so user data never
    collides with those tags.

    Example:
        serializer = Serializer()

        text = serializer.to_json({"prefs": {"seen": datetime(2024, 1, 1)}})
        data = serializer.from_json(text)
        # {'prefs': {'seen': datetime.datetime(2024, 1, 1, 0, 0)}}
    """

    def to_json(self, data: Dict[str, Any]) -> str:
        """Encode a record's field values as a JSON string.

        Raises:
            SerializationError: If a value has no JSON representation
        """
        return json.dumps(self._to_json_compatible(data), sort_keys=True)

    def from_json(self, text: str) -> Dict[str, Any]:
        """Decode a JSON string produced by to_json()."""
        try:
            data = json.loads(text)
        except ValueError as e:
            raise SerializationError(f"Corrupt record data: {e}")
        if not isinstance(data, dict):
            raise SerializationError(
                f"Record data must decode to an object, got {type(data).__name__}"
            )
        return self._from_json_compatible(data)

    def _to_json_compatible(self, value: Any) -> Any:
        """Convert a value to JSON-compatible format."""
        if value is None:
            return None
        if isinstance(value, (str, int, float, bool)):
            return value
        if isinstance(value, datetime):
            return {DATETIME_TAG: value.isoformat()}
        if isinstance(value, (list, tuple)):
            return [self._to_json_compatible(v) for v in value]
        if isinstance(value, dict):
            result = {}
            for k, v in value.items():
                if not isinstance(k, str):
                    raise SerializationError(
                        f"Cannot serialize non-string key {k!r} ({type(k).__name__})"
                    )
                result[k] = self._to_json_compatible(v)
            # Reserved-looking keys are wrapped so they can't be read back as tags
            if any(k.startswith(TAG_PREFIX) for k in result):
                return {DICT_TAG: result}
            return result
        raise SerializationError(f"Cannot serialize type: {type(value)}")

    def _from_json_compatible(self, value: Any) -> Any:
        """Convert a value from JSON-compatible format."""
        if isinstance(value, list):
            return [self._from_json_compatible(v) for v in value]
        if isinstance(value, dict):
            if len(value) == 1 and DICT_TAG in value:
                escaped = value[DICT_TAG]
                if not isinstance(escaped, dict):
                    raise SerializationError(f"Corrupt escaped object: {escaped!r}")
                return {k: self._from_json_compatible(v) for k, v in escaped.items()}
            if len(value) == 1 and DATETIME_TAG in value:
                try:
                    return datetime.fromisoformat(value[DATETIME_TAG])
                except (TypeError, ValueError) as e:
                    raise SerializationError(f"Corrupt datetime value: {e}")
            return {k: self._from_json_compatible(v) for k, v in value.items()}
        return value
