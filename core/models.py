#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Heatmap Tracker - Core Data Models
Topic model with validation and serialization

Version: 1.0.0
"""

import uuid
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from core.exceptions import ValidationError
from utils.validators import is_valid_date, is_valid_value

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100
UNIT_MAX_LENGTH = 50
REQUIRED_FIELDS = ("id", "name", "unit")

# ===== VALIDATION HELPERS =====

def _problem(field_name: str, message: str, index: Optional[int] = None) -> Dict[str, Any]:
    return {"index": index, "field": field_name, "message": message}


def validate_text(text: Any, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Validate a text field and return it stripped"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string", [_problem(field_name, "must be a string")])

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(
            f"{field_name} must be at least {min_length} characters",
            [_problem(field_name, f"must be at least {min_length} characters")]
        )

    if len(text) > max_length:
        raise ValidationError(
            f"{field_name} must be at most {max_length} characters",
            [_problem(field_name, f"must be at most {max_length} characters")]
        )

    return text


def data_errors(data: Any, index: Optional[int] = None) -> List[Dict[str, Any]]:
    """List every problem in a date -> value map without raising"""
    if not isinstance(data, Mapping):
        return [_problem("data", "must be an object mapping dates to values", index)]

    errors = []
    for day, value in data.items():
        if not is_valid_date(day):
            errors.append(_problem(f"data.{day}", "key is not a valid YYYY-MM-DD date", index))
        elif not is_valid_value(value):
            errors.append(_problem(f"data.{day}", "value must be a non-negative number", index))
    return errors


def validate_data(data: Any) -> Dict[str, float]:
    """Validate a date -> value map and drop zero entries

    A zero value and a missing key are the same state, so zeros are
    never stored.
    """
    errors = data_errors(data)
    if errors:
        raise ValidationError("Invalid topic data", errors)
    return {day: value for day, value in data.items() if value != 0}


def record_errors(record: Any, index: Optional[int] = None) -> List[Dict[str, Any]]:
    """List every problem in a serialized topic record"""
    if not isinstance(record, Mapping):
        return [_problem("topic", "must be an object", index)]

    errors = []
    for field_name in REQUIRED_FIELDS:
        value = record.get(field_name)
        if value is None:
            errors.append(_problem(field_name, "is required", index))
        elif not isinstance(value, str) or not value.strip():
            errors.append(_problem(field_name, "must be a non-empty string", index))

    if "data" not in record:
        errors.append(_problem("data", "is required", index))
    else:
        errors.extend(data_errors(record["data"], index))

    return errors

# ===== CORE MODELS =====

@dataclass
class Topic:
    """A named metric tracked per calendar date"""
    id: str
    name: str
    unit: str
    data: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        """Validation after construction"""
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValidationError("id must be a non-empty string", [_problem("id", "must be a non-empty string")])

        self.name = validate_text(self.name, max_length=NAME_MAX_LENGTH, field_name="name")
        self.unit = validate_text(self.unit, max_length=UNIT_MAX_LENGTH, field_name="unit")
        self.data = validate_data(self.data)

    @property
    def entry_count(self) -> int:
        return len(self.data)

    def value_on(self, day: str) -> float:
        return self.data.get(day, 0)

    def copy(self) -> "Topic":
        return Topic(id=self.id, name=self.name, unit=self.unit, data=dict(self.data))

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted record shape"""
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "data": dict(sorted(self.data.items()))
        }

    @classmethod
    def from_dict(cls, record: Any, index: Optional[int] = None) -> "Topic":
        """Deserialize a record, reporting every problem at once"""
        errors = record_errors(record, index)
        if errors:
            raise ValidationError("Invalid topic record", errors)

        try:
            return cls(
                id=record["id"],
                name=record["name"],
                unit=record["unit"],
                data=record["data"]
            )
        except ValidationError as e:
            for problem in e.errors:
                problem["index"] = index
            logger.debug(f"Rejected topic record at index {index}: {e}")
            raise

    @classmethod
    def create(cls, name: str, unit: str, data: Optional[Dict[str, float]] = None) -> "Topic":
        """Create a topic with a fresh id"""
        return cls(
            id=str(uuid.uuid4()),
            name=name,
            unit=unit,
            data=dict(data or {})
        )
