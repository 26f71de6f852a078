#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Heatmap Tracker - Exceptions
Error hierarchy shared by the store, the service layer and the dashboard

Version: 1.0.0
"""

from typing import Any, Dict, List, Optional


class TrackerError(Exception):
    """Base exception for tracker errors"""
    pass


class TopicNotFoundError(TrackerError):
    """Operation referenced a topic id that does not exist"""

    def __init__(self, topic_id: str):
        self.topic_id = topic_id
        super().__init__(f"Topic not found: {topic_id}")


class ValidationError(TrackerError):
    """Malformed topic, entry or import payload

    ``errors`` holds one dict per problem: ``{"index", "field", "message"}``.
    ``index`` is the position inside an import payload, ``None`` otherwise.
    """

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "errors": self.errors}


class PersistenceError(TrackerError):
    """Underlying storage medium failed to read or write"""
    pass
