"""Core integrity layer: models, validation, error handling and backend access"""
from .models import Egg, IncubationRecord, PendingMutation, Pet, WorldPoint, Notification, EGGS, WORLD_POINTS
from .config import CONFIG
from .errors import IntegrityError, TransportError, ValidationError, BackendError

__all__ = [
    'Egg', 'IncubationRecord', 'PendingMutation', 'Pet', 'WorldPoint', 'Notification',
    'EGGS', 'WORLD_POINTS', 'CONFIG',
    'IntegrityError', 'TransportError', 'ValidationError', 'BackendError',
]
