"""
Service Errors
Exceptions raised by the write and report paths
"""

from typing import Dict


class NotFoundError(LookupError):
    """Entity missing or not owned by the requesting user"""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ScheduleValidationError(ValueError):
    """Schedule fields failed strict validation; errors maps field -> message"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = dict(errors)


class ScheduleConflictError(ValueError):
    """Schedule overlaps an existing active schedule of the same medication"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    @property
    def errors(self) -> Dict[str, str]:
        return {self.field: self.message}


class ProfileValidationError(ValueError):
    """User profile value rejected"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    @property
    def errors(self) -> Dict[str, str]:
        return {self.field: self.message}
