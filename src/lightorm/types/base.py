"""Base model class for all lightorm models with serialization support."""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict


class LightORMBaseModel(BaseModel):
    """Base model for all lightorm models with built-in serialization.

    Provides common functionality for all lightorm models including:
    - Serialization to dictionary via to_dict()
    - Consistent configuration (enum values stored as plain strings)
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        use_enum_values=True,
        validate_assignment=True
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary for serialization.

        Returns:
            Dictionary representation with nested models converted as well
        """
        return self.model_dump(by_alias=False, exclude_none=True)
