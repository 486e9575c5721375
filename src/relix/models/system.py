"""Host system models."""

from pydantic import BaseModel


class OSInfo(BaseModel):
    """Operating system identifier and numeric version from os-release."""

    id: str = "unknown"
    version: float = 0.0
