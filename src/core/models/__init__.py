"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from src.core.models import Action, Inputs, Receipt
"""

from src.core.models.action import Action, Receipt
from src.core.models.inputs import Inputs

__all__ = [
    "Action",
    "Inputs",
    "Receipt",
]
