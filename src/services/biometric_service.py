"""
Biometric hardware probe interface.

The sensor itself is external; the login guard only needs to know whether a
sensor exists, whether the owner enrolled, and whether a prompt succeeded.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

BIOMETRIC_PROMPT = "Login with biometric authentication"


@dataclass
class BiometricResult:
    success: bool
    error: Optional[str] = None


class BiometricProbe(ABC):

    @abstractmethod
    async def has_hardware(self) -> bool:
        ...

    @abstractmethod
    async def is_enrolled(self) -> bool:
        ...

    @abstractmethod
    async def authenticate(self, prompt: str) -> BiometricResult:
        ...


class NoBiometricHardware(BiometricProbe):
    """Probe for hosts without a sensor. Never authenticates."""

    async def has_hardware(self) -> bool:
        return False

    async def is_enrolled(self) -> bool:
        return False

    async def authenticate(self, prompt: str) -> BiometricResult:
        return BiometricResult(success=False, error="not_available")
