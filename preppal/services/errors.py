"""Exceptions raised by third-party API services."""

from typing import Optional


class ExternalServiceError(Exception):
    """A third-party API call failed."""

    service = "External API"

    def __init__(self, message: str, status_code: Optional[int] = None, timeout: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.timeout = timeout


class USDAError(ExternalServiceError):
    service = "USDA API"


class FatSecretError(ExternalServiceError):
    service = "FatSecret API"


class OpenFoodFactsError(ExternalServiceError):
    service = "Open Food Facts API"


class KrogerError(ExternalServiceError):
    service = "Kroger API"


class InstructionGenerationError(ExternalServiceError):
    service = "Instruction generator"
