"""Typed failures raised by the premium engine."""

from __future__ import annotations


class EngineError(Exception):
    """Base class for every engine failure."""

    is_client_error = True


class ConfigValidationError(EngineError, RuntimeError):
    """Tariff document is malformed or incomplete."""

    is_client_error = False

    def __init__(self, violations: list[str], source: str | None = None):
        self.violations = list(violations)
        self.source = source
        where = f" ({source})" if source else ""
        details = "; ".join(self.violations)
        super().__init__(f"Tariff document validation failed{where}: {details}")


class PathNotFoundError(EngineError, KeyError):
    """Dotted configuration path is absent from the tariff document."""

    is_client_error = False

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Configuration path not found: {path}")

    def __str__(self) -> str:
        return self.args[0]


class RateNotFoundException(EngineError, LookupError):
    """No configured rate matches the vehicle."""


class UnsupportedCoverageError(EngineError, ValueError):
    def __init__(self, coverage: str):
        self.coverage = coverage
        super().__init__(f"Unsupported coverage type: {coverage}")


class IncompleteInputError(EngineError, ValueError):
    """Vehicle, contract or coverage selection is missing."""


class InvalidVehicleDetailsError(EngineError, ValueError):
    pass


class InvalidContractDetailsError(EngineError, ValueError):
    pass


class UnknownPackError(EngineError, LookupError):
    def __init__(self, pack_code: str):
        self.pack_code = pack_code
        super().__init__(f"Insurance pack with code {pack_code} not found")
