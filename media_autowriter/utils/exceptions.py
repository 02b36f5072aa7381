"""Custom exceptions hierarchy."""

from typing import List, Optional


class AutowriterException(Exception):
    """Base exception for all article generation errors."""

    http_status: int = 500


class ConfigurationError(AutowriterException):
    """Missing or invalid runtime configuration (API keys, provider names)."""

    pass


class ValidationError(AutowriterException):
    """A generation request is missing mandatory fields or is malformed."""

    http_status = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.fields = fields or []


class NotFoundError(AutowriterException):
    """A referenced category, writer or pattern does not exist for the tenant."""

    http_status = 404

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ProviderError(AutowriterException):
    """An upstream LLM or image provider did not return success."""

    http_status = 502

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code
        self.body = body


class LLMOutputError(AutowriterException):
    """The provider answered but the output cannot be used (e.g. unparseable outline)."""

    http_status = 502


class DuplicateExhaustedError(AutowriterException):
    """Every proposed theme duplicated an existing article, retries included."""

    http_status = 409

    def __init__(self, rejected_themes: List[str], attempts: int) -> None:
        super().__init__(
            f"No unique theme found after {attempts} attempt(s); "
            f"{len(rejected_themes)} candidate(s) rejected as duplicates"
        )
        self.rejected_themes = list(rejected_themes)
        self.attempts = attempts


class PipelineTimeoutError(AutowriterException):
    """The generation run exceeded its wall-clock budget."""

    http_status = 504


class PersistenceError(AutowriterException):
    """Error during database operations."""

    pass
