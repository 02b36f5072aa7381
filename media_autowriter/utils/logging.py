"""Structured logging setup using structlog with generation context support."""

import logging
import sys
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from media_autowriter.config.settings import settings


# Context variables for audit logging
_generation_id_ctx: ContextVar[Optional[str]] = ContextVar("generation_id", default=None)
_tenant_id_ctx: ContextVar[Optional[str]] = ContextVar("tenant_id", default=None)
_agent_name_ctx: ContextVar[Optional[str]] = ContextVar("agent_name", default=None)
_step_name_ctx: ContextVar[Optional[str]] = ContextVar("step_name", default=None)


def set_generation_context(
    generation_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    agent_name: Optional[str] = None,
    step_name: Optional[str] = None,
) -> None:
    """
    Set the current generation context for structured logging.

    Args:
        generation_id: Identifier of the current pipeline run
        tenant_id: Media tenant the run belongs to
        agent_name: Current agent name
        step_name: Current step name
    """
    if generation_id is not None:
        _generation_id_ctx.set(generation_id)
    if tenant_id is not None:
        _tenant_id_ctx.set(tenant_id)
    if agent_name is not None:
        _agent_name_ctx.set(agent_name)
    if step_name is not None:
        _step_name_ctx.set(step_name)


def clear_generation_context() -> None:
    """Clear the current generation context."""
    _generation_id_ctx.set(None)
    _tenant_id_ctx.set(None)
    _agent_name_ctx.set(None)
    _step_name_ctx.set(None)


def get_generation_context() -> dict[str, Optional[str]]:
    """
    Get the current generation context.

    Returns:
        Dict with generation_id, tenant_id, agent_name, step_name
    """
    return {
        "generation_id": _generation_id_ctx.get(),
        "tenant_id": _tenant_id_ctx.get(),
        "agent_name": _agent_name_ctx.get(),
        "step_name": _step_name_ctx.get(),
    }


def add_generation_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add generation context to log entries if available."""
    for key, value in get_generation_context().items():
        if value and key not in event_dict:
            event_dict[key] = value
    return event_dict


def setup_logging() -> None:
    """Configure structured logging."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_generation_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Logger for audit events with automatic context tracking.

    Usage:
        audit = AuditLogger("article_generation")
        audit.set_generation(generation_id, tenant_id)
        audit.log_step_start("themes", "Proposing themes")
        audit.log_step_complete("themes", "3 candidates", details={"count": 3})
        audit.log_error("themes", error, "Theme proposal failed")
    """

    def __init__(self, agent_name: str) -> None:
        """Initialize audit logger for an agent."""
        self.agent_name = agent_name
        self.logger = get_logger(f"audit.{agent_name}")

    def set_generation(self, generation_id: str, tenant_id: Optional[str] = None) -> None:
        """Bind the generation and tenant to the current context."""
        set_generation_context(
            generation_id=generation_id,
            tenant_id=tenant_id,
            agent_name=self.agent_name,
        )

    def log_step_start(
        self,
        step_name: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log the start of a pipeline step."""
        set_generation_context(step_name=step_name)
        self.logger.info(
            "step_started",
            action="step_start",
            step=step_name,
            message=message,
            details=details or {},
        )

    def log_step_complete(
        self,
        step_name: str,
        message: str,
        details: Optional[dict] = None,
        duration_seconds: Optional[float] = None,
    ) -> None:
        """Log the completion of a pipeline step."""
        self.logger.info(
            "step_completed",
            action="step_complete",
            step=step_name,
            message=message,
            details=details or {},
            duration_seconds=duration_seconds,
        )

    def log_step_warning(
        self,
        step_name: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log a warning during a pipeline step."""
        self.logger.warning(
            "step_warning",
            action="step_warning",
            step=step_name,
            message=message,
            details=details or {},
        )

    def log_error(
        self,
        step_name: str,
        error: Exception,
        message: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error during a pipeline step."""
        self.logger.error(
            "step_error",
            action="step_error",
            step=step_name,
            message=message or str(error),
            error_type=type(error).__name__,
            error_message=str(error),
            details=details or {},
            exc_info=True,
        )

    def log_workflow_start(self, workflow_type: str, input_data: Optional[dict] = None) -> None:
        """Log the start of a workflow."""
        self.logger.info(
            "workflow_started",
            action="workflow_start",
            workflow_type=workflow_type,
            input_data=input_data or {},
        )

    def log_workflow_complete(
        self,
        workflow_type: str,
        output_summary: Optional[dict] = None,
        duration_seconds: Optional[float] = None,
    ) -> None:
        """Log the completion of a workflow."""
        self.logger.info(
            "workflow_completed",
            action="workflow_complete",
            workflow_type=workflow_type,
            output_summary=output_summary or {},
            duration_seconds=duration_seconds,
        )

    def log_workflow_failed(
        self,
        workflow_type: str,
        error: Exception,
        duration_seconds: Optional[float] = None,
    ) -> None:
        """Log a workflow failure."""
        self.logger.error(
            "workflow_failed",
            action="workflow_failed",
            workflow_type=workflow_type,
            error_type=type(error).__name__,
            error_message=str(error),
            duration_seconds=duration_seconds,
            exc_info=True,
        )
