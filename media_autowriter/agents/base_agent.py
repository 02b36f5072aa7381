"""Base agent abstract class with audit logging support."""

import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from media_autowriter.utils.logging import AuditLogger, get_logger


class BaseAgent(ABC):
    """
    Base class for pipeline agents with built-in audit logging and step timing.

    The base class provides:
    - Structured logging bound to the current generation run
    - Step start/complete/error audit events with durations (step_context)
    """

    def __init__(self, agent_name: str) -> None:
        """
        Initialize agent with logging and audit support.

        Args:
            agent_name: Unique name for this agent (used in logs and audits)
        """
        self.agent_name = agent_name
        self.logger = get_logger(f"agent.{agent_name}")
        self.audit = AuditLogger(agent_name)

    def set_generation_context(self, generation_id: str, tenant_id: Optional[str] = None) -> None:
        """
        Bind a generation run to this agent's log events.

        Args:
            generation_id: Identifier of the current run
            tenant_id: Media tenant the run belongs to
        """
        self.audit.set_generation(generation_id, tenant_id)

    @abstractmethod
    async def execute(self, input_data: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        """
        Execute the agent workflow.

        Args:
            input_data: Input data for the agent
            **kwargs: Additional arguments

        Returns:
            Output data from the agent
        """
        pass

    @asynccontextmanager
    async def step_context(
        self,
        step_name: str,
        message: Optional[str] = None,
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """
        Context manager for tracking a step's execution time and status.

        The start time lives in the context manager itself, so concurrent
        runs sharing one agent never see each other's timers.

        Usage:
            async with self.step_context("outline") as ctx:
                # do work
                ctx["sections"] = 5
            # Automatically logs completion with duration

        Args:
            step_name: Name of the step
            message: Optional step description

        Yields:
            Dict for storing step context/results
        """
        step_data: Dict[str, Any] = {}
        start_time = time.time()
        self.audit.log_step_start(step_name, f"Starting {step_name}")

        try:
            yield step_data
        except Exception as e:
            self.audit.log_error(
                step_name,
                e,
                message=f"Failed during {step_name}",
                details={"duration_seconds": time.time() - start_time, **step_data},
            )
            raise

        self.audit.log_step_complete(
            step_name,
            message or f"Completed {step_name}",
            details=step_data if step_data else None,
            duration_seconds=time.time() - start_time,
        )
