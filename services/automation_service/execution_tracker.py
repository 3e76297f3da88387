# execution_tracker.py - Execution lifecycle bookkeeping
# An execution is written twice: once RUNNING at creation, once at its terminal transition.

import logging
from datetime import datetime
from typing import Dict, List, Any, Optional

from .models import AutomationWorkflow, AutomationExecution, ExecutionStatus
from .automation_registry import ExecutionStore
from .exceptions import ExecutionStateError, NotFoundError

logger = logging.getLogger(__name__)

class ExecutionTracker:
    def __init__(self, store: ExecutionStore):
        self.store = store

    async def open_execution(self, workflow: AutomationWorkflow, trigger: str,
                             input_data: Optional[Dict[str, Any]] = None) -> AutomationExecution:
        execution = AutomationExecution(
            automation_id=workflow.id,
            site_id=workflow.site_id,
            status=ExecutionStatus.RUNNING,
            trigger=trigger,
            input=input_data or {},
            started_at=datetime.utcnow()
        )
        await self.store.create_execution(execution)
        logger.info(f"Opened execution {execution.id} for automation {workflow.id} ({trigger})")
        return execution

    async def complete_execution(self, execution: AutomationExecution,
                                 output: Dict[str, Any]) -> AutomationExecution:
        self._ensure_running(execution)
        execution.status = ExecutionStatus.COMPLETED
        execution.output = output
        execution.completed_at = datetime.utcnow()
        await self.store.update_execution(execution)
        logger.info(f"Execution {execution.id} completed")
        return execution

    async def fail_execution(self, execution: AutomationExecution, error: str,
                             output: Optional[Dict[str, Any]] = None) -> AutomationExecution:
        self._ensure_running(execution)
        execution.status = ExecutionStatus.FAILED
        execution.error = error
        execution.output = output or None
        execution.completed_at = datetime.utcnow()
        await self.store.update_execution(execution)
        logger.error(f"Execution {execution.id} failed: {error}")
        return execution

    async def get_execution(self, execution_id: str) -> AutomationExecution:
        execution = await self.store.get_execution(execution_id)
        if not execution:
            raise NotFoundError("Automation execution not found")
        return execution

    async def list_executions(self, workflow_id: str,
                              limit: Optional[int] = None) -> List[AutomationExecution]:
        return await self.store.list_executions(workflow_id, limit)

    def _ensure_running(self, execution: AutomationExecution):
        if execution.status != ExecutionStatus.RUNNING:
            raise ExecutionStateError(
                f"Execution {execution.id} is already {execution.status.value}"
            )
