# automation_registry.py - Redis-based workflow and execution storage
# This file contains the store interfaces used by the engine and their Redis implementation.

from abc import ABC, abstractmethod
import redis
import logging
from typing import List, Optional

from .models import AutomationWorkflow, AutomationExecution, AutomationStatus
from .exceptions import StoreError
from .config import settings

logger = logging.getLogger(__name__)

class WorkflowStore(ABC):
    @abstractmethod
    async def create_workflow(self, workflow: AutomationWorkflow) -> AutomationWorkflow:
        pass

    @abstractmethod
    async def get_workflow(self, workflow_id: str) -> Optional[AutomationWorkflow]:
        pass

    @abstractmethod
    async def update_workflow(self, workflow: AutomationWorkflow) -> AutomationWorkflow:
        pass

    @abstractmethod
    async def list_workflows(self, site_id: str,
                             status: Optional[AutomationStatus] = None) -> List[AutomationWorkflow]:
        """Workflows of a site, newest first."""

class ExecutionStore(ABC):
    @abstractmethod
    async def create_execution(self, execution: AutomationExecution) -> AutomationExecution:
        pass

    @abstractmethod
    async def get_execution(self, execution_id: str) -> Optional[AutomationExecution]:
        pass

    @abstractmethod
    async def update_execution(self, execution: AutomationExecution) -> AutomationExecution:
        pass

    @abstractmethod
    async def list_executions(self, automation_id: str,
                              limit: Optional[int] = None) -> List[AutomationExecution]:
        """Executions of a workflow, most recent first."""

class AutomationRegistry(WorkflowStore, ExecutionStore):
    def __init__(self, redis_client: Optional[redis.Redis] = None):
        self.redis_client = redis_client or redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            decode_responses=True
        )

    # Workflow Definitions
    async def create_workflow(self, workflow: AutomationWorkflow) -> AutomationWorkflow:
        """Store a new workflow definition in Redis."""
        try:
            workflow_key = f"automation:def:{workflow.id}"
            if not self.redis_client.set(workflow_key, workflow.model_dump_json(), nx=True):
                raise StoreError(f"Automation workflow {workflow.id} already exists")

            # Index by site, scored by creation time for newest-first listing
            self.redis_client.zadd(
                f"automations:site:{workflow.site_id}",
                {workflow.id: workflow.created_at.timestamp()}
            )

            logger.info(f"Stored automation workflow {workflow.id}")
            return workflow

        except StoreError:
            raise
        except Exception as e:
            logger.error(f"Failed to store automation workflow {workflow.id}: {str(e)}")
            raise StoreError(str(e)) from e

    async def get_workflow(self, workflow_id: str) -> Optional[AutomationWorkflow]:
        """Retrieve workflow definition from Redis."""
        workflow_data = self.redis_client.get(f"automation:def:{workflow_id}")
        if not workflow_data:
            return None
        return AutomationWorkflow.model_validate_json(workflow_data)

    async def update_workflow(self, workflow: AutomationWorkflow) -> AutomationWorkflow:
        try:
            workflow_key = f"automation:def:{workflow.id}"
            if not self.redis_client.set(workflow_key, workflow.model_dump_json(), xx=True):
                raise StoreError(f"Automation workflow {workflow.id} does not exist")
            return workflow

        except StoreError:
            raise
        except Exception as e:
            logger.error(f"Failed to update automation workflow {workflow.id}: {str(e)}")
            raise StoreError(str(e)) from e

    async def list_workflows(self, site_id: str,
                             status: Optional[AutomationStatus] = None) -> List[AutomationWorkflow]:
        workflow_ids = self.redis_client.zrevrange(f"automations:site:{site_id}", 0, -1)
        workflows = []

        for workflow_id in workflow_ids:
            workflow = await self.get_workflow(workflow_id)
            if workflow and (status is None or workflow.status == status):
                workflows.append(workflow)

        return workflows

    # Workflow Executions
    async def create_execution(self, execution: AutomationExecution) -> AutomationExecution:
        """Store a new execution. Fails if the id is already taken."""
        try:
            execution_key = f"automation:exec:{execution.id}"
            if not self.redis_client.set(execution_key, execution.model_dump_json(), nx=True):
                raise StoreError(f"Automation execution {execution.id} already exists")

            score = execution.started_at.timestamp()
            self.redis_client.zadd(f"executions:automation:{execution.automation_id}", {execution.id: score})

            if settings.execution_retention_days > 0:
                self.redis_client.expire(execution_key, settings.execution_retention_days * 24 * 3600)

            return execution

        except StoreError:
            raise
        except Exception as e:
            logger.error(f"Failed to store execution {execution.id}: {str(e)}")
            raise StoreError(str(e)) from e

    async def get_execution(self, execution_id: str) -> Optional[AutomationExecution]:
        execution_data = self.redis_client.get(f"automation:exec:{execution_id}")
        if not execution_data:
            return None
        return AutomationExecution.model_validate_json(execution_data)

    async def update_execution(self, execution: AutomationExecution) -> AutomationExecution:
        """Overwrite an existing execution, keeping its remaining TTL."""
        try:
            execution_key = f"automation:exec:{execution.id}"
            if not self.redis_client.set(execution_key, execution.model_dump_json(), xx=True, keepttl=True):
                raise StoreError(f"Automation execution {execution.id} does not exist")
            return execution

        except StoreError:
            raise
        except Exception as e:
            logger.error(f"Failed to update execution {execution.id}: {str(e)}")
            raise StoreError(str(e)) from e

    async def list_executions(self, automation_id: str,
                              limit: Optional[int] = None) -> List[AutomationExecution]:
        if limit is not None and limit <= 0:
            return []

        index_key = f"executions:automation:{automation_id}"
        end = -1 if limit is None else limit - 1

        executions = []
        expired = []
        for execution_id in self.redis_client.zrevrange(index_key, 0, end):
            execution = await self.get_execution(execution_id)
            if execution:
                executions.append(execution)
            else:
                expired.append(execution_id)

        if expired:
            # Executions dropped by retention still sit in the index
            self.redis_client.zrem(index_key, *expired)

        return executions
