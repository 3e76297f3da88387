# models.py - Automation workflow definitions and execution state
# This file defines the data models for automation workflows, their executions and analytics.

from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Any, Literal
from datetime import datetime
from enum import Enum
import uuid

class AutomationType(str, Enum):
    LEAD_NURTURING = "lead_nurturing"
    LEAD_SCORING = "lead_scoring"
    EMAIL_SEQUENCE = "email_sequence"
    SOCIAL_MEDIA = "social_media"
    CAMPAIGN_TRIGGER = "campaign_trigger"
    CONTENT_DISTRIBUTION = "content_distribution"
    CROSS_CHANNEL = "cross_channel"
    REAL_TIME = "real_time"
    CUSTOM = "custom"

class AutomationStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    ARCHIVED = "archived"

class ExecutionStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

class TriggerType(str, Enum):
    LEAD_CREATED = "lead_created"
    LEAD_SCORED = "lead_scored"
    LEAD_CONVERTED = "lead_converted"
    EMAIL_OPENED = "email_opened"
    EMAIL_CLICKED = "email_clicked"
    SOCIAL_ENGAGEMENT = "social_engagement"
    WEBSITE_VISIT = "website_visit"
    FORM_SUBMITTED = "form_submitted"
    PURCHASE_MADE = "purchase_made"
    CUSTOM = "custom"

class ActionType(str, Enum):
    SEND_EMAIL = "send_email"
    SEND_SMS = "send_sms"
    CREATE_TASK = "create_task"
    UPDATE_LEAD = "update_lead"
    ADD_TO_SEGMENT = "add_to_segment"
    REMOVE_FROM_SEGMENT = "remove_from_segment"
    POST_SOCIAL = "post_social"
    CREATE_CAMPAIGN = "create_campaign"
    SEND_WEBHOOK = "send_webhook"
    CUSTOM = "custom"

class ScheduleType(str, Enum):
    IMMEDIATE = "immediate"
    DELAYED = "delayed"
    SCHEDULED = "scheduled"
    RECURRING = "recurring"

class AnalyticsType(str, Enum):
    CAMPAIGN = "campaign"

class TriggerSchedule(BaseModel):
    """Scheduling metadata. Stored for external schedulers, never enforced here."""
    type: ScheduleType = ScheduleType.IMMEDIATE
    delay: Optional[int] = Field(default=None, ge=0)  # minutes
    schedule: Optional[str] = None  # cron expression

class AutomationTrigger(BaseModel):
    type: TriggerType
    conditions: Dict[str, Any] = Field(default_factory=dict)
    schedule: Optional[TriggerSchedule] = None

class AutomationAction(BaseModel):
    # Kept as a plain string: unknown types must reach the dispatcher and fail there
    type: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    delay: Optional[int] = Field(default=None, ge=0)  # minutes, informational
    conditions: Optional[Dict[str, Any]] = None

class AutomationWorkflow(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    description: Optional[str] = None
    type: AutomationType
    status: AutomationStatus = AutomationStatus.DRAFT
    triggers: List[AutomationTrigger]
    actions: List[AutomationAction]
    conditions: Optional[Dict[str, Any]] = None
    is_active: bool = False
    site_id: str
    created_by: str = "system"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_runnable(self) -> bool:
        return self.is_active and self.status == AutomationStatus.ACTIVE

class AutomationExecution(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    automation_id: str
    site_id: str
    status: ExecutionStatus = ExecutionStatus.RUNNING
    trigger: str
    input: Dict[str, Any] = Field(default_factory=dict)
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def duration_ms(self) -> Optional[float]:
        if self.started_at is None or self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds() * 1000

class PerformanceMetrics(BaseModel):
    emails_sent: int = 0
    sms_sent: int = 0
    tasks_created: int = 0
    leads_converted: int = 0
    social_posts: int = 0
    webhooks_sent: int = 0
    revenue_generated: float = 0.0
    engagement_rate: float = 0.0

class AutomationAnalytics(BaseModel):
    workflow_id: str
    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    average_execution_time: float = 0.0  # milliseconds
    success_rate: float = 0.0  # percent
    last_execution: Optional[datetime] = None
    next_execution: Optional[datetime] = None
    performance_metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)

class AutomationTemplate(BaseModel):
    id: str
    name: str
    description: str
    type: AutomationType
    category: str
    triggers: List[AutomationTrigger]
    actions: List[AutomationAction]
    estimated_duration: int  # days
    success_rate: float
    complexity: Literal["simple", "medium", "complex"]
    best_practices: List[str] = Field(default_factory=list)
    use_cases: List[str] = Field(default_factory=list)

class AnalyticsEvent(BaseModel):
    type: AnalyticsType = AnalyticsType.CAMPAIGN
    metric: str
    value: float = 1
    date: datetime = Field(default_factory=datetime.utcnow)
    site_id: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

class WorkflowMonitor(BaseModel):
    workflow_id: str
    workflow_name: str
    status: AutomationStatus
    is_active: bool
    analytics: AutomationAnalytics
    recent_executions: List[AutomationExecution] = Field(default_factory=list)
    last_execution: Optional[datetime] = None
    next_execution: Optional[datetime] = None

class ExecutionResult(BaseModel):
    execution_id: str
    status: Literal["completed"] = "completed"
    output: Dict[str, Any] = Field(default_factory=dict)

class EventDispatchResult(BaseModel):
    workflow_id: str
    execution_id: Optional[str] = None
    status: Literal["completed", "failed"]
    error: Optional[str] = None

# Requests

class AutomationWorkflowCreateRequest(BaseModel):
    name: str
    description: Optional[str] = None
    type: AutomationType
    triggers: List[AutomationTrigger] = Field(default_factory=list)
    actions: List[AutomationAction] = Field(default_factory=list)
    conditions: Optional[Dict[str, Any]] = None
    is_active: bool = True
    site_id: Optional[str] = None
    created_by: str = "system"

class AutomationStatusUpdateRequest(BaseModel):
    status: AutomationStatus

class AutomationExecuteRequest(BaseModel):
    trigger: str
    input: Dict[str, Any] = Field(default_factory=dict)

class AutomationEventRequest(BaseModel):
    site_id: str
    trigger: TriggerType
    payload: Dict[str, Any] = Field(default_factory=dict)

class AutomationTemplateCreateRequest(BaseModel):
    name: str
    description: str
    type: AutomationType
    category: str
    triggers: List[AutomationTrigger]
    actions: List[AutomationAction]
    estimated_duration: int = 0
    success_rate: float = 0.0
    complexity: Literal["simple", "medium", "complex"] = "simple"
    best_practices: List[str] = Field(default_factory=list)
    use_cases: List[str] = Field(default_factory=list)

class TemplateWorkflowCreateRequest(BaseModel):
    site_id: str
    created_by: str = "system"
    name: Optional[str] = None
    is_active: bool = True
