# templates.py - Pre-built automation workflow shapes
# Static catalog used as a starting point when creating workflows.

import uuid
from typing import List, Optional

from .models import (
    AutomationTemplate, AutomationTemplateCreateRequest, AutomationType,
    AutomationTrigger, AutomationAction
)

AUTOMATION_TEMPLATES: List[AutomationTemplate] = [
    AutomationTemplate(
        id="welcome-series",
        name="Welcome Email Series",
        description="Automated welcome email sequence for new leads",
        type=AutomationType.LEAD_NURTURING,
        category="Lead Nurturing",
        triggers=[AutomationTrigger(type="lead_created", conditions={"source": "website"})],
        actions=[
            AutomationAction(type="send_email", parameters={"template": "welcome-1"}, delay=0),
            AutomationAction(type="send_email", parameters={"template": "welcome-2"}, delay=1440),
            AutomationAction(type="send_email", parameters={"template": "welcome-3"}, delay=10080),
        ],
        estimated_duration=7,
        success_rate=85,
        complexity="simple",
        best_practices=[
            "Send first email immediately",
            "Space emails 24-48 hours apart",
            "Include clear call-to-action",
            "Personalize content based on lead source",
        ],
        use_cases=["New website signups", "Product trial starts", "Newsletter subscriptions"],
    ),
    AutomationTemplate(
        id="lead-scoring",
        name="Lead Scoring Automation",
        description="Automated lead scoring and qualification workflow",
        type=AutomationType.LEAD_SCORING,
        category="Lead Management",
        triggers=[
            AutomationTrigger(type="lead_created"),
            AutomationTrigger(type="email_opened"),
            AutomationTrigger(type="website_visit"),
        ],
        actions=[
            AutomationAction(
                type="update_lead",
                parameters={"field": "score", "operation": "increment", "value": 10},
            ),
            AutomationAction(
                type="add_to_segment",
                parameters={"segmentId": "qualified-leads"},
                conditions={"score": {"greater_than": 49}},
            ),
        ],
        estimated_duration=30,
        success_rate=90,
        complexity="medium",
        best_practices=[
            "Score based on engagement level",
            "Update scores in real-time",
            "Set clear qualification thresholds",
            "Review and adjust scoring criteria regularly",
        ],
        use_cases=["Lead qualification", "Sales team prioritization", "Campaign targeting"],
    ),
    AutomationTemplate(
        id="abandoned-cart",
        name="Abandoned Cart Recovery",
        description="Recover abandoned shopping carts with targeted emails",
        type=AutomationType.EMAIL_SEQUENCE,
        category="E-commerce",
        triggers=[AutomationTrigger(type="purchase_made", conditions={"status": "abandoned"})],
        actions=[
            AutomationAction(type="send_email", parameters={"template": "cart-reminder-1"}, delay=60),
            AutomationAction(type="send_email", parameters={"template": "cart-reminder-2"}, delay=1440),
            AutomationAction(type="send_email", parameters={"template": "cart-reminder-3"}, delay=4320),
        ],
        estimated_duration=3,
        success_rate=75,
        complexity="simple",
        best_practices=[
            "Send first reminder within 1 hour",
            "Include product images and prices",
            "Offer incentives for completion",
            "Limit to 3-4 reminder emails",
        ],
        use_cases=["E-commerce stores", "Online retailers", "Digital product sales"],
    ),
    AutomationTemplate(
        id="social-engagement",
        name="Social Media Engagement",
        description="Automated social media posting and engagement tracking",
        type=AutomationType.SOCIAL_MEDIA,
        category="Social Media",
        triggers=[
            AutomationTrigger(type="social_engagement", conditions={"engagements": {"greater_than": 100}}),
        ],
        actions=[
            AutomationAction(
                type="post_social",
                parameters={"platform": "twitter", "content": "Thank you for engaging!"},
            ),
            AutomationAction(
                type="update_lead",
                parameters={"field": "social_engagement_score", "operation": "set", "value": "high"},
            ),
        ],
        estimated_duration=1,
        success_rate=80,
        complexity="medium",
        best_practices=[
            "Respond quickly to engagement",
            "Personalize responses",
            "Track engagement metrics",
            "Maintain brand voice",
        ],
        use_cases=["Social media management", "Customer service", "Brand engagement"],
    ),
]

def get_automation_templates() -> List[AutomationTemplate]:
    return [template.model_copy(deep=True) for template in AUTOMATION_TEMPLATES]

def find_template(template_id: str) -> Optional[AutomationTemplate]:
    for template in AUTOMATION_TEMPLATES:
        if template.id == template_id:
            return template.model_copy(deep=True)
    return None

def create_automation_template(request: AutomationTemplateCreateRequest) -> AutomationTemplate:
    """Build a template from a request. Nothing is persisted."""
    return AutomationTemplate(id=f"template-{uuid.uuid4().hex}", **request.model_dump())
