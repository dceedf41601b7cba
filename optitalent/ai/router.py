"""AI tools router — stateless generative helpers exposed to the UI.

Every endpoint forwards one validated request to a single flow and returns
the flow's schema-validated reply unmodified. Failures surface as 502.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.ai import flows
from optitalent.ai.flows.chatbot import ChatbotInput
from optitalent.ai.flows.people import (
    BurnoutInput,
    CareerPathInput,
    PerformanceReviewInput,
    WelcomeEmailInput,
)
from optitalent.ai.flows.recruitment import ScoreResumeInput
from optitalent.auth.dependencies import get_current_user, get_tenant_id, require_role
from optitalent.auth.models import User
from optitalent.common.constants import UserRole
from optitalent.common.rate_limit import limiter
from optitalent.config import settings
from optitalent.database import get_db
from optitalent.tenants.models import Tenant

router = APIRouter(prefix="", tags=["ai"])


class WelcomeEmailRequest(BaseModel):
    """Company and HR contact default to the tenant name and configured HR contact."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    job_title: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    start_date: str = Field(..., description="YYYY-MM-DD")
    team_members: str = ""
    company_culture_values: str = ""
    company_name: Optional[str] = None
    hr_contact_name: Optional[str] = None
    hr_contact_email: Optional[str] = None


@router.post("/chatbot")
@limiter.limit(settings.AI_RATE_LIMIT)
async def chatbot(
    request: Request,
    body: ChatbotInput,
    user: User = Depends(get_current_user),
):
    result = await flows.hr_chatbot.run(body)
    return {"data": result.model_dump()}


@router.post("/welcome-email")
@limiter.limit(settings.AI_RATE_LIMIT)
async def welcome_email(
    request: Request,
    body: WelcomeEmailRequest,
    user: User = Depends(require_role(UserRole.hr)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    company_name = body.company_name
    if not company_name:
        tenant = await db.get(Tenant, tenant_id)
        company_name = tenant.name if tenant else "OptiTalent"
    data = WelcomeEmailInput(
        **body.model_dump(exclude={"company_name", "hr_contact_name", "hr_contact_email"}),
        company_name=company_name,
        hr_contact_name=body.hr_contact_name or settings.HR_CONTACT_NAME,
        hr_contact_email=body.hr_contact_email or settings.HR_CONTACT_EMAIL,
    )
    result = await flows.welcome_email.run(data)
    return {"data": result.model_dump()}


@router.post("/performance-review")
@limiter.limit(settings.AI_RATE_LIMIT)
async def performance_review(
    request: Request,
    body: PerformanceReviewInput,
    user: User = Depends(require_role(UserRole.team_leader)),
):
    result = await flows.performance_review.run(body)
    return {"data": result.model_dump()}


@router.post("/burnout")
@limiter.limit(settings.AI_RATE_LIMIT)
async def predict_burnout(
    request: Request,
    body: BurnoutInput,
    user: User = Depends(require_role(UserRole.manager, UserRole.operations_manager)),
):
    result = await flows.predict_burnout.run(body)
    return {"data": result.model_dump()}


@router.post("/career-path")
@limiter.limit(settings.AI_RATE_LIMIT)
async def predict_career_path(
    request: Request,
    body: CareerPathInput,
    user: User = Depends(get_current_user),
):
    result = await flows.predict_career_path.run(body)
    return {"data": result.model_dump()}


@router.post("/score-resume")
@limiter.limit(settings.AI_RATE_LIMIT)
async def score_resume(
    request: Request,
    body: ScoreResumeInput,
    user: User = Depends(require_role(UserRole.recruiter)),
):
    """Ad-hoc scoring of pasted resume text; stored applicants use /recruitment."""
    result = await flows.score_resume.run(body)
    return {"data": result.model_dump()}
