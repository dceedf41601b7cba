"""Helpdesk flow: ticket categorisation and prioritisation."""

from __future__ import annotations

from pydantic import BaseModel, Field

from optitalent.ai.flow import Flow
from optitalent.common.constants import TicketCategory, TicketPriority


class CategorizeTicketInput(BaseModel):
    subject: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class CategorizeTicketOutput(BaseModel):
    category: TicketCategory
    priority: TicketPriority


class CategorizeTicketFlow(Flow[CategorizeTicketInput, CategorizeTicketOutput]):
    name = "categorize_ticket"
    input_model = CategorizeTicketInput
    output_model = CategorizeTicketOutput
    prompt_template = (
        "You are an expert support ticket analyst. Categorize and prioritize the "
        "incoming support ticket based on its subject and description.\n\n"
        "Subject: {subject}\n"
        "Description: {description}\n\n"
        "Available Categories:\n"
        "- IT Support (software issues, hardware problems, network access)\n"
        "- HR Query (benefits questions, policy clarification, leave requests)\n"
        "- Payroll Issue (payslip errors, salary questions)\n"
        "- Facilities (office maintenance, equipment requests)\n"
        "- General Inquiry (other miscellaneous questions)\n\n"
        "Available Priorities:\n"
        "- High (system outage, unable to work, security issue, payroll error)\n"
        "- Medium (software bug, access request, important but not blocking)\n"
        "- Low (general question, minor issue)\n\n"
        "Return only the category and priority."
    )
