"""Payroll flow: pre-processing error detection."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from optitalent.ai.flow import Flow


class PayrollAuditInput(BaseModel):
    payroll_data: str = Field(..., min_length=1, description="Payroll run as JSON text")
    historical_data: Optional[str] = Field(None, description="Previous run as JSON text")


class PayrollIssue(BaseModel):
    field: str
    description: str
    severity: Literal["high", "medium", "low"]


class PayrollAuditOutput(BaseModel):
    errors: list[PayrollIssue]
    summary: str


class PayrollAuditFlow(Flow[PayrollAuditInput, PayrollAuditOutput]):
    name = "detect_payroll_errors"
    input_model = PayrollAuditInput
    output_model = PayrollAuditOutput
    prompt_template = (
        "You are an expert payroll auditor. Review the payroll data and identify "
        "any potential errors or discrepancies before the payroll is processed.\n\n"
        "Payroll data (JSON):\n```json\n{payroll_data}\n```\n"
    )
    historical_template = (
        "\nHistorical payroll data for comparison (JSON). Use it to help detect anomalies:\n"
        "```json\n{historical_data}\n```\n"
    )
    closing = (
        "\nIdentify any potential errors and explain why each one is an error. "
        "Be specific and provide context. Classify the severity of each error as "
        "high, medium, or low. Return a list of errors and a summary."
    )

    def build_prompt(self, data: PayrollAuditInput) -> str:
        prompt = self.prompt_template.format(payroll_data=data.payroll_data)
        if data.historical_data:
            prompt += self.historical_template.format(historical_data=data.historical_data)
        return prompt + self.closing
