"""People-management flows: role suggestion, welcome email, reviews, burnout, career path."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from optitalent.ai.flow import Flow


# ── Role suggestion ─────────────────────────────────────────────────

SuggestedRole = Literal["Admin", "HR", "Manager", "Employee", "Recruiter", "Guest"]


class SuggestRoleInput(BaseModel):
    department: str = Field(..., min_length=1)
    job_title: str = Field(..., min_length=1)


class SuggestRoleOutput(BaseModel):
    suggested_role: SuggestedRole


class SuggestRoleFlow(Flow[SuggestRoleInput, SuggestRoleOutput]):
    name = "suggest_role"
    input_model = SuggestRoleInput
    output_model = SuggestRoleOutput
    prompt_template = (
        "You are an expert in HR role assignment.\n"
        "Based on the department and job title provided, suggest the most "
        "appropriate role for the new user.\n\n"
        "Department: {department}\n"
        "Job Title: {job_title}\n\n"
        "Available Roles: Admin, HR, Manager, Employee, Recruiter, Guest.\n"
        "Return only the suggested role."
    )


# ── Welcome email ───────────────────────────────────────────────────

class WelcomeEmailInput(BaseModel):
    first_name: str
    last_name: str
    job_title: str
    department: str
    start_date: str = Field(..., description="YYYY-MM-DD")
    team_members: str
    company_name: str
    company_culture_values: str
    hr_contact_name: str
    hr_contact_email: str


class WelcomeEmailOutput(BaseModel):
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


class WelcomeEmailFlow(Flow[WelcomeEmailInput, WelcomeEmailOutput]):
    name = "welcome_email"
    input_model = WelcomeEmailInput
    output_model = WelcomeEmailOutput
    prompt_template = (
        "You are an expert HR assistant. Your task is to generate a personalized "
        "welcome email for a new hire.\n\n"
        "Here is the new hire's information:\n"
        "- First Name: {first_name}\n"
        "- Last Name: {last_name}\n"
        "- Job Title: {job_title}\n"
        "- Department: {department}\n"
        "- Start Date: {start_date}\n"
        "- Team Members: {team_members}\n\n"
        "Here is the company's information:\n"
        "- Company Name: {company_name}\n"
        "- Company Culture Values: {company_culture_values}\n\n"
        "Here is the HR contact information:\n"
        "- HR Contact Name: {hr_contact_name}\n"
        "- HR Contact Email: {hr_contact_email}\n\n"
        "Please generate a welcome email that includes a warm and welcoming tone, "
        "specific details about the new hire's role and department, information "
        "about the company culture and values, and contact information for the "
        "HR contact person.\n"
        "The subject should be concise and inviting. Ensure the email is "
        "professional and grammatically correct.\n"
        "Return only the subject and body of the email."
    )


# ── Performance review ──────────────────────────────────────────────

PerformanceRating = Literal["Exceeds Expectations", "Meets Expectations", "Needs Improvement"]


class PerformanceReviewInput(BaseModel):
    employee_name: str
    job_title: str
    goals: str
    achievements: str
    areas_for_improvement: str


class PerformanceReviewOutput(BaseModel):
    review_summary: str = Field(..., min_length=1)
    suggested_rating: PerformanceRating


class PerformanceReviewFlow(Flow[PerformanceReviewInput, PerformanceReviewOutput]):
    name = "performance_review"
    input_model = PerformanceReviewInput
    output_model = PerformanceReviewOutput
    prompt_template = (
        "You are an expert HR Manager tasked with writing a fair and balanced "
        "performance review.\n\n"
        "Employee Details:\n"
        "- Name: {employee_name}\n"
        "- Job Title: {job_title}\n\n"
        "Review Information:\n"
        "- Goals: {goals}\n"
        "- Achievements: {achievements}\n"
        "- Areas for Improvement: {areas_for_improvement}\n\n"
        "1. Write a comprehensive and constructive performance review summary. "
        "Start with achievements and then constructively address areas for improvement.\n"
        "2. Suggest an overall rating from: 'Exceeds Expectations', "
        "'Meets Expectations', 'Needs Improvement', based on the balance of "
        "achievements versus areas for improvement."
    )


# ── Burnout risk ────────────────────────────────────────────────────

class BurnoutInput(BaseModel):
    employee_feedback: str
    workload: str
    work_environment: str
    attendance_records: str


class BurnoutOutput(BaseModel):
    burnout_risk_level: Literal["Low", "Medium", "High", "Critical"]
    risk_factors: list[str]
    recommendations: list[str]


class BurnoutFlow(Flow[BurnoutInput, BurnoutOutput]):
    name = "predict_burnout"
    input_model = BurnoutInput
    output_model = BurnoutOutput
    prompt_template = (
        "You are an HR expert specializing in employee well-being and burnout prevention.\n"
        "Based on the information provided, analyze the employee's burnout risk "
        "and provide recommendations for managers.\n\n"
        "Employee Feedback: {employee_feedback}\n"
        "Workload: {workload}\n"
        "Work Environment: {work_environment}\n"
        "Attendance Records: {attendance_records}\n\n"
        "Consider workload, work-life balance, stress levels and overall job "
        "satisfaction. Determine the burnout risk level (Low, Medium, High, "
        "Critical), list the key contributing factors, and give specific, "
        "actionable recommendations for managers."
    )


# ── Career path ─────────────────────────────────────────────────────

class CareerPathInput(BaseModel):
    current_role: str
    skills: list[str] = Field(..., min_length=1)
    performance_summary: str


class CareerPathStep(BaseModel):
    timespan: str
    role: str
    rationale: str
    skills_to_develop: list[str]


class CareerPathOutput(BaseModel):
    path: list[CareerPathStep] = Field(..., min_length=1)


class CareerPathFlow(Flow[CareerPathInput, CareerPathOutput]):
    name = "predict_career_path"
    input_model = CareerPathInput
    output_model = CareerPathOutput
    prompt_template = (
        "You are an expert HR strategist and career coach for a BPO/tech company. "
        "Generate a potential 5-7 year career path for an employee based on their profile.\n\n"
        "Employee Profile:\n"
        "- Current Role: {current_role}\n"
        "- Key Skills: {skills}\n"
        "- Performance Summary: {performance_summary}\n\n"
        "Create a logical and aspirational career path of 2-3 steps. For each "
        "step give a realistic timespan, the next role, a brief rationale and "
        "the skills to develop. The path should be realistic for a "
        "high-performing individual in a BPO or tech environment."
    )

    def build_prompt(self, data: CareerPathInput) -> str:
        return self.prompt_template.format(
            current_role=data.current_role,
            skills=", ".join(data.skills),
            performance_summary=data.performance_summary,
        )
