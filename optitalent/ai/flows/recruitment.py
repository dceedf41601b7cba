"""Recruitment flows: resume scoring, resume parsing, interview questions."""

from __future__ import annotations

from typing import Optional, Sequence

from pydantic import BaseModel, Field, field_validator

from optitalent.ai.client import MediaPart
from optitalent.ai.flow import Flow


# ── Score (plain text resume) ───────────────────────────────────────

class ScoreResumeInput(BaseModel):
    jd: str = Field(..., min_length=1)
    resume: str = Field(..., min_length=1)


class ScoreResumeOutput(BaseModel):
    score: float = Field(..., ge=0, le=100)
    justification: str


class ScoreResumeFlow(Flow[ScoreResumeInput, ScoreResumeOutput]):
    name = "score_resume"
    input_model = ScoreResumeInput
    output_model = ScoreResumeOutput
    prompt_template = (
        "You are an expert HR recruiter.\n"
        "You will be provided a job description and a resume. Score the resume "
        "from 0-100 based on how well it matches the job description, and "
        "provide a justification for the score.\n\n"
        "Job Description: {jd}\n\n"
        "Resume: {resume}"
    )


# ── Score and parse (resume file as data URI) ───────────────────────

class WorkExperience(BaseModel):
    company: str
    title: str
    dates: str


class Education(BaseModel):
    institution: str
    degree: str
    year: str


class Project(BaseModel):
    name: str
    description: str
    url: Optional[str] = None


class ParsedResume(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    links: list[str] = Field(default_factory=list)
    summary: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    work_experience: list[WorkExperience] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    hobbies: list[str] = Field(default_factory=list)


class ScoreAndParseInput(BaseModel):
    job_description: str = Field(..., min_length=1)
    resume_data_uri: str

    @field_validator("resume_data_uri")
    @classmethod
    def _check_data_uri(cls, value: str) -> str:
        MediaPart.from_data_uri(value)
        return value


class ScoreAndParseOutput(BaseModel):
    score: float = Field(..., ge=0, le=100)
    justification: str
    parsed_data: ParsedResume


class ScoreAndParseFlow(Flow[ScoreAndParseInput, ScoreAndParseOutput]):
    name = "score_and_parse_resume"
    input_model = ScoreAndParseInput
    output_model = ScoreAndParseOutput
    prompt_template = (
        "You are an expert HR recruiter with experience in parsing resumes and "
        "matching candidates to job descriptions.\n"
        "You will be provided with a job description and a resume (attached). Your tasks are:\n"
        "1. Parse the resume to extract structured information. Extract all "
        "fields defined in the output schema.\n"
        "2. Score the resume from 0 to 100 based on how well the candidate's "
        "skills and experience match the job description.\n"
        "3. Provide a concise justification for the score.\n\n"
        "Job Description:\n```\n{job_description}\n```\n\n"
        "If a field is not present in the resume, return an empty string or array for it."
    )

    def build_prompt(self, data: ScoreAndParseInput) -> str:
        return self.prompt_template.format(job_description=data.job_description)

    def media(self, data: ScoreAndParseInput) -> Sequence[MediaPart]:
        return (MediaPart.from_data_uri(data.resume_data_uri),)


# ── Interview questions ─────────────────────────────────────────────

class InterviewQuestionsInput(BaseModel):
    role: str = Field(..., min_length=1)


class InterviewQuestionsOutput(BaseModel):
    questions: list[str] = Field(..., min_length=1)


class InterviewQuestionsFlow(Flow[InterviewQuestionsInput, InterviewQuestionsOutput]):
    name = "interview_questions"
    input_model = InterviewQuestionsInput
    output_model = InterviewQuestionsOutput
    prompt_template = (
        "You are an expert HR assistant. Suggest a list of interview questions "
        "for the role: {role}.\n"
        "Return only the questions, with no introduction or conclusion."
    )
