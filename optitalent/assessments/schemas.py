"""Assessment request / response schemas."""


import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from optitalent.common.constants import PassingScoreType, QuestionType


# ── Assessment definition ───────────────────────────────────────────

class Question(BaseModel):
    id: str = Field(..., min_length=1)
    type: QuestionType
    question_text: str = ""
    options: Optional[list[str]] = None
    correct_answer: Optional[str] = None
    typing_prompt: Optional[str] = None

    @model_validator(mode="after")
    def _check_kind(self):
        if self.type is QuestionType.mcq and (not self.options or self.correct_answer is None):
            raise ValueError("MCQ questions need options and a correct_answer")
        if self.type is QuestionType.typing and not self.typing_prompt:
            raise ValueError("Typing questions need a typing_prompt")
        return self


class Section(BaseModel):
    id: str = Field(..., min_length=1)
    section_type: QuestionType
    title: str
    time_limit: int = Field(..., gt=0, description="Minutes")
    questions: list[Question] = Field(default_factory=list)


class AssessmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    process_type: Optional[str] = Field(None, max_length=100)
    role: Optional[str] = Field(None, max_length=100)
    passing_score: int = Field(..., ge=0)
    passing_score_type: PassingScoreType = PassingScoreType.percent
    max_attempts: int = Field(1, ge=1)
    duration_minutes: Optional[int] = Field(None, gt=0)
    sections: list[Section] = Field(..., min_length=1)


class AssessmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    process_type: Optional[str] = None
    role: Optional[str] = None
    passing_score: int
    passing_score_type: PassingScoreType
    max_attempts: int
    duration_minutes: Optional[int] = None
    created_at: datetime


class AssessmentDetail(AssessmentOut):
    sections: list[Section]


# ── Submissions ─────────────────────────────────────────────────────

class McqSubmission(BaseModel):
    """Answers keyed by question id."""

    answers: dict[str, str]


class WpmSampleIn(BaseModel):
    label: str
    wpm: int = Field(..., ge=0)


class TypingSubmission(BaseModel):
    typed_text: str
    elapsed_seconds: float = Field(..., ge=0)
    wpm_samples: Optional[list[WpmSampleIn]] = None


class TypingResultOut(BaseModel):
    wpm: int
    accuracy: int
    passed: bool


class AttemptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    assessment_id: uuid.UUID
    employee_id: uuid.UUID
    attempt_number: int
    score: Optional[int] = None
    wpm: Optional[int] = None
    accuracy: Optional[int] = None
    passed: bool
    wpm_samples: Optional[list[WpmSampleIn]] = None
    created_at: datetime
