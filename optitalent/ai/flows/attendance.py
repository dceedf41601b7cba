"""Attendance flow: face match between a stored photo and a live capture."""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, Field, field_validator

from optitalent.ai.client import MediaPart
from optitalent.ai.flow import Flow


class FaceVerificationInput(BaseModel):
    profile_image_uri: str
    capture_image_uri: str

    @field_validator("profile_image_uri", "capture_image_uri")
    @classmethod
    def _check_data_uri(cls, value: str) -> str:
        MediaPart.from_data_uri(value)
        return value


class FaceVerificationOutput(BaseModel):
    is_same_person: bool
    confidence: float = Field(..., ge=0, le=1)
    reasoning: str


class FaceVerificationFlow(Flow[FaceVerificationInput, FaceVerificationOutput]):
    name = "verify_face"
    input_model = FaceVerificationInput
    output_model = FaceVerificationOutput
    prompt_template = (
        "You are an expert facial recognition system. Determine if two images show "
        "the same person.\n"
        "The first attached image is the Reference Profile Photo (the trusted, "
        "stored image of the user). The second attached image is the Live Capture "
        "Photo (just captured from the camera).\n\n"
        "Compare key facial features (eyes, nose, mouth, jawline). Account for "
        "minor variations in lighting, angle, and expression.\n"
        "- If you are confident they are the same person, set is_same_person to "
        "true with a high confidence (> 0.8).\n"
        "- If you are confident they are different people, set is_same_person to "
        "false with a low confidence (< 0.2).\n"
        "- If you are uncertain due to poor quality or obstruction, set "
        "is_same_person to false with a medium confidence and clear reasoning."
    )

    def build_prompt(self, data: FaceVerificationInput) -> str:
        return self.prompt_template

    def media(self, data: FaceVerificationInput) -> Sequence[MediaPart]:
        return (
            MediaPart.from_data_uri(data.profile_image_uri),
            MediaPart.from_data_uri(data.capture_image_uri),
        )
