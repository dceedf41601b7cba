"""Registered AI flows, one instance per feature."""

from optitalent.ai.flows.attendance import FaceVerificationFlow
from optitalent.ai.flows.chatbot import ChatbotFlow
from optitalent.ai.flows.helpdesk import CategorizeTicketFlow
from optitalent.ai.flows.payroll import PayrollAuditFlow
from optitalent.ai.flows.people import (
    BurnoutFlow,
    CareerPathFlow,
    PerformanceReviewFlow,
    SuggestRoleFlow,
    WelcomeEmailFlow,
)
from optitalent.ai.flows.recruitment import (
    InterviewQuestionsFlow,
    ScoreAndParseFlow,
    ScoreResumeFlow,
)

suggest_role = SuggestRoleFlow()
welcome_email = WelcomeEmailFlow()
performance_review = PerformanceReviewFlow()
predict_burnout = BurnoutFlow()
predict_career_path = CareerPathFlow()
score_resume = ScoreResumeFlow()
score_and_parse_resume = ScoreAndParseFlow()
interview_questions = InterviewQuestionsFlow()
categorize_ticket = CategorizeTicketFlow()
detect_payroll_errors = PayrollAuditFlow()
verify_face = FaceVerificationFlow()
hr_chatbot = ChatbotFlow()

FLOWS = {
    flow.name: flow
    for flow in (
        suggest_role,
        welcome_email,
        performance_review,
        predict_burnout,
        predict_career_path,
        score_resume,
        score_and_parse_resume,
        interview_questions,
        categorize_ticket,
        detect_payroll_errors,
        verify_face,
        hr_chatbot,
    )
}

__all__ = ["FLOWS"] + [name for name in FLOWS]
