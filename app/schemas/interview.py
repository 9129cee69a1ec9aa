from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

# --- Interview Setup ---

class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class Subject(str, Enum):
    # Engineering
    JAVA = "Java"
    PYTHON = "Python"
    DSA = "Data Structures and Algorithms"
    JAVASCRIPT = "JavaScript"
    TYPESCRIPT = "TypeScript"
    CPP = "C++"
    CSHARP = "C#"
    GO = "Go"
    RUST = "Rust"
    KOTLIN = "Kotlin"
    SWIFT = "Swift"
    PHP = "PHP"
    RUBY = "Ruby"

    # Professional Skills
    HR = "HR Interview"
    ENGLISH = "English Speaking Practice"

    # Competitive Exams
    GATE = "GATE Exam"
    UPSC = "UPSC Exam"


class Company(str, Enum):
    # Tech Companies
    GOOGLE = "Google"
    MICROSOFT = "Microsoft"
    AMAZON = "Amazon"
    APPLE = "Apple"
    META = "Meta"
    NETFLIX = "Netflix"

    # Indian IT Companies
    TCS = "TCS (Tata Consultancy Services)"
    INFOSYS = "Infosys"
    WIPRO = "Wipro"
    HCL = "HCL Technologies"
    COGNIZANT = "Cognizant"

    # Other Companies
    IBM = "IBM"
    ORACLE = "Oracle"
    ACCENTURE = "Accenture"


class CamelModel(BaseModel):
    """Accepts both snake_case field names and their camelCase aliases."""
    model_config = ConfigDict(populate_by_name=True)

# --- LLM Response Models ---

class GeneratedQuestion(BaseModel):
    """Schema the model is asked to fill when generating a question."""
    question: str = Field(
        ...,
        description="A single interview question. No multiple parts, no follow-ups, no numbering."
    )


class Feedback(CamelModel):
    """Evaluation of a candidate's answer."""
    score: int = Field(
        ...,
        ge=0,
        le=10,
        description="A score from 0 to 10 for the user's answer. 0 is very poor, 10 is excellent."
    )
    feedback: str = Field(
        ...,
        description="Constructive feedback on the user's answer. Highlight good points and areas for improvement. Be encouraging."
    )
    suggested_answer: str = Field(
        ...,
        alias="suggestedAnswer",
        description="An ideal, well-structured answer to the original question."
    )
    non_verbal_feedback: Optional[str] = Field(
        default=None,
        alias="nonVerbalFeedback",
        description="Feedback on the user's non-verbal communication (e.g., facial expression, confidence, engagement) based on their image."
    )
    error: bool = Field(default=False, description="True when the feedback is a fallback after a failure.")

# --- API Request/Response Models ---

class QuestionRequest(CamelModel):
    subject: str = Field(..., min_length=1, description="Subject, company or free-form topic.")
    difficulty: Difficulty
    previous_questions: list[str] = Field(default_factory=list, alias="previousQuestions")


class QuestionResponse(BaseModel):
    question: str
    fallback: bool = Field(default=False, description="True when the question is a placeholder or retry message.")


class EvaluationRequest(CamelModel):
    question: str = Field(..., min_length=1)
    answer: str
    subject: str = Field(..., min_length=1)
    difficulty: Difficulty
    image: Optional[str] = Field(default=None, description="Webcam snapshot as a data URL.")


class CoachRequest(CamelModel):
    question: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    difficulty: Difficulty


class CoachResponse(BaseModel):
    answer: str
