import re
from typing import List, Optional, Union

from app.schemas.interview import Company, Difficulty, Subject

COMPANY_NAMES = [
    'Google', 'Microsoft', 'Amazon', 'Apple', 'Meta', 'Netflix',
    'TCS', 'Infosys', 'Wipro', 'HCL', 'Cognizant', 'IBM', 'Oracle', 'Accenture'
]

EXAM_SUBJECTS = {
    Subject.GATE.value: 'GATE (Graduate Aptitude Test in Engineering)',
    Subject.UPSC.value: 'UPSC (Union Public Service Commission)',
}

QUESTION_PERSONAS = {
    Difficulty.BEGINNER: "You are a friendly and encouraging interviewer for a beginner candidate. Your goal is to test fundamental knowledge in a non-intimidating way.",
    Difficulty.INTERMEDIATE: "You are a professional interviewer for an intermediate-level candidate. Your goal is to assess their practical knowledge and problem-solving skills.",
    Difficulty.ADVANCED: "You are a senior-level interviewer assessing an expert candidate. Your goal is to probe the depths of their knowledge.",
}

HR_PERSONAS = {
    Difficulty.BEGINNER: "You are a friendly HR interviewer focusing on soft skills and motivations. Keep the tone supportive and ask one behavioral question.",
    Difficulty.INTERMEDIATE: "You are a professional HR interviewer. Ask one behavioral or situational question to understand the candidate's experiences, motivations, and values.",
    Difficulty.ADVANCED: "You are a seasoned HR/leadership interviewer. Ask one high-level behavioral question probing leadership, conflict resolution, decision-making, or vision.",
}

EVALUATION_CRITERIA = {
    Difficulty.BEGINNER: "Evaluate the answer from the perspective of a beginner. Be encouraging and focus on whether the core concept is understood. Minor inaccuracies can be gently corrected. The suggested answer should be simple, clear, and foundational.",
    Difficulty.INTERMEDIATE: "Evaluate the answer for correctness, clarity, and completeness. The candidate should demonstrate a solid grasp of the topic. The suggested answer should be a well-structured, comprehensive response that a competent professional would give.",
    Difficulty.ADVANCED: "Evaluate the answer critically, as you would for a senior or staff-level candidate. Assess the depth of knowledge, consideration of edge cases, performance implications, and trade-offs. The suggested answer should be expert-level, detailed, and showcase best practices.",
}

HR_PATTERN = re.compile(r'hr', re.IGNORECASE)


def _subject_text(subject: Union[Subject, Company, str]) -> str:
    return subject.value if isinstance(subject, (Subject, Company)) else str(subject)


def is_hr_interview(subject: Union[Subject, str]) -> bool:
    return bool(HR_PATTERN.search(_subject_text(subject)))


def is_company_interview(subject: Union[Company, str]) -> bool:
    text = _subject_text(subject)
    return any(company in text for company in COMPANY_NAMES)


def generate_question_prompt(
    subject: Union[Subject, Company, str],
    difficulty: Difficulty,
    previous_questions: Optional[List[str]] = None
) -> str:
    """
    Generate the prompt asking the model for exactly one interview question.

    Args:
        subject: Subject, company name or free-form topic.
        difficulty: Interview difficulty; selects the interviewer persona.
        previous_questions: Questions already asked in this session.

    Returns:
        The formatted prompt string.
    """
    subject = _subject_text(subject)
    difficulty = Difficulty(difficulty)
    hr_interview = is_hr_interview(subject)
    exam_context = ""
    avoid_repetition_context = ""

    if previous_questions:
        numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(previous_questions, start=1))
        avoid_repetition_context = (
            "\n\nIMPORTANT: Do NOT ask any of these previously asked questions:\n"
            f"{numbered}\n\n"
            "Ask a completely different and new question."
        )

    if is_company_interview(subject):
        exam_context = (
            f"You are conducting a technical interview for {subject}. Ask questions tailored to "
            f"{subject}'s typical interview style, focus areas, and coding standards. "
        )
    elif subject in EXAM_SUBJECTS:
        exam_context = (
            f"This is a practice session for {EXAM_SUBJECTS[subject]}. Ask questions in the style and format "
            "of the actual exam. For GATE: focus on Engineering concepts in a technical depth suitable for the "
            "difficulty level. For UPSC: focus on General Knowledge, History, Geography, or Civics. "
        )

    if hr_interview:
        exam_context += (
            'This is an HR/behavioral interview. Ask a single behavioral question such as "Tell me about yourself", '
            '"Describe a time you resolved a conflict", "What are your strengths and weaknesses", '
            '"Why do you want this role", or "Describe a challenge you faced". Avoid technical or coding questions. '
        )

    persona = (HR_PERSONAS if hr_interview else QUESTION_PERSONAS)[difficulty]

    return (
        f"{persona} {exam_context}The topic is '{subject}'.\n\n"
        "IMPORTANT: Ask EXACTLY ONE interview question only. Do not ask multiple questions, sub-questions, "
        "or follow-up questions. Do not include any numbering, bullets, introductions, or additional commentary.\n\n"
        "CRITICAL: Return ONLY a JSON object with a single property named \"question\". "
        "Example: {\"question\": \"What is ...?\"}. Do not include any other text or commentary."
        f"{avoid_repetition_context}"
    )


def generate_evaluation_prompt(
    question: str,
    answer: str,
    subject: Union[Subject, str],
    difficulty: Difficulty,
    with_visual_analysis: bool = False
) -> str:
    """Generate the prompt for scoring a candidate's answer."""
    subject = _subject_text(subject)
    difficulty = Difficulty(difficulty)

    exam_context = ""
    if subject in EXAM_SUBJECTS:
        exam_context = (
            f"Note: This is a {subject} practice question. Evaluate answers as an expert in the relevant "
            "domain would for that exam. "
        )

    visual_instruction = ""
    visual_field = ""
    if with_visual_analysis:
        visual_instruction = (
            "Additionally, analyze the candidate's facial expression from the provided image. Comment on their "
            "confidence, engagement, and professionalism. Is their expression appropriate for a professional "
            "interview setting? Provide this analysis in the 'nonVerbalFeedback' field."
        )
        visual_field = "4. A 'nonVerbalFeedback' field with your analysis of the candidate's image.\n"

    return (
        f"You are an AI Interview Coach for the subject: {subject}. "
        f"The interview difficulty is set to {difficulty.value}.\n"
        "Your task is to evaluate a candidate's answer to a specific interview question.\n"
        f"{exam_context}{EVALUATION_CRITERIA[difficulty]}\n"
        f"{visual_instruction}\n\n"
        f"Original Question: \"{question}\"\n"
        f"Candidate's Answer: \"{answer}\"\n\n"
        "Please provide a detailed evaluation in JSON format. The JSON should include:\n"
        "1. A 'score' from 0 to 10.\n"
        "2. Constructive 'feedback' explaining the score.\n"
        "3. A 'suggestedAnswer' that serves as a model response.\n"
        f"{visual_field}"
    )


def generate_coach_prompt(question: str, subject: Union[Subject, str], difficulty: Difficulty) -> str:
    """Generate the prompt for answering a candidate's own question."""
    return (
        f"You are an interview coach. Subject focus: {_subject_text(subject)}. "
        f"Difficulty: {Difficulty(difficulty).value}. Answer the user's question directly and concisely "
        f"(under 150 words). Do not ask follow-up questions. User question: \"{question}\""
    )
