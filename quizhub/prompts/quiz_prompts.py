
QUIZ_GENERATION_TEMPLATE = """Generate {count} {difficulty} level {quiz_type} quiz questions on the topic "{topic}"."""

DESCRIPTION_TEMPLATE = """
Description: {description}"""

TRUE_FALSE_FORMAT = """
Each question should have:
- 1 question text
- 2 options: ["True", "False"]
- 1 correct answer ("True" or "False")
- 1 short explanation

Format the output in JSON like this:
[
  {
    "questionText": "...",
    "options": ["True", "False"],
    "correctAnswer": "...",
    "explanation": "..."
  },
  ...
]
"""

MULTIPLE_CHOICE_FORMAT = """
Each question should have:
- 1 question text
- 4 options
- 1 correct answer
- 1 short explanation

Format the output in JSON like this:
[
  {
    "questionText": "...",
    "options": ["...", "...", "...", "..."],
    "correctAnswer": "...",
    "explanation": "..."
  },
  ...
]
"""

MIXED_FORMAT = """
Generate a mix of both multiple-choice and true/false questions.
For multiple-choice: 4 options, for true/false: 2 options ["True", "False"].
Each question should have:
- 1 question text
- options (either 4 for multiple-choice or 2 for true/false)
- 1 correct answer
- 1 short explanation

Format the output in JSON like this:
[
  {
    "questionText": "...",
    "options": ["...", "...", "...", "..."],
    "correctAnswer": "...",
    "explanation": "..."
  },
  {
    "questionText": "...",
    "options": ["True", "False"],
    "correctAnswer": "...",
    "explanation": "..."
  },
  ...
]
"""

FORMAT_BY_QUIZ_TYPE = {
    "true-false": TRUE_FALSE_FORMAT,
    "multiple-choice": MULTIPLE_CHOICE_FORMAT,
    "mixed": MIXED_FORMAT,
}

SYSTEM_MESSAGE = (
    "You are an expert quiz author. Reply only with the JSON array of questions, "
    "without any commentary."
)


def build_quiz_prompt(topic: str, description: str, difficulty: str, count: int, quiz_type: str) -> str:
    """
    Build the generation instruction for a quiz.

    The text names the topic (and description when given), the per-question
    shape rules for the quiz type and a literal example of the JSON array the
    reply has to contain.
    """
    prompt = QUIZ_GENERATION_TEMPLATE.format(
        count=count, difficulty=difficulty, quiz_type=quiz_type, topic=topic
    )
    if description:
        prompt += DESCRIPTION_TEMPLATE.format(description=description)
    prompt += FORMAT_BY_QUIZ_TYPE.get(quiz_type, "")
    return prompt
