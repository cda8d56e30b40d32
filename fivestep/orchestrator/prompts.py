"""Learner-facing lines emitted by the session controller."""

WELCOME = (
    "**FiveStep listening course ready.** 🟢\n"
    "Please paste the English text you want to master today."
)

GIST_QUESTION = (
    "🎧 Please listen to the full text above. Do not read it in detail yet.\n\n"
    "Question: After listening, tell me in one sentence: What is the main idea?"
)

UNDERSTAND_QUESTION = "Do you understand this sentence? (Yes / Hint / Explain)"
UNDERSTAND_REPROMPT = "Please reply with 'Yes' to continue, 'Hint', or 'Explain'."
HINT_PREFIX = "💡 Hint: "
EXPLANATION_PREFIX = "📖 Explanation: "

SHADOWING_INSTRUCTION = "🗣️ Listen, then Speak. Repeat 3 times. Type '/next' when done."
SHADOWING_REPROMPT = (
    "Practice speaking the sentence above. "
    "Type '/next' when you are satisfied with your pronunciation."
)

SELF_EVALUATION_REQUEST = (
    "Self-Evaluation: On a scale of 1-10, how close was your intonation? "
    "Type your reflection."
)
REFLECTION_ACK = "Great reflection. Moving to next sentence."

SUMMARY_REQUEST = (
    "📝 Step 5 Part A: Please summarize the entire story in English in your own "
    "words (without looking at the original text)."
)
PERSONALIZE_TEMPLATE = (
    "Step 5 Part B: Personalize.\n\n"
    "Grammar Focus: **{focus}**\n\n"
    "Task: Use this structure to describe a fact about YOUR own life, family, or studies."
)
COMPLETION = (
    "🎉 Excellent work! You have completed the five-step cycle for this text. "
    "Paste a new text to start again."
)

ERROR_PREFIX = "⚠️ Error: "

# Audio entry labels
LABEL_FULL_STORY = "Full Story"
LABEL_TEACHER = "Teacher"
LABEL_SHADOWING = "Shadowing"
LABEL_MODEL_AUDIO = "Model Audio"
LABEL_LEARNER = "You"


def divider(title: str) -> str:
    return f"--- {title} ---"


def chunk_heading(kind: str, index: int, total: int, chunk: str) -> str:
    """e.g. 'Sentence 2/5:' followed by the quoted chunk."""
    return f'{kind} {index + 1}/{total}:\n\n**"{chunk}"**'
