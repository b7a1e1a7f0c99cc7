"""
Prompt fragments and configuration for question generation.

Kept in one module so the generator and any offline tooling share the
same wording.
"""

from polish_trainer.schemas import CEFRLevel, QuestionType

# ---- System Prompt ----

SYSTEM_PROMPT = (
    "You are an expert Polish language teacher who writes clear, self-contained "
    "practice questions for adult learners."
)

# ---- Difficulty Guidelines ----

DIFFICULTY_GUIDELINES = {
    CEFRLevel.A1.value: "Use basic vocabulary, simple present tense, common everyday topics",
    CEFRLevel.A2.value: "Include past/future tenses, more vocabulary, basic cases",
    CEFRLevel.B1.value: "Complex sentences, all cases, conditional mood, broader topics",
    CEFRLevel.B2.value: "Advanced grammar, nuanced vocabulary, cultural contexts",
    CEFRLevel.C1.value: "Sophisticated language, idiomatic expressions, complex concepts",
    CEFRLevel.C2.value: "Native-level complexity, literary language, abstract concepts",
}

# ---- Question Type Templates ----
# description, template, example

QUESTION_TYPE_PROMPTS = {
    QuestionType.BASIC_CLOZE.value: (
        "Fill-in-the-blank questions with single word answers",
        "Create a sentence with a missing word (use _____ for the blank). The missing word should test the concept.",
        "Question: 'Ja _____ do sklepu.' Answer: 'idę'",
    ),
    QuestionType.MULTI_CLOZE.value: (
        "Fill-in-the-blank questions with multiple missing words",
        "Create a sentence with 2-3 missing words (use _____ for each blank). Each blank tests related concepts.",
        "Question: 'Moja _____ _____ do pracy autobusem.' Answer: 'siostra jedzie'",
    ),
    QuestionType.VOCAB_CHOICE.value: (
        "Multiple choice vocabulary questions",
        "Create a multiple choice question with 4 options. Only one option should be correct.",
        "Question: 'What does \"książka\" mean?' Options: ['book', 'table', 'chair', 'window'] Answer: 'book'",
    ),
    QuestionType.MULTI_SELECT.value: (
        "Multiple choice questions with multiple correct answers",
        "Create a question where multiple options are correct. Provide 4-6 options with 2-3 correct answers.",
        "Question: 'Which are Polish cities?' Options: ['Warszawa', 'Berlin', 'Kraków', 'Paris', 'Gdańsk'] "
        "Answer: 'Warszawa,Kraków,Gdańsk'",
    ),
    QuestionType.CONJUGATION_TABLE.value: (
        "Complete verb conjugation table with all 6 standard forms",
        "Ask to conjugate a verb in a specific tense for all 6 persons. Return the answer as a comma-separated "
        "string in the order: ja,ty,on/ona/ono,my,wy,oni/one",
        "Question: 'Conjugate \"mówić\" in present tense' Answer: 'mówię,mówisz,mówi,mówimy,mówicie,mówią'",
    ),
    QuestionType.CASE_TRANSFORM.value: (
        "Questions about grammatical case transformations",
        "Give a word and ask for its transformation into a specific grammatical case.",
        "Question: 'Transform \"kot\" to accusative case' Answer: 'kota'",
    ),
    QuestionType.SENTENCE_TRANSFORM.value: (
        "Transform sentences between different grammatical forms",
        "Ask to transform sentences (e.g., affirmative to negative, present to past).",
        "Question: 'Transform to past tense: Ja czytam książkę' Answer: 'Ja czytałem książkę'",
    ),
    QuestionType.WORD_ARRANGEMENT.value: (
        "Arrange words to form correct sentence",
        "Use a generic instruction as the question text and place the scrambled words ONLY in the options, "
        "never in their correct order. Return the correct sentence as the answer.",
        "Question: 'Arrange these words to form a correct sentence:' Options: ['książkę', 'czytam', 'ciekawą'] "
        "Answer: 'Czytam ciekawą książkę'",
    ),
    QuestionType.TRANSLATION_PL.value: (
        "Translate from English to Polish",
        "Provide an English phrase and ask for Polish translation.",
        "Question: 'Translate: I am reading a book' Answer: 'Czytam książkę'",
    ),
    QuestionType.TRANSLATION_EN.value: (
        "Translate from Polish to English",
        "Provide a Polish phrase and ask for English translation.",
        "Question: 'Translate: Lubię kawę' Answer: 'I like coffee'",
    ),
    QuestionType.AUDIO_COMPREHENSION.value: (
        "Audio-based comprehension questions",
        "Create a question about a short spoken Polish phrase; the phrase itself is the answer.",
        "Question: 'What did the speaker say?' Answer: 'Dzień dobry'",
    ),
    QuestionType.VISUAL_VOCABULARY.value: (
        "Image-based vocabulary questions",
        "Create a question about a simple picture; the depicted word is the answer.",
        "Question: 'What is shown in the image?' Answer: 'dom'",
    ),
    QuestionType.DIALOGUE_COMPLETE.value: (
        "Complete dialogue conversations",
        "Provide partial dialogue and ask to complete it.",
        "Question: 'A: Jak się masz? B: _____' Answer: 'Dobrze, dziękuję'",
    ),
    QuestionType.ASPECT_PAIRS.value: (
        "Perfective and imperfective verb aspects",
        "Ask about verb aspect pairs in Polish.",
        "Question: 'Give the perfective form of \"czytać\"' Answer: 'przeczytać'",
    ),
    QuestionType.DIMINUTIVE_FORMS.value: (
        "Polish diminutive word forms",
        "Ask for diminutive forms of nouns.",
        "Question: 'Give the diminutive form of \"kot\"' Answer: 'kotek'",
    ),
    QuestionType.SCENARIO_RESPONSE.value: (
        "Respond to specific scenarios",
        "Provide a scenario and ask for appropriate response.",
        "Question: 'You enter a shop. What do you say?' Answer: 'Dzień dobry'",
    ),
    QuestionType.CULTURAL_CONTEXT.value: (
        "Polish culture and context questions",
        "Ask about Polish customs, culture, or context.",
        "Question: 'When do Poles celebrate name days?' Answer: 'Throughout the year'",
    ),
    QuestionType.Q_A.value: (
        "Question and answer format",
        "Create a question that requires a specific answer related to the concept.",
        "Question: 'Co robisz wieczorem?' Answer: 'Czytam książki'",
    ),
}

# ---- Shared Prompt Fragments ----

QUALITY_REQUIREMENTS = """Quality requirements:
- Every question must be self-contained: all information needed to answer is in the question
- Each question must directly test at least one target concept in a realistic situation
- Exactly one unambiguous correct answer (for multi-select, a comma-separated list)
- Distractors for choice questions should be plausible learner errors
- Do not repeat the same sentence or scenario twice
- In concept_names, use the exact concept NAMES from the list above
- Use null for options when the question type has none"""


def format_generation_prompt(
    question_type: str,
    quantity: int,
    concept_lines: list[str],
    difficulty: str,
    special_instructions: str = ""
) -> str:
    """
    Build the user prompt for one generation request.

    Args:
        question_type: QuestionType value
        quantity: Number of questions to generate
        concept_lines: "name: description" lines for the target concepts
        difficulty: CEFR level value
        special_instructions: Optional briefing (e.g. from the context builder)

    Returns:
        Prompt text
    """
    description, template, example = QUESTION_TYPE_PROMPTS.get(
        question_type, QUESTION_TYPE_PROMPTS[QuestionType.Q_A.value]
    )
    guidelines = DIFFICULTY_GUIDELINES.get(difficulty, DIFFICULTY_GUIDELINES[CEFRLevel.A1.value])

    prompt = f"Generate {quantity} Polish practice question(s) of type {question_type}.\n\n"
    prompt += f"Type: {description}\n"
    prompt += f"How to write it: {template}\n"
    prompt += f"Example: {example}\n\n"
    prompt += "Target concepts:\n"
    prompt += "\n".join(f"- {line}" for line in concept_lines)
    prompt += f"\n\nLevel: {difficulty} ({guidelines})\n\n"
    if special_instructions:
        prompt += f"SPECIAL INSTRUCTIONS:\n{special_instructions}\n\n"
    prompt += QUALITY_REQUIREMENTS
    return prompt
