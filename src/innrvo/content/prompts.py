"""Generation prompts for each content category.

``build_content_prompt`` is the single entry point: it picks the category
builder, embeds the word budget and returns the sampling settings alongside
the prompt. Hypnosis prompts always carry the full safety framing.
"""

from __future__ import annotations

from dataclasses import dataclass

from .budget import WordBudget, calculate_word_budget
from .catalog import (
    HYPNOSIS_SAFETY_FRAMING,
    MEDITATION_TYPES,
    calculate_word_count,
    get_affirmation_info,
    get_hypnosis_depth_info,
    get_journey_info,
    get_story_age_group_info,
    temperature_for_category,
)
from .types import (
    AffirmationSubType,
    ContentCategory,
    ContentGenerationParams,
    HypnosisDepth,
    JourneySubType,
    StoryAgeGroup,
)

MIN_MAX_TOKENS = 1200
TOKENS_PER_WORD = 1.5
TOKEN_HEADROOM = 1.2


@dataclass(frozen=True)
class PromptBuildResult:
    prompt: str
    temperature: float
    max_tokens: int
    budget: WordBudget


def _lines(*parts: str | None) -> str:
    """Join prompt sections, dropping optional ones that are empty."""
    return "\n".join(p for p in parts if p is not None)


def _audio_line(params: ContentGenerationParams) -> str | None:
    if not params.audio_tags:
        return None
    return f"AUDIO CUES: {', '.join(params.audio_tags)} (work them in naturally)"


def _budget_line(budget: WordBudget, what: str) -> str:
    minutes = f"{budget.minutes:g}"
    return f"LENGTH: {budget.word_range} words for a {minutes} minute {what}"


def _phase_lines(budget: WordBudget, describe: dict[str, str] | None = None) -> str:
    describe = describe or {}
    rows = []
    for i, phase in enumerate(budget.phases, start=1):
        detail = describe.get(phase.name.lower())
        suffix = f": {detail}" if detail else ""
        rows.append(f"{i}. {phase.name.upper()} (~{phase.words} words){suffix}")
    return "\n".join(rows)


# =============================================================================
# Meditation
# =============================================================================

_MEDITATION_PHASE_NOTES = {
    "opening": "name how they feel right now so they feel understood",
    "grounding": "settle attention into the breath and body",
    "core": "the main practice, shaped around what they asked for",
    "integration": "tie the experience back to their situation",
    "closing": "return gently, leaving calm or confidence behind",
}


def build_meditation_prompt(params: ContentGenerationParams) -> str:
    budget = calculate_word_budget(ContentCategory.MEDITATION, params.sub_type, params.duration_minutes)
    practice = MEDITATION_TYPES.get(params.meditation_type or params.sub_type)
    return _lines(
        "Write a personal meditation for this listener's exact situation.",
        "",
        f'REQUEST: "{params.goal}"',
        f"PRACTICE: {practice.name} ({', '.join(practice.benefits)})" if practice else None,
        _audio_line(params),
        f"INSPIRATION: the teachings of {params.teacher_preference}" if params.teacher_preference else None,
        f"DURATION: {params.duration_minutes} minutes",
        "",
        "Before writing, work out privately:",
        "- what they are facing (an interview, a sleepless night, a hard conversation)",
        f"- how they feel: {params.emotional_state or 'infer it from the request'}",
        "- any place they asked for (beach, forest, open sky)",
        "- what they want to leave with (calm, sleep, confidence, clarity)",
        "",
        _budget_line(budget, "meditation"),
        _phase_lines(budget, _MEDITATION_PHASE_NOTES),
        "",
        "RULES:",
        "- Mention their situation within the first 50 words",
        '- First person throughout ("I breathe in slowly", "I am safe here")',
        "- Present tense, with detail for all five senses",
        "- Mark pacing with [pause], [long pause], [deep breath] and [exhale slowly]",
        "- Use ellipses to slow the reading down...",
        "- Avoid stock words such as \"journey\" and \"sacred\"",
        "- Match the energy to the goal: drowsy for sleep, bright for confidence",
        f"- Read at meditation pace, the script must last {params.duration_minutes} minutes",
        f"- {params.custom_instructions}" if params.custom_instructions else None,
        "",
        "Return only the script. No title, headings or commentary.",
    )


# =============================================================================
# Affirmations
# =============================================================================

_AFFIRMATION_STYLES: dict[AffirmationSubType, tuple[str, ...]] = {
    AffirmationSubType.POWER: (
        "STYLE: high-energy first-person declarations",
        'Every line opens with "I am", "I have", "I create" or "I choose".',
        "",
        "SHAPE:",
        "1. Open with three to five strong declarations",
        "2. Group the rest by theme (confidence, abundance, health)",
        "3. Let the intensity climb",
        "4. Finish on three peak declarations",
        "",
        "RULES:",
        "- Five to ten words per statement",
        "- Present tense and full certainty, no \"trying to\" or \"learning to\"",
        "- [pause] between statements, [deep breath] between themes",
        "- No passive voice, no future tense, no hedging",
    ),
    AffirmationSubType.GUIDED: (
        "STYLE: affirmations woven into a warm guiding narrative",
        "First person throughout.",
        "",
        "SHAPE:",
        "1. A gentle opening that names the goal",
        "2. Each affirmation, then a line that lets the listener feel it, then [deep breath]",
        "3. Deepen the emotion as the session goes on",
        "4. Integrate and close",
        "",
        "RULES:",
        "- Tie every statement to a feeling or a sensation in the body",
        "- Leave room for reflection with [pause] and [long pause]",
        "- Present tense, embodied language",
    ),
    AffirmationSubType.SLEEP: (
        "STYLE: soft affirmations that fade toward sleep",
        "First person, dreamy and unhurried.",
        "",
        "SHAPE:",
        "1. Permission to rest",
        "2. Settling statements at normal pace",
        "3. Slower statements, longer pauses, gentle repetition",
        "4. Very slow, almost whispered",
        "5. A few last words with long silence between them",
        "",
        "RULES:",
        "- The pace slows the whole way through and [long pause] becomes more frequent",
        "- Repeat key phrases, trail off with ellipses...",
        '- Lean on words like "drifting", "floating", "peaceful", "safe"',
        "- The energy must fade. Never lift it at the end.",
    ),
    AffirmationSubType.MIRROR_WORK: (
        "STYLE: mirror work in the manner of Louise Hay",
        'Second person, as if speaking to yourself in a mirror: "You are", "You deserve".',
        "",
        "SHAPE:",
        "1. Look at yourself with love",
        "2. Foundational self-love statements",
        "3. Statements about the goal itself",
        "4. Healing and forgiveness",
        "5. Deep self-acceptance to close",
        "",
        "RULES:",
        "- Nurturing tone, with moments for the listener to repeat silently",
        "- [pause] after each statement",
        "- Speak to the inner child where it fits",
        "- Keep returning to worthiness and being enough",
    ),
}


def build_affirmation_prompt(params: ContentGenerationParams) -> str:
    try:
        sub_type = AffirmationSubType(params.sub_type)
    except ValueError:
        sub_type = AffirmationSubType.POWER
    info = get_affirmation_info(sub_type)
    budget = calculate_word_budget(ContentCategory.AFFIRMATION, sub_type.value, params.duration_minutes)
    target = f"LENGTH: {budget.word_range} words, about {budget.statements} statements, for {budget.minutes:g} minutes"
    return _lines(
        f'Write {info.name.upper() if info else "AFFIRMATIONS"} for: "{params.goal}"',
        "",
        target,
        _audio_line(params),
        "",
        *_AFFIRMATION_STYLES[sub_type],
        f"- {params.custom_instructions}" if params.custom_instructions else None,
        "",
        "Return only the affirmations. No title or commentary.",
    )


# =============================================================================
# Self-hypnosis
# =============================================================================

_HYPNOSIS_PHASE_NOTES = {
    "brief relaxation": "relax the body progressively while counting down from ten",
    "light suggestions": "soft, positive suggestions toward {goal}",
    "gentle return": "count up from one to five, arriving refreshed",
    "induction": "eye fixation or progressive relaxation into trance",
    "deepening": "a staircase or lift, deeper with every step",
    "extended induction": "slow, thorough relaxation and narrowing focus",
    "deep deepening": "several deepening techniques layered together",
    "suggestions": "direct and indirect suggestions toward {goal}",
    "therapeutic suggestions": "layered suggestions that reach the root of {goal}",
    "inner work": "imagery or dialogue with the subconscious",
    "post-hypnotic anchoring": "set a cue that keeps the benefit going",
    "integration": "give the subconscious time to absorb the work",
    "emergence": "count from one to five to full alertness (required)",
    "careful emergence": "a slow, complete return to full awareness",
}


def build_hypnosis_prompt(params: ContentGenerationParams) -> str:
    depth = params.hypnosis_depth or HypnosisDepth(params.sub_type)
    info = get_hypnosis_depth_info(depth)
    budget = calculate_word_budget(ContentCategory.SELF_HYPNOSIS, depth.value, params.duration_minutes)
    notes = {k: v.format(goal=params.goal) for k, v in _HYPNOSIS_PHASE_NOTES.items()}
    framing = HYPNOSIS_SAFETY_FRAMING
    return _lines(
        f'Write a SELF-HYPNOSIS SESSION for: "{params.goal}"',
        "",
        f"DEPTH: {depth.value.upper()} ({info.name if info else depth.value})",
        f"DURATION: {params.duration_minutes} minutes",
        _audio_line(params),
        "",
        _budget_line(budget, f"{depth.value} hypnosis session"),
        "",
        "PHASES:",
        _phase_lines(budget, notes),
        "",
        "=== SAFETY (all required) ===",
        "",
        "Open with this disclaimer, word for word:",
        f'"{framing.opening_disclaimer}"',
        "",
        "Follow it with this consent statement:",
        f'"{framing.consent_statement}"',
        "",
        "Remind the listener of this exit at least once:",
        f'"{framing.emergency_exit}"',
        "",
        "Close with this emergence protocol:",
        f'"{framing.emergence_protocol}"',
        "",
        "=== STYLE ===",
        '- Rhythmic, soothing, permissive language ("you may", "perhaps", "allow yourself")',
        "- Embedded commands and repetition for deepening",
        "- Present tense, positive framing, first person for the listener's inner experience",
        "- [pause], [long pause], [deep breath] and trailing ellipses for pacing...",
        "- The listener stays in control throughout and is never left in trance",
        f"- {params.custom_instructions}" if params.custom_instructions else None,
        "",
        "Return only the hypnosis script. No title, headings or commentary.",
    )


# =============================================================================
# Guided journeys
# =============================================================================

_JOURNEY_STEPS: dict[JourneySubType, tuple[str, ...]] = {
    JourneySubType.INNER_JOURNEY: (
        "RELAXATION: release the body completely",
        "DESCENT: travel inward by stairway or path",
        "SANCTUARY: arrive in a personal inner refuge",
        "EXPLORATION: discover the inner landscape",
        "ENCOUNTER: meet an inner guide or part of the self",
        "WISDOM: receive an insight or a healing",
        "INTEGRATION: accept what was found",
        "RETURN: travel back and ground",
    ),
    JourneySubType.PAST_LIFE: (
        "PREPARATION: deep relaxation and a visualization of protection",
        "CORRIDOR: a hallway of doors, each opening onto another life",
        "SELECTION: choose a door and step into the memory",
        "KEY SCENES: two or three defining moments of that life",
        "PASSING: a peaceful experience of that life's end",
        "BETWEEN LIVES: the soul's view of the lessons learned",
        "INTEGRATION: carry the wisdom forward and heal old ties",
        "RETURN: come gently back to the present and ground",
    ),
    JourneySubType.SPIRIT_GUIDE: (
        "SACRED SPACE: create a protected, elevated place",
        "OPENING: open the heart and expand love",
        "INVITATION: call the guide or higher self with clear intent",
        "RECOGNITION: sense, see or feel the presence arrive",
        "COMMUNICATION: receive a message, insight or gift",
        "CONNECTION: establish a lasting relationship",
        "FAREWELL: give thanks to the guide",
        "RETURN: come back grounded with the connection intact",
    ),
    JourneySubType.SHAMANIC: (
        "PREPARATION: open sacred space and call the directions",
        "RHYTHM: establish the drumbeat that carries the journey",
        "ENTRY: find a way in through a tree, cave or water",
        "WORLD AXIS: travel to the lower, middle or upper world",
        "ENCOUNTERS: meet power animals, spirits or teachers",
        "RETRIEVAL: receive what is needed for healing",
        "RETURN: come back by the same path",
        "INTEGRATION: ground the experience",
    ),
    JourneySubType.ASTRAL: (
        "RELAXATION: deep relaxation to the edge of sleep",
        "VIBRATION: energy building, tingling and humming",
        "SEPARATION: lift out with the rope, roll-out or float technique",
        "NEAR BODY: explore the room and look back at the body",
        "NAVIGATION: travel by intention",
        "EXPLORATION: experience the astral surroundings",
        "RE-ENTRY: intend to return and settle back into the body",
        "GROUNDING: full physical awareness",
    ),
    JourneySubType.AKASHIC: (
        "ELEVATION: rise through the planes",
        "PORTAL: find the gateway to the records",
        "HALL: describe the hall of records",
        "KEEPER: meet the keeper of the records",
        "REQUEST: ask for a specific record and receive it",
        "READING: experience what it holds",
        "MEANING: understand its significance",
        "CLOSING: close the record, thank the keeper and return",
    ),
    JourneySubType.QUANTUM_FIELD: (
        "COHERENCE: bring heart and mind into rhythm",
        "FIELD: move beyond space and time",
        "POSSIBILITY: rest in the field of every possibility",
        "INTENTION: choose clearly what to bring into being",
        "FEELING: embody that reality as already real",
        "COLLAPSE: watch the possibility become fact",
        "GRATITUDE: give thanks as if it has arrived",
        "INTEGRATION: bring the new state back",
    ),
}


def build_journey_prompt(params: ContentGenerationParams) -> str:
    try:
        sub_type = JourneySubType(params.sub_type)
    except ValueError:
        sub_type = JourneySubType.INNER_JOURNEY
    info = get_journey_info(sub_type)
    budget = calculate_word_budget(ContentCategory.GUIDED_JOURNEY, sub_type.value, params.duration_minutes)
    steps = "\n".join(f"{i}. {s}" for i, s in enumerate(_JOURNEY_STEPS[sub_type], start=1))
    depth = info.technical_depth if info else "intermediate"
    return _lines(
        f'Write a {info.name if info else "guided journey"} for: "{params.goal}"',
        "",
        f"JOURNEY: {sub_type.value.replace('_', ' ').upper()}",
        f"TRADITION: {info.tradition}" if info and info.tradition else None,
        f"KEY ELEMENTS: {', '.join(info.key_elements)}" if info else None,
        f"TECHNICAL DEPTH: {depth.upper()}, be as precise as that level calls for",
        f"INSPIRED BY: {', '.join(info.teachers)}" if info else None,
        _audio_line(params),
        f"SPECIFIC INSTRUCTIONS: {params.custom_instructions}" if params.custom_instructions else None,
        "",
        _budget_line(budget, "journey"),
        "",
        "STRUCTURE:",
        steps,
        "",
        "=== STYLE ===",
        "- Immersive present tense with all five senses",
        "- Poetic but exact, using the tradition's own terms",
        "- Include the authentic elements of the practice; trust the listener knows what they seek",
        "- [pause] between scenes, [long pause] for the deepest moments, [deep breath] at turning points",
        "- Integrate the experience and return fully to present awareness at the end",
        "",
        "Return only the journey script. No title, headings or commentary.",
    )


# =============================================================================
# Children's stories
# =============================================================================


def build_story_prompt(params: ContentGenerationParams) -> str:
    age_group = params.target_age_group or StoryAgeGroup(params.sub_type)
    info = get_story_age_group_info(age_group)
    assert info is not None
    budget = calculate_word_budget(ContentCategory.STORY, age_group.value, params.duration_minutes)
    avg_len, max_len = info.sentence_length
    header = (
        f"Write a {info.name.upper()} for bedtime (ages {info.age_range})",
        "",
        f'THEME: "{params.goal}"',
        f"SPECIFIC REQUEST: {params.custom_instructions}" if params.custom_instructions else None,
        "",
        f"LENGTH: {budget.word_range} words, about {budget.target_words}",
        "",
        "FORMAT: third person, written for a parent to read aloud to their child",
        "",
        "VOCABULARY:",
        f"- Words of at most {info.max_syllables} syllables",
        f"- Never use: {', '.join(info.avoid_words)}",
        "",
        "SENTENCES:",
        f"- About {avg_len} words on average, never more than {max_len}",
        f"- {info.paragraphs[0]} to {info.paragraphs[1]} short paragraphs",
        "",
        f"CHARACTERS: {', '.join(info.characters[:5])}",
        f"THEMES: {', '.join(info.themes[:5])}",
        "",
        "MUST:",
        *(f"- {r}" for r in info.requirements),
    )
    if age_group is StoryAgeGroup.TODDLER:
        shape = (
            "SHAPE:",
            "1. A character in a cozy place",
            "2. A small, gentle activity",
            "3. The character grows sleepy",
            "4. A comforting bedtime ritual",
            "5. Peaceful sleep",
            "",
            "Repeat a comforting phrase two or three times. Nothing scary, nothing exciting.",
        )
    else:
        shape = (
            "SHAPE:",
            "1. Opening that sparks wonder",
            "2. Something curious is discovered",
            "3. A short magical adventure",
            "4. A small challenge",
            "5. Solved with kindness, courage or wisdom",
            "6. Heading home to rest",
            "7. A safe, warm, sleepy ending",
            "",
            "Exciting but never frightening, with a quiet lesson that does not preach.",
        )
    return _lines(
        *header,
        "",
        *shape,
        "Use ... for natural pauses and slow down toward the end.",
        "",
        "Return only the story. No title, headings or commentary.",
    )


# =============================================================================
# Entry points
# =============================================================================

_BUILDERS = {
    ContentCategory.MEDITATION: build_meditation_prompt,
    ContentCategory.AFFIRMATION: build_affirmation_prompt,
    ContentCategory.SELF_HYPNOSIS: build_hypnosis_prompt,
    ContentCategory.GUIDED_JOURNEY: build_journey_prompt,
    ContentCategory.STORY: build_story_prompt,
}


def build_content_prompt(params: ContentGenerationParams) -> PromptBuildResult:
    """Build the generation prompt and sampling settings for ``params``.

    ``max_tokens`` is sized from the unclamped word count for the requested
    duration at roughly 1.5 tokens per word plus headroom.
    """
    prompt = _BUILDERS[params.category](params)
    budget = calculate_word_budget(params.category, params.sub_type, params.duration_minutes)
    expected = calculate_word_count(params.category, params.sub_type, params.duration_minutes)
    max_tokens = max(MIN_MAX_TOKENS, round(expected * TOKENS_PER_WORD * TOKEN_HEADROOM))
    return PromptBuildResult(
        prompt=prompt,
        temperature=temperature_for_category(params.category),
        max_tokens=max_tokens,
        budget=budget,
    )


def build_extend_prompt(script: str, category: ContentCategory | str, target_words: int) -> str:
    """Prompt asking the model to lengthen an existing script."""
    name = ContentCategory(category).value.replace("_", " ")
    return _lines(
        f"Lengthen this {name} to roughly {target_words} words, keeping its essence and tone.",
        "",
        "SCRIPT:",
        f'"{script}"',
        "",
        "GUIDELINES:",
        "- Keep the opening as it is",
        "- Deepen the imagery and sensory detail",
        "- Add breathing moments and pauses where they fit",
        "- Keep the existing audio tags such as [pause] and [deep breath], and add more",
        "- Do not change the voice (first, second or third person) or the pacing style",
        "",
        "Return only the expanded script.",
    )
