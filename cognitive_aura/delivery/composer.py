"""
Recommendation Composer.

Turns (context, target concept, score) into the user-facing parts of an
aura state: the micro-task text, the soundscape preset and the graph
physics mode. Pure lookup logic, no state.
"""

from __future__ import annotations

from dataclasses import dataclass

from cognitive_aura.core.models import (
    AuraContext,
    ContextThresholds,
    PhysicsMode,
    SoundscapePreset,
)
from cognitive_aura.graph.models import ConceptCategory, ConceptNode, LogicPayload

# Above this score an OVERLOAD learner gets calm visuals instead of intense ones
SEVERE_OVERLOAD_SCORE = 0.9

# Four-context vocabulary used by the audio/visual layers (labels only)
PRESENTATION_LABELS = {
    AuraContext.RECOVERY: "FragmentedAttention",
    AuraContext.FOCUS: "DeepFocus",
    AuraContext.OVERLOAD: "CognitiveOverload",
}

DEFAULT_TASKS = {
    AuraContext.RECOVERY: (
        "Take a gentle learning break. Review something you already know well "
        "to build confidence and maintain momentum."
    ),
    AuraContext.FOCUS: (
        "This is an optimal learning moment. Choose your most challenging "
        "active flashcard or concept to tackle."
    ),
    AuraContext.OVERLOAD: (
        "Cognitive load is high. Take 5 minutes to quickly review and organize "
        "your learning priorities."
    ),
}

CONCEPT_VERBS = {
    AuraContext.RECOVERY: "gently revisit",
    AuraContext.FOCUS: "focus on",
    AuraContext.OVERLOAD: "quickly review",
}

CONCEPT_TASKS = (
    # (mastery below, template)
    (0.3, "{verb} the fundamentals of {label}. Break it down into 3 simple components "
          "and explain each in your own words."),
    (0.7, "{verb} {label} by creating a practical example or analogy that demonstrates "
          "your understanding."),
    (float("inf"), "{verb} {label} by teaching it to someone else or finding a real-world "
                   "application."),
)

LOGIC_TASKS = {
    AuraContext.RECOVERY: (
        "Gently practice {label} with a simple {problem_type} reasoning problem. "
        "Take your time and focus on the logical flow."
    ),
    AuraContext.FOCUS: (
        "Solve a {problem_type} reasoning problem involving {label}. Write out each "
        "step of your logical reasoning process."
    ),
    AuraContext.OVERLOAD: (
        "Quick review: identify the key logical pattern in {label} and solve one "
        "{problem_type} problem using that pattern."
    ),
}

LOGIC_TASK_UNSTRUCTURED = (
    "Practice {label} with a focused 10-minute exercise tailored to your current "
    "{context} state."
)

CATEGORY_TASKS = {
    ConceptCategory.MEMORY: {
        AuraContext.RECOVERY: (
            "Gently reinforce {label} using spaced repetition. Review it once and "
            "associate it with a positive emotion."
        ),
        AuraContext.FOCUS: (
            "Strengthen {label} by creating 3 different memory associations or "
            "mnemonics. Test your recall after each one."
        ),
        AuraContext.OVERLOAD: (
            "Quick memory drill: recall {label} and immediately use it in a practical "
            "context to reinforce the connection."
        ),
    },
    ConceptCategory.HABIT: {
        AuraContext.RECOVERY: (
            "Take a gentle step toward {label}. Do the smallest possible version that "
            "still counts as progress."
        ),
        AuraContext.FOCUS: (
            "Dedicate focused attention to {label}. Practice it mindfully for 10-15 minutes."
        ),
        AuraContext.OVERLOAD: (
            "Quick habit reinforcement: do a 2-minute version of {label} to maintain "
            "momentum despite high cognitive load."
        ),
    },
    ConceptCategory.GOAL: {
        AuraContext.RECOVERY: (
            "Reflect on {label}. Write down one small step you could take when you're "
            "feeling more energized."
        ),
        AuraContext.FOCUS: (
            "Make concrete progress on {label}. Identify and complete the next "
            "actionable task that moves you closer."
        ),
        AuraContext.OVERLOAD: (
            "Quick goal check: review your progress on {label} and adjust priorities "
            "if needed. Keep it simple."
        ),
    },
    ConceptCategory.OTHER: {
        AuraContext.RECOVERY: (
            "Take a gentle approach to {label}. Review it briefly and note what you'd "
            "like to explore when you have more energy."
        ),
        AuraContext.FOCUS: (
            "Give focused attention to {label}. Spend 15 minutes exploring it deeply "
            "and making connections."
        ),
        AuraContext.OVERLOAD: (
            "Quick review of {label}. Identify the most important aspect and reinforce "
            "your understanding of just that piece."
        ),
    },
}


@dataclass
class Recommendation:
    """User-facing payload of an aura state."""

    micro_task: str
    soundscape: SoundscapePreset
    physics_mode: PhysicsMode
    presentation_label: str


def _sentence(text: str) -> str:
    return text[:1].upper() + text[1:]


def generate_micro_task(target: ConceptNode | None, context: AuraContext) -> str:
    """Build the micro-task text for a target concept in a context."""
    if target is None:
        return DEFAULT_TASKS[context]

    label = target.label or "this topic"

    if target.category == ConceptCategory.CONCEPT:
        verb = CONCEPT_VERBS[context]
        for mastery_below, template in CONCEPT_TASKS:
            if target.mastery_level < mastery_below:
                return _sentence(template.format(verb=verb, label=label))

    if target.category in (ConceptCategory.SKILL, ConceptCategory.LOGIC):
        if isinstance(target.payload, LogicPayload):
            return LOGIC_TASKS[context].format(label=label, problem_type=target.payload.problem_type)
        return LOGIC_TASK_UNSTRUCTURED.format(label=label, context=context.value)

    templates = CATEGORY_TASKS.get(target.category, CATEGORY_TASKS[ConceptCategory.OTHER])
    return templates[context].format(label=label)


def recommend_soundscape(
    context: AuraContext,
    score: float,
    thresholds: ContextThresholds,
) -> SoundscapePreset:
    """
    Pick a soundscape preset from the context and where the score sits in
    that context's band (below or above the band midpoint).
    """
    midpoint = thresholds.band_midpoint(context)

    if context == AuraContext.RECOVERY:
        return SoundscapePreset.DEEP_REST if score < midpoint else SoundscapePreset.CALM_READINESS
    if context == AuraContext.FOCUS:
        return SoundscapePreset.DEEP_FOCUS if score > midpoint else SoundscapePreset.MEMORY_FLOW
    return SoundscapePreset.DEEP_REST if score > midpoint else SoundscapePreset.REASONING_BOOST


def physics_mode_for(context: AuraContext, score: float) -> PhysicsMode:
    """Visualization intensity for the neural graph renderer."""
    if context == AuraContext.RECOVERY:
        return PhysicsMode.CALM
    if context == AuraContext.FOCUS:
        return PhysicsMode.FOCUS
    # Switch to calm when severely overloaded
    return PhysicsMode.CALM if score > SEVERE_OVERLOAD_SCORE else PhysicsMode.INTENSE


def presentation_label(context: AuraContext) -> str:
    return PRESENTATION_LABELS[context]


def compose(
    target: ConceptNode | None,
    context: AuraContext,
    score: float,
    thresholds: ContextThresholds,
) -> Recommendation:
    """Build the full user-facing recommendation."""
    return Recommendation(
        micro_task=generate_micro_task(target, context),
        soundscape=recommend_soundscape(context, score, thresholds),
        physics_mode=physics_mode_for(context, score),
        presentation_label=presentation_label(context),
    )
