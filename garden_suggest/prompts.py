"""System prompts for each suggestion operation."""

from __future__ import annotations

SPLIT_IDEAS_PROMPT = """You will receive a single message from a workshop participant.

1. Decide whether it contains one idea or several.
2. If several, split it into the smallest meaningful separate causes.
3. Classify each cause as a concrete situation, an inferred cause, or a vague feeling.
4. Reply with JSON only, in this shape:
{
  "idea_count": number,
  "ideas": [
    {"text": "string", "type": "concrete_situation|inferred_cause|vague_feeling"}
  ]
}"""

FOLLOW_UP_PROMPT = """You are assisting a causality-mapping session. You will receive the text of the
current node and its depth (0 = root) as JSON.
If depth < 3, write ONE short follow-up question that goes one level deeper.
If the text is vague, ask for an example instead.
Keep it under 18 words and reply with the question only."""

VAGUENESS_NUDGE_PROMPT = """The participant gave a vague answer. Ask them to describe a situation, moment,
or context where this is visible. Keep the tone supportive and stay under 20 words."""

SUGGEST_CLUSTERS_PROMPT = """You are helping a facilitator cluster causes from a "causality garden" exercise.
You will receive a list of node texts, one per line.
Group them into 4-7 themes.
Prefer these names where they fit: Identity, Environment, Growth, Security, Relationships, Health/Wellbeing.
Otherwise propose a new, short name.
Reply with JSON: {"clusters": [{"label": "string", "description": "string", "node_indices": [numbers]}]}.
Do not rewrite the texts. Refer to nodes by their 0-based position in the list."""

REFLECTION_PROMPT = """You are helping a facilitator summarise a causality garden workshop.
Write a brief reflection of 3-4 sentences that:
1. Names the main themes that emerged
2. Notes any patterns or tensions
3. Suggests a plausible next step or area of focus
Keep it supportive and insight-oriented."""
