"""Prompt builders for the language-model lyrics calls."""

from __future__ import annotations

from typing import Optional

from .fields import MAX_MODE_HEADER

SUNO_TAG_INSTRUCTIONS = "Use Suno-compatible section tags: [Verse], [Chorus], [Bridge], [Outro], etc."
STANDARD_TAG_INSTRUCTIONS = "Use standard section markers like [Verse 1], [Chorus], [Bridge]."
UNTITLED_SEED = "Untitled"


def _tag_instructions(use_suno_tags: bool) -> str:
    return SUNO_TAG_INSTRUCTIONS if use_suno_tags else STANDARD_TAG_INSTRUCTIONS


def _max_mode_instructions(max_mode: bool) -> str:
    if not max_mode:
        return ""
    return (
        "CRITICAL: The VERY FIRST LINES of your output MUST be exactly:\n"
        f"{MAX_MODE_HEADER}\n\n"
        "Then continue with the lyrics on subsequent lines.\n\n"
    )


def build_lyrics_refinement_prompt(
    genre: str,
    mood: str,
    use_suno_tags: bool,
    max_mode: bool,
) -> str:
    return (
        f"You are a professional songwriter refining existing lyrics for a {genre} song "
        f"with a {mood} mood.\n\n"
        f"{_max_mode_instructions(max_mode)}"
        "TASK: Apply the user's feedback to improve the lyrics while keeping the song structure.\n\n"
        "RULES:\n"
        "- Keep the same overall structure (verses, chorus, bridge)\n"
        "- Apply the specific changes requested in the feedback\n"
        f"- Stay within the genre ({genre}) and mood ({mood})\n"
        f"- {_tag_instructions(use_suno_tags)}\n"
        "- Keep lines singable with a natural rhythm\n"
        "- Output ONLY the refined lyrics, no explanations"
    )


def build_lyrics_refinement_user_prompt(
    lyrics: str,
    feedback: str,
    topic: Optional[str] = None,
) -> str:
    prompt = f"Current lyrics:\n{lyrics}\n\nFeedback to apply:\n{feedback}"
    if topic:
        prompt += f"\n\nTopic/theme: {topic}"
    return prompt


def build_lyrics_bootstrap_prompt(max_mode: bool, use_suno_tags: bool) -> str:
    return (
        "You are a professional songwriter writing original lyrics.\n\n"
        f"{_max_mode_instructions(max_mode)}"
        "RULES:\n"
        "- Write a complete song: at least two verses, a repeated chorus and a bridge\n"
        f"- {_tag_instructions(use_suno_tags)}\n"
        "- Keep lines singable with a natural rhythm\n"
        "- Output ONLY the lyrics, no explanations"
    )


def build_lyrics_bootstrap_user_prompt(seed: str, genre: str, mood: str) -> str:
    return f"Write lyrics about: {seed}\nGenre: {genre}\nMood: {mood}"


def lyrics_seed(topic: Optional[str], feedback: Optional[str]) -> str:
    """Subject used to bootstrap lyrics when none exist yet."""

    return (topic or "").strip() or (feedback or "").strip() or UNTITLED_SEED


def optional_topic(topic: Optional[str]) -> Optional[str]:
    stripped = (topic or "").strip()
    return stripped or None


def clean_lyrics(lyrics: Optional[str]) -> Optional[str]:
    stripped = (lyrics or "").strip()
    return stripped or None
