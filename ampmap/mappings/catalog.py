"""
Static role catalog and migration table.

Source model names must match exactly what the agent sends in requests.
When the agent changes the model behind a role, add an old -> new entry to
SLOT_MODEL_MIGRATIONS so stored mappings follow it on the next load.
"""

from typing import Optional, Sequence

from .models import MigrationRule, RoleSlot


ROLE_SLOTS: tuple[RoleSlot, ...] = (
    # Main agent
    RoleSlot(id="opus-4-6", display_name="Smart", source_model="claude-opus-4-6", source_label="Claude Opus 4.6"),
    RoleSlot(id="deep", display_name="Deep", source_model="gpt-5.2-codex", source_label="GPT-5.2 Codex"),
    # Subagents
    RoleSlot(
        id="sonnet-4-5",
        display_name="Librarian",
        source_model="claude-sonnet-4-5-20241022",
        source_label="Claude Sonnet 4.5",
    ),
    RoleSlot(
        id="haiku-4-5",
        display_name="Rush/Titling",
        source_model="claude-haiku-4-5-20251001",
        source_label="Claude Haiku 4.5",
    ),
    RoleSlot(id="search", display_name="Search", source_model="gemini-3-flash-preview", source_label="Gemini 3 Flash"),
    RoleSlot(id="oracle", display_name="Oracle", source_model="gpt-5.2", source_label="GPT-5.2"),
    RoleSlot(id="review", display_name="Review", source_model="gemini-3-pro-preview", source_label="Gemini 3 Pro"),
    RoleSlot(id="handoff", display_name="Handoff", source_model="gemini-2.5-flash", source_label="Gemini 2.5 Flash"),
    RoleSlot(
        id="topics",
        display_name="Topics",
        source_model="gemini-2.5-flash-lite-preview-09-2025",
        source_label="Gemini 2.5 Flash-Lite Preview",
    ),
    RoleSlot(
        id="painter",
        display_name="Painter",
        source_model="gemini-3-pro-image-preview",
        source_label="Gemini 3 Pro Image",
    ),
)

SLOT_MODEL_MIGRATIONS: tuple[MigrationRule, ...] = (
    MigrationRule(from_model="claude-opus-4-5-20251101", to_model="claude-opus-4-6"),
    # Agent sends the undated name
    MigrationRule(from_model="claude-opus-4-6-20260205", to_model="claude-opus-4-6"),
)

# Request names the agent may use instead of the dated identifiers
AMP_MODEL_ALIASES: dict[str, str] = {
    "claude-opus-4.6": "claude-opus-4-6",
    "claude-opus-4-6-20260205": "claude-opus-4-6",
    "claude-opus-4.5": "claude-opus-4-5-20251101",
    "claude-opus-4-5": "claude-opus-4-5-20251101",
    "claude-sonnet-4.5": "claude-sonnet-4-5-20241022",
    "claude-sonnet-4-5": "claude-sonnet-4-5-20241022",
    "claude-haiku-4.5": "claude-haiku-4-5-20251001",
    "claude-haiku-4-5": "claude-haiku-4-5-20251001",
}


def find_slot(slot_id: str, slots: Sequence[RoleSlot] = ROLE_SLOTS) -> Optional[RoleSlot]:
    """Return the slot with the given id, or None."""
    for slot in slots:
        if slot.id == slot_id:
            return slot
    return None


def slot_source_models(slots: Sequence[RoleSlot] = ROLE_SLOTS) -> frozenset[str]:
    """Source models currently addressed by the role catalog."""
    return frozenset(slot.source_model for slot in slots)


def resolve_request_model(name: str) -> str:
    """Canonicalise a request model name using AMP_MODEL_ALIASES."""
    return AMP_MODEL_ALIASES.get(name, name)
