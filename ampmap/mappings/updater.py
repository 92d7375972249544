"""
Race-safe mapping updates with optimistic commit and guarded rollback.

Every operation mutates the in-memory store first, then hands the whole
collection to the injected persist coroutine. When the save fails the store
is reverted only if the touched entry still holds what this call wrote; a
newer edit that landed while the save was in flight is left alone.

Reasoning level updates additionally hold a per-role Saving guard: a second
level update for the same role while the first is still persisting returns
``conflict_skip`` without touching the store or calling persist.
"""

from dataclasses import dataclass
from typing import AbstractSet, Awaitable, Callable, Literal, Optional, Sequence

from ampmap.logger import UnifiedLogger
from .aggregation import default_level_for_new_role, uniform_reasoning_level
from .catalog import ROLE_SLOTS, find_slot, slot_source_models
from .codec import decode_alias, encode_alias, is_reasoning_model
from .exceptions import MappingNotFoundError, MappingValidationError, PersistenceError
from .models import ModelMapping, ReasoningLevel, RoleSlot
from .store import MappingStore


PersistFunc = Callable[[list[ModelMapping]], Awaitable[None]]
ReasoningModelsProvider = Callable[[], AbstractSet[str]]
UpdateStatus = Literal["updated", "unchanged", "conflict_skip"]


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a reasoning level update that did not raise."""

    status: UpdateStatus
    role_id: str
    target_alias: Optional[str] = None


@dataclass(frozen=True)
class SlotState:
    """Read-only view of one role slot and its mapping."""

    slot: RoleSlot
    mapping: Optional[ModelMapping]
    is_enabled: bool
    base: Optional[str]
    level: ReasoningLevel
    is_reasoning_target: bool
    saving: bool


class ConcurrentMappingUpdater:
    """
    Entry point for every change to the mapping table.

    Only ``update_level`` holds the per-role Saving guard and may return
    ``conflict_skip``; every other operation commits immediately.

    Args:
        store: Live mapping table shared with readers
        persist: Coroutine that saves a full snapshot of the table
        reasoning_models: Called on every operation for the current set of
            reasoning-capable base models
        slots: Role catalog
    """

    def __init__(
        self,
        store: MappingStore,
        persist: PersistFunc,
        reasoning_models: ReasoningModelsProvider,
        slots: Sequence[RoleSlot] = ROLE_SLOTS,
        logger: Optional[UnifiedLogger] = None,
    ):
        self._store = store
        self._persist = persist
        self._reasoning_models = reasoning_models
        self._slots = tuple(slots)
        self._slot_models = slot_source_models(self._slots)
        self._saving: set[str] = set()
        self._logger = logger if logger is not None else UnifiedLogger(tag="mapping-updater")

    @property
    def store(self) -> MappingStore:
        return self._store

    @property
    def slots(self) -> tuple[RoleSlot, ...]:
        return self._slots

    def is_saving(self, role_id: str) -> bool:
        return role_id in self._saving

    ############################################################################
    # Reasoning level
    ############################################################################

    async def update_level(self, role_id: str, level: ReasoningLevel) -> UpdateResult:
        """
        Apply a reasoning level to an active role's target.

        Returns:
            UpdateResult with status ``updated``, ``unchanged`` (nothing to
            persist, including non-reasoning targets) or ``conflict_skip``
            (an update for this role is already saving)

        Raises:
            MappingNotFoundError: Unknown role, or the role has no enabled mapping
            MappingValidationError: Unknown reasoning level
            PersistenceError: The save failed; ``rolled_back`` tells whether the
                store was reverted
        """
        slot = self._require_slot(role_id)

        if role_id in self._saving:
            self._logger.info(
                "Reasoning update skipped, save already in flight",
                role_id=role_id,
                level=level,
            )
            return UpdateResult(status="conflict_skip", role_id=role_id)

        current = self._require_active_mapping(slot)
        next_alias = encode_alias(current.target_alias, level, self._reasoning_models())
        if next_alias == current.target_alias:
            return UpdateResult(status="unchanged", role_id=role_id, target_alias=next_alias)

        original_alias = current.target_alias
        self._store.upsert(current.with_alias(next_alias))
        self._saving.add(role_id)

        try:
            await self._persist(self._store.all())
        except Exception as exc:
            latest = self._store.get(slot.source_model)
            rolled_back = latest is not None and latest.target_alias == next_alias
            if rolled_back:
                self._store.upsert(latest.with_alias(original_alias))
            self._log_persist_failure(slot.source_model, exc, rolled_back, role_id=role_id)
            raise PersistenceError(slot.source_model, str(exc), rolled_back) from exc
        finally:
            self._saving.discard(role_id)

        self._logger.activity(
            "Reasoning level updated",
            metadata={"from": original_alias, "to": next_alias},
            role_id=role_id,
            source_model=slot.source_model,
        )
        return UpdateResult(status="updated", role_id=role_id, target_alias=next_alias)

    def uniform_level(self) -> Optional[ReasoningLevel]:
        """Shared level across enabled reasoning-model mappings; None when mixed."""
        return uniform_reasoning_level(self._store.all(), self._reasoning_models())

    ############################################################################
    # Role slots
    ############################################################################

    async def set_slot_mapping(
        self,
        role_id: str,
        target_alias: Optional[str],
        enabled: bool,
        fork: Optional[bool] = None,
    ) -> Optional[ModelMapping]:
        """
        Point a role at a target, or remove its mapping.

        An enabled slot with a non-empty target gets exactly one mapping; a
        disabled slot or an empty target removes it. ``fork`` defaults to the
        existing value.

        Returns:
            The stored mapping, or None when the slot is now disabled
        """
        slot = self._require_slot(role_id)
        existing = self._store.get(slot.source_model)
        target = (target_alias or "").strip()

        written: Optional[ModelMapping] = None
        if enabled and target:
            if fork is None:
                fork = existing.is_fork if existing is not None else False
            written = ModelMapping(
                source_model=slot.source_model,
                target_alias=target,
                enabled=True,
                fork=fork,
            )

        await self._commit(slot.source_model, existing, written, role_id=role_id)
        return written

    async def enable_slot(self, role_id: str, default_target: Optional[str] = None) -> ModelMapping:
        """
        Activate a role, carrying over the uniform reasoning level.

        The target defaults to the role's own source model. Mixed levels fall
        back to no suffix.
        """
        slot = self._require_slot(role_id)
        reasoning_models = self._reasoning_models()
        base = (default_target or "").strip() or slot.source_model
        level = default_level_for_new_role(self._store.all(), reasoning_models)
        target = encode_alias(base, level, reasoning_models)

        return await self.set_slot_mapping(role_id, target, enabled=True)

    async def disable_slot(self, role_id: str) -> None:
        await self.set_slot_mapping(role_id, None, enabled=False)

    async def set_slot_target(self, role_id: str, new_base: str) -> ModelMapping:
        """Change an active role's target base, keeping its reasoning level."""
        slot = self._require_slot(role_id)
        existing = self._require_active_mapping(slot)
        base = (new_base or "").strip()
        if not base:
            raise MappingValidationError("Target model is required")

        reasoning_models = self._reasoning_models()
        level = decode_alias(existing.target_alias, reasoning_models).level
        written = existing.with_alias(encode_alias(base, level, reasoning_models))

        await self._commit(slot.source_model, existing, written, role_id=role_id)
        return written

    async def toggle_slot_fork(self, role_id: str) -> ModelMapping:
        slot = self._require_slot(role_id)
        existing = self._require_active_mapping(slot)
        written = existing.model_copy(update={"fork": not existing.is_fork})

        await self._commit(slot.source_model, existing, written, role_id=role_id)
        return written

    def slot_states(self) -> list[SlotState]:
        """Per-slot view in catalog order."""
        reasoning_models = self._reasoning_models()
        states = []
        for slot in self._slots:
            mapping = self._store.get(slot.source_model)
            if mapping is not None:
                decoded = decode_alias(mapping.target_alias, reasoning_models)
                base, level = decoded.base, decoded.level
                reasoning_target = is_reasoning_model(decoded.base, reasoning_models)
            else:
                base, level, reasoning_target = None, "none", False
            states.append(
                SlotState(
                    slot=slot,
                    mapping=mapping,
                    is_enabled=mapping is not None and mapping.is_enabled,
                    base=base,
                    level=level,
                    is_reasoning_target=reasoning_target,
                    saving=slot.id in self._saving,
                )
            )
        return states

    ############################################################################
    # Custom mappings
    ############################################################################

    def custom_mappings(self) -> list[ModelMapping]:
        return self._store.custom_mappings(self._slots)

    async def add_custom_mapping(self, source_model: str, target_alias: str) -> ModelMapping:
        """
        Append an enabled mapping for a model outside the role catalog.

        Raises:
            MappingValidationError: Empty field, or the key is already mapped or
                belongs to a role slot
        """
        source = (source_model or "").strip()
        target = (target_alias or "").strip()
        if not source or not target:
            raise MappingValidationError("Both source model and target model are required")
        if source in self._slot_models:
            raise MappingValidationError(f"'{source}' is a role slot model; configure it through the slot")
        if source in self._store:
            raise MappingValidationError(f"A mapping for '{source}' already exists")

        written = ModelMapping(source_model=source, target_alias=target, enabled=True)
        await self._commit(source, None, written)
        return written

    async def update_custom_mapping(
        self,
        source_model: str,
        target_alias: str,
        enabled: bool,
        fork: Optional[bool] = None,
    ) -> ModelMapping:
        existing = self._require_custom_mapping(source_model)
        target = (target_alias or "").strip()
        if not target:
            raise MappingValidationError("Target model is required")

        written = ModelMapping(
            source_model=existing.source_model,
            target_alias=target,
            enabled=enabled,
            fork=existing.fork if fork is None else fork,
        )
        await self._commit(existing.source_model, existing, written)
        return written

    async def set_custom_target(self, source_model: str, new_base: str) -> ModelMapping:
        """Change a custom mapping's target base, keeping its reasoning level and flags."""
        existing = self._require_custom_mapping(source_model)
        base = (new_base or "").strip()
        if not base:
            raise MappingValidationError("Target model is required")

        reasoning_models = self._reasoning_models()
        level = decode_alias(existing.target_alias, reasoning_models).level
        written = existing.with_alias(encode_alias(base, level, reasoning_models))

        await self._commit(existing.source_model, existing, written)
        return written

    async def remove_custom_mapping(self, source_model: str) -> ModelMapping:
        existing = self._require_custom_mapping(source_model)
        await self._commit(existing.source_model, existing, None)
        return existing

    ############################################################################
    # Internals
    ############################################################################

    async def _commit(
        self,
        source_model: str,
        previous: Optional[ModelMapping],
        written: Optional[ModelMapping],
        role_id: Optional[str] = None,
    ) -> bool:
        """
        Apply ``written`` (None removes the entry) and persist the full table.

        Returns:
            False when the entry already matched and nothing was persisted
        """
        if previous == written:
            return False

        if written is None:
            self._store.remove(source_model)
        else:
            self._store.upsert(written)

        try:
            await self._persist(self._store.all())
        except Exception as exc:
            rolled_back = self._store.get(source_model) == written
            if rolled_back:
                if previous is None:
                    self._store.remove(source_model)
                else:
                    self._store.upsert(previous)
            self._log_persist_failure(source_model, exc, rolled_back, role_id=role_id)
            raise PersistenceError(source_model, str(exc), rolled_back) from exc

        self._logger.activity(
            "Mapping removed" if written is None else "Mapping saved",
            metadata=written.to_record() if written is not None else None,
            role_id=role_id,
            source_model=source_model,
        )
        return True

    def _log_persist_failure(
        self,
        source_model: str,
        exc: Exception,
        rolled_back: bool,
        role_id: Optional[str] = None,
    ) -> None:
        message = (
            "Mapping save failed, change rolled back"
            if rolled_back
            else "Mapping save failed, newer edit kept"
        )
        self._logger.activity(
            message,
            level="warning",
            metadata={"error": str(exc)},
            role_id=role_id,
            source_model=source_model,
        )

    def _require_slot(self, role_id: str) -> RoleSlot:
        slot = find_slot(role_id, self._slots)
        if slot is None:
            raise MappingNotFoundError(role_id, f"Unknown role '{role_id}'")
        return slot

    def _require_active_mapping(self, slot: RoleSlot) -> ModelMapping:
        mapping = self._store.get(slot.source_model)
        if mapping is None or not mapping.is_enabled:
            raise MappingNotFoundError(slot.id, f"Role '{slot.id}' has no active mapping")
        return mapping

    def _require_custom_mapping(self, source_model: str) -> ModelMapping:
        key = (source_model or "").strip()
        mapping = self._store.get(key)
        if mapping is None or key in self._slot_models:
            raise MappingNotFoundError(key, f"No custom mapping for '{key}'")
        return mapping
