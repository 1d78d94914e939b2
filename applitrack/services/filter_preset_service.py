"""
Saved filter presets: named combinations of filters and sort order.
"""
import logging
import uuid
from typing import List, Optional

from applitrack.core.constants import FILTER_PRESETS_STORAGE_KEY
from applitrack.core.exceptions import RecordNotFoundError
from applitrack.schemas.filters import FilterOptions, FilterPreset, SortOptions
from applitrack.services.date_utils import now_iso
from applitrack.services.storage_service import KeyValueStore

logger = logging.getLogger(__name__)


class FilterPresetStorage:
    """CRUD over the saved preset list."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_all(self) -> List[FilterPreset]:
        presets = []
        for raw in self.store.get_json(FILTER_PRESETS_STORAGE_KEY, default=[]) or []:
            try:
                presets.append(FilterPreset.model_validate(raw))
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable filter preset: {e}")
        return presets

    def save_all(self, presets: List[FilterPreset]) -> None:
        self.store.set_json(FILTER_PRESETS_STORAGE_KEY, [preset.to_storage() for preset in presets])

    def add(self, name: str, filters: FilterOptions, sort: SortOptions) -> FilterPreset:
        preset = FilterPreset(
            id=str(uuid.uuid4()),
            name=name,
            filters=filters,
            sort=sort,
            created_date=now_iso(),
        )
        presets = self.get_all()
        presets.append(preset)
        self.save_all(presets)
        logger.info(f"Filter preset saved: preset_id={preset.id}, name={name}")
        return preset

    def update(
        self,
        preset_id: str,
        name: Optional[str] = None,
        filters: Optional[FilterOptions] = None,
        sort: Optional[SortOptions] = None,
    ) -> FilterPreset:
        presets = self.get_all()
        for position, preset in enumerate(presets):
            if preset.id == preset_id:
                changes = {
                    key: value
                    for key, value in (("name", name), ("filters", filters), ("sort", sort))
                    if value is not None
                }
                presets[position] = preset.model_copy(update=changes)
                self.save_all(presets)
                return presets[position]
        raise RecordNotFoundError("Filter preset", preset_id)

    def delete(self, preset_id: str) -> None:
        presets = self.get_all()
        remaining = [preset for preset in presets if preset.id != preset_id]
        if len(remaining) == len(presets):
            raise RecordNotFoundError("Filter preset", preset_id)
        self.save_all(remaining)
        logger.info(f"Filter preset deleted: preset_id={preset_id}")
