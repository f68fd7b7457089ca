"""
Copyright 2026 greenhouse-waves authors and contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from .exceptions import WaveStateError
from .geometry import Point
from .wave import Wave
from .wave_lineage import WaveLineage
from .wave_settings import WaveSettings

logger = logging.getLogger(__name__)


class WaveCollection:
    """
    The group of waves shared by the wave sources and the model.

    Membership is unordered. Every wave is created and disposed of through the
    collection, so it can tell the model whether its membership changed since
    the flag was last cleared.

    Attributes:
        settings (WaveSettings): Settings handed to every wave created here
        lineage (WaveLineage): Every wave added since the last clear, including
            the ones disposed of since
    """

    def __init__(self, settings: Optional[WaveSettings] = None):
        self.settings: WaveSettings = settings if settings is not None else WaveSettings()
        self._waves: Dict[str, Wave] = {}
        self._membership_changed: bool = False
        self.lineage = WaveLineage()

    def create_wave(
        self,
        wavelength: float,
        origin: Point,
        propagation_direction: Point,
        propagation_limit: float,
        intensity_at_start: float = 1.0,
        initial_phase_offset: float = 0.0,
        parent_uuid: Optional[str] = None,
        interaction_type: str = 'source',
        debug_tag: Optional[str] = None
    ) -> Wave:
        """
        Create a wave and add it to the collection.

        Returns:
            Wave: The new wave
        """
        wave = Wave(
            wavelength,
            origin,
            propagation_direction,
            propagation_limit,
            intensity_at_start=intensity_at_start,
            initial_phase_offset=initial_phase_offset,
            settings=self.settings,
            debug_tag=debug_tag
        )
        wave.parent_uuid = parent_uuid
        wave.interaction_type = interaction_type
        self.add(wave)
        return wave

    def add(self, wave: Wave) -> None:
        if wave.uuid in self._waves:
            raise WaveStateError(f"Wave {wave.uuid} is already in the collection")
        self._waves[wave.uuid] = wave
        self.lineage.register(wave)
        self._membership_changed = True
        logger.debug("Created %r", wave)

    def dispose(self, wave: Wave) -> None:
        if wave.uuid not in self._waves:
            raise WaveStateError(f"Wave {wave.uuid} is not in the collection")
        del self._waves[wave.uuid]
        self._membership_changed = True
        logger.debug("Disposed of %r", wave)

    def clear(self) -> None:
        if self._waves:
            self._membership_changed = True
        self._waves.clear()
        self.lineage.clear()

    def contains(self, wave: Wave) -> bool:
        return self._waves.get(wave.uuid) is wave

    def get(self, wave_uuid: str) -> Optional[Wave]:
        return self._waves.get(wave_uuid)

    def find(self, predicate: Callable[[Wave], bool]) -> Optional[Wave]:
        """First wave matching the predicate, or None."""
        for wave in self._waves.values():
            if predicate(wave):
                return wave
        return None

    def filter(self, predicate: Callable[[Wave], bool]) -> List[Wave]:
        return [wave for wave in self._waves.values() if predicate(wave)]

    @property
    def count(self) -> int:
        return len(self._waves)

    def __len__(self) -> int:
        return len(self._waves)

    def __iter__(self) -> Iterator[Wave]:
        # Iterate over a snapshot so callers may create or dispose of waves
        return iter(list(self._waves.values()))

    def __contains__(self, wave: Any) -> bool:
        return isinstance(wave, Wave) and self.contains(wave)

    # =========================================================================
    # Membership tracking
    # =========================================================================

    @property
    def membership_changed(self) -> bool:
        return self._membership_changed

    def clear_membership_changed(self) -> None:
        self._membership_changed = False

    # =========================================================================
    # State
    # =========================================================================

    def to_state_object(self) -> List[Dict[str, Any]]:
        return [wave.to_state_object() for wave in self._waves.values()]

    def apply_state(self, state: List[Dict[str, Any]]) -> None:
        """Replace the content of the collection with the saved waves."""
        self._waves = {}
        self.lineage.clear()
        for wave_state in state:
            wave = Wave.from_state_object(wave_state, settings=self.settings)
            self._waves[wave.uuid] = wave
            self.lineage.register(wave)
        self._membership_changed = True
