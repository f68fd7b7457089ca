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

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass
class FreeIntensityChange:
    """
    A change in a wave's intensity that travels with the wave.

    The change defines the intensity of the wave beyond its position when moving
    outward from the wave's start point. It contains no information about the
    intensity before that position.

    Attributes:
        post_change_intensity (float): Intensity after this change
        distance_from_start (float): Distance from the start of the wave, in meters
    """
    post_change_intensity: float
    distance_from_start: float

    @property
    def anchored_to(self) -> Optional[str]:
        """Free changes are not anchored to anything."""
        return None

    @property
    def is_anchored(self) -> bool:
        return False

    def to_state_object(self) -> Dict[str, Any]:
        return {
            'postChangeIntensity': self.post_change_intensity,
            'distanceFromStart': self.distance_from_start,
            'anchoredTo': None,
        }


@dataclass
class AnchoredIntensityChange:
    """
    A change in a wave's intensity that stays at the position of the model
    element causing it (a cloud, an atmosphere layer), so it doesn't move in
    absolute space while the wave propagates past it.

    Attributes:
        post_change_intensity (float): Intensity after this change
        distance_from_start (float): Distance from the start of the wave, in meters
        anchored_to (str): Id of the model element causing the change
    """
    post_change_intensity: float
    distance_from_start: float
    anchored_to: str

    @property
    def is_anchored(self) -> bool:
        return True

    def detached(self, post_change_intensity: Optional[float] = None) -> FreeIntensityChange:
        """
        Create the free counterpart of this change, at the same position.

        Args:
            post_change_intensity: Value for the free change, defaults to the
                current value of this one.
        """
        if post_change_intensity is None:
            post_change_intensity = self.post_change_intensity
        return FreeIntensityChange(post_change_intensity, self.distance_from_start)

    def to_state_object(self) -> Dict[str, Any]:
        return {
            'postChangeIntensity': self.post_change_intensity,
            'distanceFromStart': self.distance_from_start,
            'anchoredTo': self.anchored_to,
        }


WaveIntensityChange = Union[FreeIntensityChange, AnchoredIntensityChange]


def intensity_change_from_state_object(state: Dict[str, Any]) -> WaveIntensityChange:
    """Rebuild either variant from the output of ``to_state_object()``."""
    if state.get('anchoredTo') is None:
        return FreeIntensityChange(state['postChangeIntensity'], state['distanceFromStart'])
    return AnchoredIntensityChange(
        state['postChangeIntensity'],
        state['distanceFromStart'],
        state['anchoredTo']
    )
