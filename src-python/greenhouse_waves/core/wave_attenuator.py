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
from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class AttenuationSource(Protocol):
    """
    Anything in the model that can attenuate a wave passing through it.

    Attributes:
        element_id (str): Stable id issued by the owning model, used to key the
            attenuators on each wave.
        altitude (float): Altitude of the element, in meters.
    """
    element_id: str
    altitude: float


@dataclass
class WaveAttenuator:
    """
    A point along a wave where attenuation (reduction in intensity) occurs.

    Attributes:
        attenuation (float): Normalized amount of attenuation, 0 means the
            intensity passes unchanged and 1 means it is reduced to zero.
        distance_from_start (float): Distance from the start of the wave, in
            meters. Attenuators are fixed in absolute space, so this shrinks as
            an unsourced wave moves forward.
    """
    attenuation: float
    distance_from_start: float

    def to_state_object(self) -> Dict[str, Any]:
        return {
            'attenuation': self.attenuation,
            'distanceFromStart': self.distance_from_start,
        }

    @classmethod
    def from_state_object(cls, state: Dict[str, Any]) -> 'WaveAttenuator':
        return cls(state['attenuation'], state['distanceFromStart'])
