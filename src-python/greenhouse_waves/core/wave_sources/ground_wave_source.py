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

import math
from typing import Callable

from .. import constants
from ..geometry import Point, geometry
from ..wave_collection import WaveCollection
from .em_wave_source import EMWaveSource
from .wave_source_spec import WaveSourceSpec

# The ground produces IR waves only when just warmer than the coldest night
MIN_WAVE_PRODUCTION_TEMPERATURE = constants.MINIMUM_EARTH_AT_NIGHT_TEMPERATURE


def map_temperature_to_intensity(temperature: float) -> float:
    """
    Map a ground temperature (Kelvin) to the intensity of the IR waves it emits.

    Returns:
        float: Intensity in [MINIMUM_GROUND_WAVE_INTENSITY, 1]
    """
    proportion = ((temperature - MIN_WAVE_PRODUCTION_TEMPERATURE)
                  / (constants.MAX_EXPECTED_TEMPERATURE - MIN_WAVE_PRODUCTION_TEMPERATURE))
    return min(max(proportion, constants.MINIMUM_GROUND_WAVE_INTENSITY), 1.0)


class GroundWaveSource(EMWaveSource):
    """
    Infrared light radiated upward by the ground on three slightly tilted
    lanes, with an intensity that follows the ground temperature.
    """

    def __init__(
        self,
        wave_collection: WaveCollection,
        ground_temperature: Callable[[], float],
        wave_start_altitude: float = 0.0,
        wave_end_altitude: float = constants.HEIGHT_OF_ATMOSPHERE,
        **kwargs
    ) -> None:
        straight_up = Point(*constants.STRAIGHT_UP)
        span = constants.SUNLIGHT_SPAN
        super().__init__(
            wave_collection,
            lambda: ground_temperature() > MIN_WAVE_PRODUCTION_TEMPERATURE + 1,
            constants.INFRARED_WAVELENGTH,
            wave_start_altitude,
            wave_end_altitude,
            [
                WaveSourceSpec(-span * 0.30, geometry.rotate_vec(straight_up, math.pi * 0.08)),
                WaveSourceSpec(-span * 0.075, geometry.rotate_vec(straight_up, -math.pi * 0.1)),
                WaveSourceSpec(span * 0.475, geometry.rotate_vec(straight_up, math.pi * 0.075)),
            ],
            wave_intensity=lambda: map_temperature_to_intensity(ground_temperature()),
            **kwargs
        )
