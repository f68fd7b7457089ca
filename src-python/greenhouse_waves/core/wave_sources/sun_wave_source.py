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

from typing import Callable

from .. import constants
from ..geometry import Point
from ..wave_collection import WaveCollection
from .em_wave_source import EMWaveSource
from .wave_source_spec import WaveSourceSpec


class SunWaveSource(EMWaveSource):
    """
    Visible light coming down from the sun on two lanes, one above the cloud
    and one above the side of the ground that may be glaciated.
    """

    def __init__(
        self,
        wave_collection: WaveCollection,
        sun_is_shining: Callable[[], bool],
        wave_start_altitude: float = constants.HEIGHT_OF_ATMOSPHERE,
        wave_end_altitude: float = 0.0,
        **kwargs
    ) -> None:
        straight_down = Point(*constants.STRAIGHT_DOWN)
        kwargs.setdefault('wave_intensity', lambda: constants.SUN_WAVE_INTENSITY)
        super().__init__(
            wave_collection,
            sun_is_shining,
            constants.VISIBLE_WAVELENGTH,
            wave_start_altitude,
            wave_end_altitude,
            [
                WaveSourceSpec(-constants.SUNLIGHT_SPAN * 0.15, straight_down),
                WaveSourceSpec(constants.SUNLIGHT_SPAN * 0.20, straight_down),
            ],
            **kwargs
        )
