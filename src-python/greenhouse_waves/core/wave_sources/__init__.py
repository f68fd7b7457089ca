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

from .wave_source_spec import WaveSourceSpec
from .em_wave_source import EMWaveSource, WaveCreationSpec
from .sun_wave_source import SunWaveSource
from .ground_wave_source import GroundWaveSource, map_temperature_to_intensity

__all__ = ['WaveSourceSpec', 'EMWaveSource', 'WaveCreationSpec', 'SunWaveSource', 'GroundWaveSource',
           'map_temperature_to_intensity']
