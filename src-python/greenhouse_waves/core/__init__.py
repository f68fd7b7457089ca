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

from .geometry import geometry, Point, Line, Geometry
from . import constants
from .exceptions import GreenhouseWavesError, WaveConfigurationError, WaveStateError, IntensityRangeError
from .wave_settings import WaveSettings
from .wave_intensity_change import FreeIntensityChange, AnchoredIntensityChange, WaveIntensityChange
from .wave_attenuator import AttenuationSource, WaveAttenuator
from .wave import Wave
from .wave_lineage import WaveLineage
from .wave_collection import WaveCollection
from .wave_sources import WaveSourceSpec, EMWaveSource, WaveCreationSpec, SunWaveSource, GroundWaveSource
from .model_elements import Cloud, AtmosphereLayer, GroundLayer, SunEnergySource, ConcentrationModel
from .waves_model import WavesModel, WaveAtmosphereInteraction, map_gas_concentration_to_attenuation
from .svg_renderer import WaveSVGRenderer

__all__ = [
    'geometry', 'Point', 'Line', 'Geometry',
    'constants',
    'GreenhouseWavesError', 'WaveConfigurationError', 'WaveStateError', 'IntensityRangeError',
    'WaveSettings',
    'FreeIntensityChange', 'AnchoredIntensityChange', 'WaveIntensityChange',
    'AttenuationSource', 'WaveAttenuator',
    'Wave',
    'WaveLineage',
    'WaveCollection',
    'WaveSourceSpec', 'EMWaveSource', 'WaveCreationSpec', 'SunWaveSource', 'GroundWaveSource',
    'Cloud', 'AtmosphereLayer', 'GroundLayer', 'SunEnergySource', 'ConcentrationModel',
    'WavesModel', 'WaveAtmosphereInteraction', 'map_gas_concentration_to_attenuation',
    'WaveSVGRenderer',
]
