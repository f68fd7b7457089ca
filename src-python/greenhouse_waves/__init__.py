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

Greenhouse Waves
================

A simulation of sunlight and infrared waves traveling through the atmosphere,
for visualizing the greenhouse effect.

Main modules:
- core: Wave model (Wave, wave sources, WavesModel and its interactions)
- analysis: Export and statistics utilities
- examples: Example simulations

Quick start:
    from greenhouse_waves.core.waves_model import WavesModel
    model = WavesModel()
    model.step_model(0.1)
"""

__version__ = "0.1.0"

from .core.wave import Wave
from .core.waves_model import WavesModel
from .core.wave_settings import WaveSettings
from .logging_config import setup_logging

__all__ = [
    'Wave',
    'WavesModel',
    'WaveSettings',
    'setup_logging',
    '__version__',
]
