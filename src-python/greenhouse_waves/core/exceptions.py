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

"""
Exceptions raised by the wave model.

Each class also derives from the builtin exception closest to the problem,
``ValueError`` for bad values and ``RuntimeError`` for bad state.
"""


class GreenhouseWavesError(Exception):
    """Base class for all errors raised by greenhouse_waves."""


class WaveConfigurationError(GreenhouseWavesError, ValueError):
    """
    A wave, source or settings object was constructed with values that can
    never produce a valid simulation (non-unit or horizontal direction,
    propagation limit on the wrong side of the origin, ...).
    """


class WaveStateError(GreenhouseWavesError, RuntimeError):
    """
    An operation referred to a relationship that does not exist, such as
    removing an attenuator that was never added.
    """


class IntensityRangeError(GreenhouseWavesError, ValueError):
    """A numeric value (intensity, attenuation, concentration, dt) is out of range."""
