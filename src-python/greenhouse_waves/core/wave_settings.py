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

from dataclasses import dataclass, field
from typing import Dict

from . import constants
from .exceptions import WaveConfigurationError


@dataclass
class WaveSettings:
    """
    Per-model configuration shared by every wave.

    A single instance is normally created by the WavesModel and handed to each
    wave it creates, so there is no process-wide mutable state.

    Attributes:
        propagation_speed (float): Speed of the waves, in meters/second
        phase_rate (float): Phase change rate, in radians/second
        rendering_wavelengths (dict): Map of real wavelength -> wavelength used
            when computing phase, in meters
        min_intensity_change (float): Intensity/attenuation changes smaller than
            this are ignored
        min_inter_change_distance (float): Intensity changes closer than this
            (in meters) are merged instead of duplicated
        intensity_change_offset (float): Offset (in meters) at which a new
            change is placed next to an existing position
        max_dt (float): Longest time step, in seconds, the model integrates at once
    """
    propagation_speed: float = constants.SPEED_OF_LIGHT
    phase_rate: float = constants.PHASE_RATE
    rendering_wavelengths: Dict[float, float] = field(
        default_factory=lambda: dict(constants.REAL_TO_RENDERING_WAVELENGTH)
    )
    min_intensity_change: float = constants.MIN_INTENSITY_CHANGE
    min_inter_change_distance: float = constants.MIN_INTER_CHANGE_DISTANCE
    intensity_change_offset: float = constants.INTENSITY_CHANGE_OFFSET
    max_dt: float = constants.MAX_DT

    def __post_init__(self):
        if self.propagation_speed <= 0:
            raise WaveConfigurationError(
                f"propagation_speed must be positive, got {self.propagation_speed}"
            )
        if self.intensity_change_offset <= 0:
            raise WaveConfigurationError(
                f"intensity_change_offset must be positive, got {self.intensity_change_offset}"
            )
        if self.min_intensity_change < 0 or self.min_inter_change_distance < 0:
            raise WaveConfigurationError("thresholds must not be negative")
        if self.max_dt <= 0:
            raise WaveConfigurationError(f"max_dt must be positive, got {self.max_dt}")
        for wavelength, rendering_wavelength in self.rendering_wavelengths.items():
            if rendering_wavelength <= 0:
                raise WaveConfigurationError(
                    f"Invalid rendering wavelength {rendering_wavelength} for {wavelength}"
                )

    def get_rendering_wavelength(self, wavelength: float) -> float:
        """
        Get the wavelength used to compute the phase of a wave.

        Raises:
            WaveConfigurationError: If no rendering wavelength is configured.
        """
        try:
            return self.rendering_wavelengths[wavelength]
        except KeyError:
            raise WaveConfigurationError(
                f"No rendering wavelength configured for wavelength {wavelength}. "
                f"Configured: {sorted(self.rendering_wavelengths)}"
            ) from None
