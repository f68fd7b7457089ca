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
The model elements that waves interact with.

These hold the values the wave interactions read
(position, altitude, absorption, albedo, whether the sun shines) and validate
them when they are set. Each element that can attenuate a wave carries the
``element_id`` issued by the model that owns it.
"""

import math
from typing import Dict, List, Optional

from . import constants
from .exceptions import IntensityRangeError, WaveConfigurationError
from .geometry import Point


class Cloud:
    """
    A cloud that reflects part of the sunlight that reaches it.

    Attributes:
        element_id (str): Id issued by the owning model
        position (Point): Center of the cloud, in meters
        width (float): Horizontal extent, in meters
        height (float): Vertical extent, in meters
        enabled (bool): Whether the cloud is present
    """

    def __init__(self, element_id: str, position: Point, width: float, height: float,
                 enabled: bool = False):
        self.element_id = element_id
        self.position = position
        self.width = width
        self.height = height
        self.enabled = enabled

    @property
    def width(self) -> float:
        return self._width

    @width.setter
    def width(self, value: float):
        if value <= 0:
            raise WaveConfigurationError(f"Cloud width must be positive, got {value}")
        self._width = value

    @property
    def altitude(self) -> float:
        return self.position.y

    @property
    def left_edge(self) -> float:
        return self.position.x - self.width / 2

    @property
    def right_edge(self) -> float:
        return self.position.x + self.width / 2

    def __repr__(self) -> str:
        return (f"Cloud(id={self.element_id!r}, position={self.position}, "
                f"width={self.width}, enabled={self.enabled})")


class AtmosphereLayer:
    """
    A thin horizontal layer of the atmosphere that absorbs part of the infrared
    energy crossing it.

    Attributes:
        element_id (str): Id issued by the owning model
        altitude (float): Altitude of the layer, in meters
        energy_absorption_proportion (float): Proportion of IR energy absorbed, in [0, 1]
    """

    def __init__(self, element_id: str, altitude: float, energy_absorption_proportion: float = 0.0):
        self.element_id = element_id
        self.altitude = altitude
        self.energy_absorption_proportion = energy_absorption_proportion

    @property
    def energy_absorption_proportion(self) -> float:
        return self._energy_absorption_proportion

    @energy_absorption_proportion.setter
    def energy_absorption_proportion(self, value: float):
        if not 0 <= value <= 1:
            raise IntensityRangeError(f"Absorption proportion must be in [0, 1], got {value}")
        self._energy_absorption_proportion = value

    def __repr__(self) -> str:
        return (f"AtmosphereLayer(id={self.element_id!r}, altitude={self.altitude:.0f}, "
                f"absorption={self.energy_absorption_proportion:.4f})")


class GroundLayer:
    """
    The surface of the Earth.

    Attributes:
        temperature (float): Surface temperature, in Kelvin
        albedo (float): Proportion of visible light reflected, in [0, 1]
    """
    GREEN_MEADOW_ALBEDO = constants.GREEN_MEADOW_ALBEDO
    PARTIALLY_GLACIATED_LAND_ALBEDO = constants.PARTIALLY_GLACIATED_LAND_ALBEDO

    def __init__(self, temperature: float = constants.MINIMUM_EARTH_AT_NIGHT_TEMPERATURE,
                 albedo: float = constants.GREEN_MEADOW_ALBEDO):
        self.altitude = 0.0
        self.temperature = temperature
        self.albedo = albedo

    @property
    def temperature(self) -> float:
        return self._temperature

    @temperature.setter
    def temperature(self, value: float):
        if value <= 0:
            raise WaveConfigurationError(f"Temperature must be positive Kelvin, got {value}")
        self._temperature = value

    @property
    def albedo(self) -> float:
        return self._albedo

    @albedo.setter
    def albedo(self, value: float):
        if not 0 <= value <= 1:
            raise IntensityRangeError(f"Albedo must be in [0, 1], got {value}")
        self._albedo = value

    @property
    def is_glaciated(self) -> bool:
        """True while the albedo is at or above the ice-age value."""
        return self._albedo >= self.PARTIALLY_GLACIATED_LAND_ALBEDO - constants.POSITION_TOLERANCE


class SunEnergySource:
    """
    The sun, which only matters to the waves through whether it is shining.
    """

    def __init__(self, is_shining: bool = True):
        self.is_shining = is_shining


# =============================================================================
# Greenhouse gas concentration
# =============================================================================

# Dates for which the concentration is known
ICE_AGE = 'ice_age'
SEVENTEEN_FIFTY = '1750'
NINETEEN_FIFTY = '1950'
TWENTY_TWENTY = '2020'

DATE_TO_CONCENTRATION = {
    ICE_AGE: 0.625,
    SEVENTEEN_FIFTY: 0.7147,
    NINETEEN_FIFTY: 0.7182,
    TWENTY_TWENTY: 0.7446,
}

# Ways the concentration can be controlled
BY_VALUE = 'by_value'
BY_DATE = 'by_date'


def create_atmosphere_layers(
    element_ids: List[str],
    height_of_atmosphere: float = constants.HEIGHT_OF_ATMOSPHERE
) -> List[AtmosphereLayer]:
    """
    Create evenly spaced atmosphere layers, lowest first.

    Args:
        element_ids: One id per layer, the length sets the number of layers
        height_of_atmosphere: Altitude of the top of the atmosphere, in meters
    """
    spacing = height_of_atmosphere / (len(element_ids) + 1)
    return [AtmosphereLayer(element_id, spacing * (index + 1))
            for index, element_id in enumerate(element_ids)]


class ConcentrationModel:
    """
    Greenhouse gas concentration, set either directly or by picking a date.

    Setting the concentration updates the absorption of every atmosphere layer,
    scaled by the density of the air at the layer's altitude. Picking the ice
    age date covers part of the land with glaciers, which raises the albedo of
    the ground.

    Attributes:
        control_mode (str): 'by_value' or 'by_date'
        date (str): One of the keys of DATE_TO_CONCENTRATION
        manually_controlled_concentration (float): Concentration in [0, 1]
            used in 'by_value' mode
    """
    VALID_CONTROL_MODES = [BY_VALUE, BY_DATE]

    def __init__(self, atmosphere_layers: List[AtmosphereLayer], ground_layer: Optional[GroundLayer] = None):
        self._atmosphere_layers = atmosphere_layers
        self._ground_layer = ground_layer
        self._control_mode = BY_VALUE
        self._date = SEVENTEEN_FIFTY
        self._manually_controlled_concentration = 0.5
        self._update_dependents()

    @property
    def control_mode(self) -> str:
        return self._control_mode

    @control_mode.setter
    def control_mode(self, value: str):
        if value not in self.VALID_CONTROL_MODES:
            raise WaveConfigurationError(
                f"Invalid control_mode '{value}'. "
                f"Valid options: {self.VALID_CONTROL_MODES}"
            )
        self._control_mode = value
        self._update_dependents()

    @property
    def date(self) -> str:
        return self._date

    @date.setter
    def date(self, value: str):
        if value not in DATE_TO_CONCENTRATION:
            raise WaveConfigurationError(
                f"Invalid date '{value}'. "
                f"Valid options: {list(DATE_TO_CONCENTRATION)}"
            )
        self._date = value
        self._update_dependents()

    @property
    def manually_controlled_concentration(self) -> float:
        return self._manually_controlled_concentration

    @manually_controlled_concentration.setter
    def manually_controlled_concentration(self, value: float):
        if not 0 <= value <= 1:
            raise IntensityRangeError(f"Concentration must be in [0, 1], got {value}")
        self._manually_controlled_concentration = value
        self._update_dependents()

    @property
    def concentration(self) -> float:
        if self._control_mode == BY_DATE:
            return DATE_TO_CONCENTRATION[self._date]
        return self._manually_controlled_concentration

    def reset(self):
        self._control_mode = BY_VALUE
        self._date = SEVENTEEN_FIFTY
        self._manually_controlled_concentration = 0.5
        self._update_dependents()

    def to_state_object(self) -> Dict[str, object]:
        return {
            'controlMode': self._control_mode,
            'date': self._date,
            'manuallyControlledConcentration': self._manually_controlled_concentration,
        }

    def apply_state(self, state: Dict[str, object]):
        self.control_mode = state['controlMode']
        self.date = state['date']
        self.manually_controlled_concentration = state['manuallyControlledConcentration']

    def _update_dependents(self):
        concentration = self.concentration
        for layer in self._atmosphere_layers:
            # Absorption falls off with the density of the air
            proportion_at_sea_level = 0.85 * concentration
            layer.energy_absorption_proportion = proportion_at_sea_level * math.exp(
                -layer.altitude / constants.SCALE_HEIGHT_OF_ATMOSPHERE
            )
        if self._ground_layer is not None:
            if self._date == ICE_AGE and self._control_mode == BY_DATE:
                self._ground_layer.albedo = GroundLayer.PARTIALLY_GLACIATED_LAND_ALBEDO
            else:
                self._ground_layer.albedo = GroundLayer.GREEN_MEADOW_ALBEDO
