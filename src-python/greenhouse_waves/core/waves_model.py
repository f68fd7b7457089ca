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

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import constants
from .exceptions import IntensityRangeError, WaveConfigurationError, WaveStateError
from .geometry import Line, Point, geometry
from .model_elements import (
    AtmosphereLayer,
    Cloud,
    ConcentrationModel,
    GroundLayer,
    SunEnergySource,
    create_atmosphere_layers,
)
from .wave import Wave
from .wave_collection import WaveCollection
from .wave_settings import WaveSettings
from .wave_sources import GroundWaveSource, SunWaveSource

logger = logging.getLogger(__name__)

# Layers (by index, lowest first) that interact with the IR waves, and the
# horizontal range over which each of them does so
ATMOSPHERE_LAYER_X_RANGES = [
    (4, (-constants.SUNLIGHT_SPAN / 2, -constants.SUNLIGHT_SPAN / 4)),
    (6, (-constants.SUNLIGHT_SPAN / 4, constants.SUNLIGHT_SPAN / 4)),
    (3, (constants.SUNLIGHT_SPAN * 0.25, constants.SUNLIGHT_SPAN)),
]

# Position and size of the cloud, in meters
CLOUD_POSITION = (-16000.0, 20000.0)
CLOUD_WIDTH = 18000.0
CLOUD_HEIGHT = 4000.0


def map_gas_concentration_to_attenuation(concentration: float) -> float:
    """
    Map a greenhouse gas concentration to the attenuation of the IR waves that
    cross an atmosphere layer.

    The curve is an empirical fit that makes the waves look right with the
    intensities produced by the ground wave source.

    Args:
        concentration (float): Normalized concentration, in [0, 1]

    Returns:
        float: Attenuation, f(0) = 0, f(0.5) = 0.62, f(1) = 0.82
    """
    if not 0 <= concentration <= 1:
        raise IntensityRangeError(f"Concentration must be in [0, 1], got {concentration}")
    return -0.84 * concentration ** 2 + 1.66 * concentration


@dataclass
class WaveAtmosphereInteraction:
    """
    An IR wave from the ground being absorbed by an atmosphere layer, and the
    wave re-emitted downward by the layer as a result.
    """
    atmosphere_layer: AtmosphereLayer
    source_wave: Wave
    emitted_wave: Wave

    def to_state_object(self) -> Dict[str, str]:
        return {
            'atmosphereLayer': self.atmosphere_layer.element_id,
            'sourceWave': self.source_wave.uuid,
            'emittedWave': self.emitted_wave.uuid,
        }


class WavesModel:
    """
    The wave side of the greenhouse effect model.

    Sunlight comes down as visible waves and the ground radiates IR waves
    upward. On every step the model looks for waves that cross the cloud, an
    atmosphere layer or the glaciated ground, and creates or retires the
    waves that result from those interactions. The three kinds of interaction
    are independent of each other.

    Attributes:
        settings (WaveSettings): Settings shared by all the waves
        wave_collection (WaveCollection): All the waves in the model
        sun_energy_source (SunEnergySource): Whether the sun shines
        ground_layer (GroundLayer): Temperature and albedo of the ground
        atmosphere_layers (list): AtmosphereLayer objects, lowest first
        concentration_model (ConcentrationModel): Greenhouse gas concentration
        cloud (Cloud): The cloud that reflects sunlight when enabled
        sun_wave_source (SunWaveSource): Produces the visible waves
        ground_wave_source (GroundWaveSource): Produces the IR waves
        cloud_reflected_waves (dict): Source wave uuid -> wave reflected by the cloud
        glacier_reflected_waves (dict): Source wave uuid -> wave reflected by the glacier
        wave_atmosphere_interactions (list): Active WaveAtmosphereInteraction objects
    """

    def __init__(
        self,
        settings: Optional[WaveSettings] = None,
        number_of_atmosphere_layers: int = constants.DEFAULT_NUMBER_OF_ATMOSPHERE_LAYERS,
        wave_gaps_enabled: bool = False,
        rng: Optional[random.Random] = None
    ) -> None:
        """
        Initialize the model.

        Args:
            settings: Settings shared by all the waves, defaults if None
            number_of_atmosphere_layers: Number of evenly spaced atmosphere layers
            wave_gaps_enabled: Give the source waves finite lifetimes
            rng: Random generator for the wave lifetimes

        Raises:
            WaveConfigurationError: If there are too few atmosphere layers for
                the layers that interact with the IR waves.
        """
        highest_interacting_layer = max(index for index, _ in ATMOSPHERE_LAYER_X_RANGES)
        if number_of_atmosphere_layers <= highest_interacting_layer:
            raise WaveConfigurationError(
                f"At least {highest_interacting_layer + 1} atmosphere layers are needed, "
                f"got {number_of_atmosphere_layers}"
            )

        self.settings: WaveSettings = settings if settings is not None else WaveSettings()
        self._element_counts: Dict[str, int] = {}
        self._waves_changed_listeners: List[Callable[[], None]] = []

        self.wave_collection = WaveCollection(self.settings)

        self.sun_energy_source = SunEnergySource()
        self.ground_layer = GroundLayer()
        self.atmosphere_layers: List[AtmosphereLayer] = create_atmosphere_layers(
            [self.issue_element_id('atmosphere-layer') for _ in range(number_of_atmosphere_layers)]
        )
        self.concentration_model = ConcentrationModel(self.atmosphere_layers, self.ground_layer)
        self.cloud = Cloud(self.issue_element_id('cloud'), Point(*CLOUD_POSITION), CLOUD_WIDTH, CLOUD_HEIGHT)

        self.atmosphere_layer_x_ranges: List[Tuple[AtmosphereLayer, Tuple[float, float]]] = [
            (self.atmosphere_layers[index], x_range) for index, x_range in ATMOSPHERE_LAYER_X_RANGES
        ]

        self.sun_wave_source = SunWaveSource(
            self.wave_collection,
            lambda: self.sun_energy_source.is_shining,
            constants.HEIGHT_OF_ATMOSPHERE,
            0.0,
            wave_gaps_enabled=wave_gaps_enabled,
            rng=rng
        )
        self.ground_wave_source = GroundWaveSource(
            self.wave_collection,
            lambda: self.ground_layer.temperature,
            0.0,
            constants.HEIGHT_OF_ATMOSPHERE,
            wave_gaps_enabled=wave_gaps_enabled,
            rng=rng
        )

        self.cloud_reflected_waves: Dict[str, Wave] = {}
        self.glacier_reflected_waves: Dict[str, Wave] = {}
        self.wave_atmosphere_interactions: List[WaveAtmosphereInteraction] = []

    # =========================================================================
    # Public interface
    # =========================================================================

    @property
    def waves(self) -> Tuple[Wave, ...]:
        """Read-only snapshot of the waves currently in the model."""
        return tuple(self.wave_collection)

    @property
    def concentration(self) -> float:
        return self.concentration_model.concentration

    def issue_element_id(self, kind: str) -> str:
        """
        Issue a stable id for a model element that can attenuate waves.

        Ids are issued in creation order, so two models built the same way
        issue the same ids and can exchange saved state.
        """
        count = self._element_counts.get(kind, 0)
        self._element_counts[kind] = count + 1
        return f"{kind}-{count}"

    def add_waves_changed_listener(self, listener: Callable[[], None]) -> None:
        """Call listener whenever waves are added to or removed from the model."""
        self._waves_changed_listeners.append(listener)

    def remove_waves_changed_listener(self, listener: Callable[[], None]) -> None:
        self._waves_changed_listeners.remove(listener)

    def step_model(self, dt: float) -> None:
        """
        Advance the model in time.

        Time steps longer than ``settings.max_dt`` are split into equal sub-steps
        so that the interactions are evaluated often enough.

        Args:
            dt (float): Elapsed time in seconds

        Raises:
            IntensityRangeError: If dt is negative.
        """
        if dt < 0:
            raise IntensityRangeError(f"Time step must not be negative, got {dt}")

        self.wave_collection.clear_membership_changed()
        number_of_sub_steps = max(1, math.ceil(dt / self.settings.max_dt - 1E-9))
        sub_step_dt = dt / number_of_sub_steps
        for _ in range(number_of_sub_steps):
            self._step_once(sub_step_dt)

        if self.wave_collection.membership_changed:
            self.wave_collection.clear_membership_changed()
            self._notify_waves_changed()

    def reset(self) -> None:
        """Remove every wave and return all the elements to their initial state."""
        had_waves = self.wave_collection.count > 0
        self.wave_collection.clear()
        self.cloud_reflected_waves.clear()
        self.glacier_reflected_waves.clear()
        self.wave_atmosphere_interactions.clear()
        self.sun_wave_source.reset()
        self.ground_wave_source.reset()
        self.cloud.enabled = False
        self.sun_energy_source.is_shining = True
        self.ground_layer.temperature = constants.MINIMUM_EARTH_AT_NIGHT_TEMPERATURE
        self.concentration_model.reset()
        self.wave_collection.clear_membership_changed()
        logger.debug("Model reset")
        if had_waves:
            self._notify_waves_changed()

    # =========================================================================
    # Stepping
    # =========================================================================

    def _step_once(self, dt: float) -> None:
        self.sun_wave_source.step(dt)
        self.ground_wave_source.step(dt)
        for wave in self.wave_collection:
            wave.step(dt)

        self._update_wave_cloud_interactions()
        self._update_wave_atmosphere_interactions()
        self._update_wave_glacier_interactions()

        for wave in self.wave_collection.filter(lambda w: w.is_completely_propagated()):
            self.wave_collection.dispose(wave)

    def _notify_waves_changed(self) -> None:
        for listener in list(self._waves_changed_listeners):
            listener()

    def _is_sunlight(self, wave: Wave) -> bool:
        return (wave.is_visible()
                and abs(wave.origin.y - self.sun_wave_source.wave_start_altitude) <= constants.POSITION_TOLERANCE
                and wave.propagation_direction.y < 0)

    @staticmethod
    def _distance_to_altitude(wave: Wave, altitude: float) -> float:
        """Distance from the start of the wave to the given altitude, along the wave."""
        return (altitude - wave.start_point.y) / wave.propagation_direction.y

    # =========================================================================
    # Cloud reflection
    # =========================================================================

    def _update_wave_cloud_interactions(self) -> None:
        cloud = self.cloud

        for source_uuid, reflected_wave in list(self.cloud_reflected_waves.items()):
            source_wave = self.wave_collection.get(source_uuid)
            if not cloud.enabled or source_wave is None or source_wave.start_point.y < cloud.altitude:
                reflected_wave.is_sourced = False
                del self.cloud_reflected_waves[source_uuid]
                logger.debug("Cloud reflection of wave %s ended", source_uuid)

        if not cloud.enabled:
            for wave in self.wave_collection:
                if wave.has_attenuator(cloud):
                    wave.remove_attenuator(cloud)
            return

        waves_crossing_the_cloud = self.wave_collection.filter(
            lambda wave: (self._is_sunlight(wave)
                          and wave.start_point.y > cloud.altitude
                          and wave.get_end_altitude() < cloud.altitude
                          and cloud.left_edge < wave.start_point.x < cloud.right_edge)
        )

        for incident_wave in waves_crossing_the_cloud:
            if incident_wave.uuid not in self.cloud_reflected_waves:
                rotation = -math.pi * 0.1 if incident_wave.origin.x > cloud.position.x else math.pi * 0.1
                reflected_wave = self.wave_collection.create_wave(
                    incident_wave.wavelength,
                    Point(incident_wave.origin.x, cloud.altitude),
                    geometry.rotate_vec(Point(*constants.STRAIGHT_UP), rotation),
                    constants.HEIGHT_OF_ATMOSPHERE,
                    intensity_at_start=incident_wave.intensity_at_start * constants.VISUAL_CLOUD_REFLECTIVITY,
                    initial_phase_offset=(incident_wave.get_phase_at(incident_wave.origin.y - cloud.altitude)
                                          + math.pi) % constants.TWO_PI,
                    parent_uuid=incident_wave.uuid,
                    interaction_type='cloud_reflection'
                )
                self.cloud_reflected_waves[incident_wave.uuid] = reflected_wave
                logger.debug("Cloud reflected %r as %r", incident_wave, reflected_wave)

            if not incident_wave.has_attenuator(cloud):
                incident_wave.add_attenuator(
                    self._distance_to_altitude(incident_wave, cloud.altitude),
                    constants.VISUAL_CLOUD_REFLECTIVITY,
                    cloud
                )

    # =========================================================================
    # Atmosphere absorption and re-emission
    # =========================================================================

    def _update_wave_atmosphere_interactions(self) -> None:
        concentration = self.concentration_model.concentration
        ir_wave_attenuation = map_gas_concentration_to_attenuation(concentration)

        for interaction in list(self.wave_atmosphere_interactions):
            source_wave = interaction.source_wave
            layer = interaction.atmosphere_layer
            if (concentration == 0
                    or not self.wave_collection.contains(source_wave)
                    or source_wave.start_point.y > layer.altitude
                    or not source_wave.has_attenuator(layer)):
                interaction.emitted_wave.is_sourced = False
                if source_wave.has_attenuator(layer):
                    source_wave.remove_attenuator(layer)
                self.wave_atmosphere_interactions.remove(interaction)
                logger.debug("Interaction of %s with %s ended", source_wave.uuid, layer.element_id)
            else:
                source_wave.set_attenuation(layer, ir_wave_attenuation)
                emitted_wave_intensity = source_wave.intensity_at_start * ir_wave_attenuation
                if interaction.emitted_wave.intensity_at_start != emitted_wave_intensity:
                    interaction.emitted_wave.set_intensity_at_start(emitted_wave_intensity)

        waves_from_the_ground = self.wave_collection.filter(
            lambda wave: (wave.is_infrared()
                          and abs(wave.origin.y - self.ground_layer.altitude) <= constants.POSITION_TOLERANCE
                          and wave.propagation_direction.y > 0
                          and wave.length > 0)
        )

        for wave_from_the_ground in waves_from_the_ground:
            wave_line = Line(wave_from_the_ground.start_point, wave_from_the_ground.get_end_point())

            for layer, (x_min, x_max) in self.atmosphere_layer_x_ranges:
                if (layer.energy_absorption_proportion <= 0
                        or wave_from_the_ground.start_point.y >= layer.altitude
                        or wave_from_the_ground.has_attenuator(layer)
                        or self._has_atmosphere_interaction(wave_from_the_ground, layer)):
                    continue

                atmosphere_line = Line(Point(x_min, layer.altitude), Point(x_max, layer.altitude))
                intersection = geometry.segments_intersection(wave_line, atmosphere_line)
                if intersection is None:
                    continue

                direction = wave_from_the_ground.propagation_direction
                origin_to_intersection = (layer.altitude - wave_from_the_ground.origin.y) / direction.y
                emitted_wave = self.wave_collection.create_wave(
                    wave_from_the_ground.wavelength,
                    intersection,
                    Point(direction.x, -direction.y),
                    self.ground_layer.altitude,
                    intensity_at_start=wave_from_the_ground.intensity_at_start * ir_wave_attenuation,
                    initial_phase_offset=(wave_from_the_ground.get_phase_at(origin_to_intersection)
                                          + math.pi) % constants.TWO_PI,
                    parent_uuid=wave_from_the_ground.uuid,
                    interaction_type='atmosphere_emission'
                )
                wave_from_the_ground.add_attenuator(
                    self._distance_to_altitude(wave_from_the_ground, layer.altitude),
                    ir_wave_attenuation,
                    layer
                )
                self.wave_atmosphere_interactions.append(
                    WaveAtmosphereInteraction(layer, wave_from_the_ground, emitted_wave)
                )
                logger.debug("%s absorbed %r and emitted %r", layer.element_id, wave_from_the_ground, emitted_wave)

    def _has_atmosphere_interaction(self, source_wave: Wave, layer: AtmosphereLayer) -> bool:
        return any(interaction.source_wave is source_wave and interaction.atmosphere_layer is layer
                   for interaction in self.wave_atmosphere_interactions)

    # =========================================================================
    # Glacier reflection
    # =========================================================================

    def _update_wave_glacier_interactions(self) -> None:
        glaciated = self.ground_layer.is_glaciated

        for source_uuid, reflected_wave in list(self.glacier_reflected_waves.items()):
            if not glaciated or self.wave_collection.get(source_uuid) is None:
                reflected_wave.is_sourced = False
                del self.glacier_reflected_waves[source_uuid]
                logger.debug("Glacier reflection of wave %s ended", source_uuid)

        if not glaciated:
            return

        waves_hitting_the_glacier = self.wave_collection.filter(
            lambda wave: (self._is_sunlight(wave)
                          and wave.origin.x > 0
                          and abs(wave.get_end_altitude() - self.ground_layer.altitude)
                          <= constants.POSITION_TOLERANCE)
        )

        for incident_wave in waves_hitting_the_glacier:
            if incident_wave.uuid in self.glacier_reflected_waves:
                continue
            reflected_wave = self.wave_collection.create_wave(
                incident_wave.wavelength,
                Point(incident_wave.origin.x, self.ground_layer.altitude),
                geometry.rotate_vec(Point(*constants.STRAIGHT_UP), math.pi * 0.05),
                constants.HEIGHT_OF_ATMOSPHERE,
                intensity_at_start=constants.GLACIER_REFLECTED_INTENSITY,
                initial_phase_offset=(incident_wave.get_phase_at(
                    incident_wave.origin.y - self.ground_layer.altitude) + math.pi) % constants.TWO_PI,
                parent_uuid=incident_wave.uuid,
                interaction_type='glacier_reflection'
            )
            self.glacier_reflected_waves[incident_wave.uuid] = reflected_wave
            logger.debug("Glacier reflected %r as %r", incident_wave, reflected_wave)

    # =========================================================================
    # State
    # =========================================================================

    def to_state_object(self) -> Dict[str, Any]:
        """
        Save the logical state of the model as a JSON-compatible dictionary.

        Waves are referenced by uuid and model elements by element id.
        """
        return {
            'waves': self.wave_collection.to_state_object(),
            'sunWaveSource': self.sun_wave_source.to_state_object(),
            'groundWaveSource': self.ground_wave_source.to_state_object(),
            'cloudReflectedWaves': {
                source_uuid: reflected_wave.uuid
                for source_uuid, reflected_wave in self.cloud_reflected_waves.items()
            },
            'glacierReflectedWaves': {
                source_uuid: reflected_wave.uuid
                for source_uuid, reflected_wave in self.glacier_reflected_waves.items()
            },
            'waveAtmosphereInteractions': [
                interaction.to_state_object() for interaction in self.wave_atmosphere_interactions
            ],
            'cloud': {
                'enabled': self.cloud.enabled,
                'position': self.cloud.position.to_dict(),
                'width': self.cloud.width,
            },
            'sunIsShining': self.sun_energy_source.is_shining,
            'groundTemperature': self.ground_layer.temperature,
            'concentration': self.concentration_model.to_state_object(),
            'groundAlbedo': self.ground_layer.albedo,
        }

    def apply_state(self, state: Dict[str, Any]) -> None:
        """
        Restore the output of ``to_state_object()``.

        Raises:
            WaveStateError: If the state refers to a wave or element that
                doesn't exist.
        """
        self.cloud.enabled = state['cloud']['enabled']
        self.cloud.position = Point.from_dict(state['cloud']['position'])
        self.cloud.width = state['cloud']['width']
        self.sun_energy_source.is_shining = state['sunIsShining']
        self.ground_layer.temperature = state['groundTemperature']
        self.concentration_model.apply_state(state['concentration'])
        self.ground_layer.albedo = state['groundAlbedo']

        self.wave_collection.apply_state(state['waves'])
        self.sun_wave_source.apply_state(state['sunWaveSource'])
        self.ground_wave_source.apply_state(state['groundWaveSource'])

        self.cloud_reflected_waves = {
            source_uuid: self._get_wave_for_state(reflected_uuid)
            for source_uuid, reflected_uuid in state['cloudReflectedWaves'].items()
        }
        self.glacier_reflected_waves = {
            source_uuid: self._get_wave_for_state(reflected_uuid)
            for source_uuid, reflected_uuid in state['glacierReflectedWaves'].items()
        }

        layers_by_id = {layer.element_id: layer for layer in self.atmosphere_layers}
        self.wave_atmosphere_interactions = []
        for interaction_state in state['waveAtmosphereInteractions']:
            layer = layers_by_id.get(interaction_state['atmosphereLayer'])
            if layer is None:
                raise WaveStateError(f"Unknown atmosphere layer {interaction_state['atmosphereLayer']}")
            self.wave_atmosphere_interactions.append(WaveAtmosphereInteraction(
                layer,
                self._get_wave_for_state(interaction_state['sourceWave']),
                self._get_wave_for_state(interaction_state['emittedWave'])
            ))

        self.wave_collection.clear_membership_changed()
        self._notify_waves_changed()

    def _get_wave_for_state(self, wave_uuid: str) -> Wave:
        wave = self.wave_collection.get(wave_uuid)
        if wave is None:
            raise WaveStateError(f"Saved state refers to unknown wave {wave_uuid}")
        return wave
