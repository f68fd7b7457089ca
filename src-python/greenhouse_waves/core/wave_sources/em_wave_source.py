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

from .. import constants
from ..exceptions import WaveConfigurationError
from ..geometry import Point
from ..wave import Wave
from ..wave_collection import WaveCollection
from .wave_source_spec import WaveSourceSpec

logger = logging.getLogger(__name__)


@dataclass
class WaveCreationSpec:
    """
    A wave that is waiting to be created.

    Attributes:
        origin_x (float): Horizontal position of the lane, in meters
        propagation_direction (Point): Direction of the lane
        countdown (float): Seconds left before the wave is created
    """
    origin_x: float
    propagation_direction: Point
    countdown: float

    def matches(self, lane: WaveSourceSpec) -> bool:
        return (self.origin_x == lane.x_position
                and self.propagation_direction.x == lane.propagation_direction.x
                and self.propagation_direction.y == lane.propagation_direction.y)

    def to_state_object(self) -> Dict[str, Any]:
        return {
            'originX': self.origin_x,
            'propagationDirection': self.propagation_direction.to_dict(),
            'countdown': self.countdown,
        }

    @classmethod
    def from_state_object(cls, state: Dict[str, Any]) -> 'WaveCreationSpec':
        return cls(
            state['originX'],
            Point.from_dict(state['propagationDirection']),
            state['countdown']
        )


class EMWaveSource:
    """
    Produces electromagnetic waves along a set of lanes.

    On every step each lane gets exactly one sourced wave while production is
    enabled. When wave gaps are enabled every wave is given a random lifetime,
    after which it is cut loose from the source and replaced by a new one after
    a short pause, so that gaps travel along the lanes.

    Attributes:
        wavelength (float): Wavelength of the produced waves, in meters
        wave_start_altitude (float): Altitude the waves are emitted from
        wave_end_altitude (float): Altitude the waves propagate to
        wave_source_specs (list): The lanes, as WaveSourceSpec objects
        inter_wave_time (float): Pause before a replacement wave is created, in seconds
        wave_lifetime_range (tuple): (min, max) lifetime of a wave when gaps
            are enabled, in seconds
        wave_gaps_enabled (bool): Whether waves get a finite lifetime
    """

    def __init__(
        self,
        wave_collection: WaveCollection,
        wave_production_enabled: Callable[[], bool],
        wavelength: float,
        wave_start_altitude: float,
        wave_end_altitude: float,
        wave_source_specs: List[WaveSourceSpec],
        wave_intensity: Optional[Callable[[], float]] = None,
        inter_wave_time: float = constants.DEFAULT_INTER_WAVE_TIME,
        wave_lifetime_range: Tuple[float, float] = constants.DEFAULT_WAVE_LIFETIME_RANGE,
        wave_gaps_enabled: bool = False,
        rng: Optional[random.Random] = None
    ) -> None:
        """
        Initialize the source.

        Args:
            wave_collection: Collection the waves are created in
            wave_production_enabled: Returns whether waves should be produced
            wavelength: Wavelength of the waves, in meters
            wave_start_altitude: Altitude of the lanes, in meters
            wave_end_altitude: Propagation limit of the waves, in meters
            wave_source_specs: The lanes
            wave_intensity: Returns the intensity of new waves, 1 if None
            inter_wave_time: Seconds between a wave being cut loose and its replacement
            wave_lifetime_range: (min, max) lifetime in seconds when gaps are enabled
            wave_gaps_enabled: Give each wave a finite random lifetime
            rng: Random generator for the lifetimes, for reproducible runs

        Raises:
            WaveConfigurationError: If the altitudes or timing values are invalid.
        """
        if wave_start_altitude == wave_end_altitude:
            raise WaveConfigurationError("Wave start and end altitudes must differ")
        if inter_wave_time < 0:
            raise WaveConfigurationError(f"inter_wave_time must not be negative, got {inter_wave_time}")
        min_lifetime, max_lifetime = wave_lifetime_range
        if not 0 < min_lifetime <= max_lifetime:
            raise WaveConfigurationError(f"Invalid wave lifetime range {wave_lifetime_range}")

        self._wave_collection = wave_collection
        self._wave_production_enabled = wave_production_enabled
        self._wave_intensity = wave_intensity if wave_intensity is not None else (lambda: 1.0)
        self.wavelength = wavelength
        self.wave_start_altitude = wave_start_altitude
        self.wave_end_altitude = wave_end_altitude
        self.wave_source_specs = list(wave_source_specs)
        self.inter_wave_time = inter_wave_time
        self.wave_lifetime_range = (min_lifetime, max_lifetime)
        self.wave_gaps_enabled = wave_gaps_enabled
        self._rng = rng if rng is not None else random.Random()

        # Wave uuid -> lifetime in seconds, infinite when gaps are disabled
        self._waves_to_lifetimes: Dict[str, float] = {}
        self._wave_creation_queue: List[WaveCreationSpec] = []

    @property
    def waves_to_lifetimes(self) -> Dict[str, float]:
        return dict(self._waves_to_lifetimes)

    @property
    def wave_creation_queue(self) -> Tuple[WaveCreationSpec, ...]:
        return tuple(self._wave_creation_queue)

    def step(self, dt: float) -> None:
        """
        Create, cut loose and update the waves of every lane.

        Args:
            dt (float): Elapsed time in seconds
        """
        wave_intensity = self._wave_intensity()
        production_enabled = self._wave_production_enabled()

        for lane in self.wave_source_specs:
            matching_wave = self._wave_collection.find(
                lambda wave: self._is_sourced_wave_of_lane(wave, lane)
            )
            wave_is_queued = any(spec.matches(lane) for spec in self._wave_creation_queue)

            if matching_wave is None:
                if not wave_is_queued and production_enabled:
                    self.add_wave_to_model(lane.x_position, lane.propagation_direction)

            elif (not production_enabled
                  or matching_wave.existence_time > self._waves_to_lifetimes.get(matching_wave.uuid, math.inf)):
                matching_wave.is_sourced = False
                self._waves_to_lifetimes.pop(matching_wave.uuid, None)
                logger.debug("Cut %r loose from lane at x=%.0f", matching_wave, lane.x_position)
                if production_enabled:
                    self._wave_creation_queue.append(
                        WaveCreationSpec(lane.x_position, lane.propagation_direction, self.inter_wave_time)
                    )

            elif matching_wave.intensity_at_start != wave_intensity:
                matching_wave.set_intensity_at_start(wave_intensity)

        # Lanes get a new wave right away once production is enabled again
        if not production_enabled:
            self._wave_creation_queue.clear()

        for creation_spec in self._wave_creation_queue:
            creation_spec.countdown -= dt
            if creation_spec.countdown <= 0:
                self.add_wave_to_model(creation_spec.origin_x, creation_spec.propagation_direction)
        self._wave_creation_queue = [spec for spec in self._wave_creation_queue if spec.countdown > 0]

    def add_wave_to_model(self, origin_x: float, propagation_direction: Point) -> Wave:
        """
        Create a sourced wave for a lane and assign it a lifetime.

        Returns:
            Wave: The new wave
        """
        wave = self._wave_collection.create_wave(
            self.wavelength,
            Point(origin_x, self.wave_start_altitude),
            propagation_direction,
            self.wave_end_altitude,
            intensity_at_start=self._wave_intensity()
        )
        if self.wave_gaps_enabled:
            lifetime = self._rng.uniform(*self.wave_lifetime_range)
        else:
            lifetime = math.inf
        self._waves_to_lifetimes[wave.uuid] = lifetime
        return wave

    def reset(self) -> None:
        """Forget the lifetimes and queued waves, the waves themselves are left alone."""
        self._waves_to_lifetimes.clear()
        self._wave_creation_queue.clear()

    def to_state_object(self) -> Dict[str, Any]:
        return {
            # Infinite lifetimes are stored as None to stay JSON compatible
            'wavesToLifetimes': {
                wave_uuid: (None if math.isinf(lifetime) else lifetime)
                for wave_uuid, lifetime in self._waves_to_lifetimes.items()
            },
            'waveCreationQueue': [spec.to_state_object() for spec in self._wave_creation_queue],
        }

    def apply_state(self, state: Dict[str, Any]) -> None:
        self._waves_to_lifetimes = {
            wave_uuid: (math.inf if lifetime is None else lifetime)
            for wave_uuid, lifetime in state['wavesToLifetimes'].items()
        }
        self._wave_creation_queue = [
            WaveCreationSpec.from_state_object(spec) for spec in state['waveCreationQueue']
        ]

    def _is_sourced_wave_of_lane(self, wave: Wave, lane: WaveSourceSpec) -> bool:
        return (wave.wavelength == self.wavelength
                and wave.is_sourced
                and abs(wave.origin.x - lane.x_position) <= constants.POSITION_TOLERANCE
                and abs(wave.origin.y - self.wave_start_altitude) <= constants.POSITION_TOLERANCE)
