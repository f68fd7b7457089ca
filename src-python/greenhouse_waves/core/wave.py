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
import uuid as _uuid_mod
from typing import Any, Dict, List, Optional, Tuple, Union

from . import constants
from .exceptions import IntensityRangeError, WaveConfigurationError, WaveStateError
from .geometry import Point
from .wave_attenuator import AttenuationSource, WaveAttenuator
from .wave_intensity_change import (
    AnchoredIntensityChange,
    FreeIntensityChange,
    WaveIntensityChange,
    intensity_change_from_state_object,
)
from .wave_settings import WaveSettings

logger = logging.getLogger(__name__)

# An attenuation cause may be given by its id or by the element itself
CauseLike = Union[str, AttenuationSource]


def _cause_id(cause: CauseLike) -> str:
    if isinstance(cause, str):
        return cause
    return cause.element_id


def _check_intensity(intensity: float) -> None:
    if not 0 < intensity <= 1:
        raise IntensityRangeError(f"Intensity must be in (0, 1], got {intensity}")


def _check_attenuation(attenuation: float) -> None:
    if not 0 <= attenuation <= 1:
        raise IntensityRangeError(f"Attenuation must be in [0, 1], got {attenuation}")


def _wrap_phase(phase: float) -> float:
    wrapped = phase % constants.TWO_PI
    # Float rounding can land exactly on 2π for tiny negative inputs
    if wrapped >= constants.TWO_PI:
        wrapped = 0.0
    return wrapped


class Wave:
    """
    A wave of electromagnetic energy traveling through the model space.

    A wave is a straight segment that starts at ``start_point`` and extends
    ``length`` meters along ``propagation_direction``. While the wave is
    sourced, its start stays at the origin and the wave grows. Once unsourced,
    the start point moves toward ``propagation_limit`` and the wave is done
    when the start reaches it.

    The intensity along the wave is ``intensity_at_start`` up to the first
    intensity change, and then the value of the last change passed. Changes
    are either free (they travel with the wave) or anchored to the model
    element that attenuates the wave at that spot.

    Attributes:
        start_point (Point): Current start of the wave, moves once unsourced
        length (float): Length of the wave, in meters
        is_sourced (bool): True while the wave is still being emitted at its origin
        existence_time (float): Seconds since the wave was created
        phase_offset_at_origin (float): Phase at the origin, in [0, 2π)
        intensity_at_start (float): Intensity at the start point, in (0, 1]

    Lineage Tracking Attributes:
        uuid (str): Unique identifier for this wave (auto-generated)
        parent_uuid (str or None): UUID of the wave whose interaction produced
            this one, None for waves made by a source
        interaction_type (str): How this wave was created:
            'source' = emitted by a sun or ground wave source
            'cloud_reflection' = reflected off the cloud
            'atmosphere_emission' = re-emitted downward by an atmosphere layer
            'glacier_reflection' = reflected off the glaciated ground
        debug_tag (str or None): Free-form label shown in repr and exports
    """

    def __init__(
        self,
        wavelength: float,
        origin: Point,
        propagation_direction: Point,
        propagation_limit: float,
        intensity_at_start: float = 1.0,
        initial_phase_offset: float = 0.0,
        settings: Optional[WaveSettings] = None,
        debug_tag: Optional[str] = None
    ) -> None:
        """
        Initialize a wave.

        Args:
            wavelength (float): Wavelength in meters, must have a rendering wavelength
            origin (Point): Point where the wave is emitted
            propagation_direction (Point): Unit vector, must not be horizontal
            propagation_limit (float): Altitude past which the wave can't extend
            intensity_at_start (float): Initial intensity, in (0, 1]
            initial_phase_offset (float): Phase at the origin, in [0, 2π]
            settings (WaveSettings): Shared settings, defaults are used if None
            debug_tag (str): Optional label

        Raises:
            WaveConfigurationError: If the direction or limit are inconsistent.
            IntensityRangeError: If intensity_at_start is out of range.
        """
        if abs(propagation_direction.magnitude - 1) > constants.DIRECTION_TOLERANCE:
            raise WaveConfigurationError(
                f"Propagation direction must be a unit vector, got {propagation_direction}"
            )
        if propagation_direction.y == 0:
            raise WaveConfigurationError("Waves that travel horizontally are not supported")
        travel = propagation_limit - origin.y
        if travel == 0 or (travel > 0) != (propagation_direction.y > 0):
            raise WaveConfigurationError(
                f"Propagation limit {propagation_limit} is not reachable from altitude "
                f"{origin.y} in direction {propagation_direction}"
            )
        if not 0 <= initial_phase_offset <= constants.TWO_PI:
            raise WaveConfigurationError(
                f"Initial phase offset must be in [0, 2π], got {initial_phase_offset}"
            )
        _check_intensity(intensity_at_start)

        self.settings: WaveSettings = settings if settings is not None else WaveSettings()
        self._rendering_wavelength: float = self.settings.get_rendering_wavelength(wavelength)

        self._wavelength: float = wavelength
        self._origin: Point = origin.copy()
        self._propagation_direction: Point = propagation_direction.copy()
        self._propagation_limit: float = propagation_limit

        self.start_point: Point = origin.copy()
        self.length: float = 0.0
        self.is_sourced: bool = True
        self.existence_time: float = 0.0
        self.phase_offset_at_origin: float = _wrap_phase(initial_phase_offset)
        self.intensity_at_start: float = intensity_at_start

        # Sorted by distance from start at all times
        self._intensity_changes: List[WaveIntensityChange] = []
        self._attenuators: Dict[str, WaveAttenuator] = {}
        # Free changes added with an attenuator, while nothing has propagated since
        self._unpropagated_companions: Dict[str, FreeIntensityChange] = {}

        self.uuid: str = str(_uuid_mod.uuid4())
        self.parent_uuid: Optional[str] = None
        self.interaction_type: str = 'source'
        self.debug_tag: Optional[str] = debug_tag

    # =========================================================================
    # Immutable properties
    # =========================================================================

    @property
    def wavelength(self) -> float:
        return self._wavelength

    @property
    def origin(self) -> Point:
        return self._origin.copy()

    @property
    def propagation_direction(self) -> Point:
        return self._propagation_direction.copy()

    @property
    def propagation_limit(self) -> float:
        return self._propagation_limit

    @property
    def rendering_wavelength(self) -> float:
        return self._rendering_wavelength

    @property
    def intensity_changes(self) -> Tuple[WaveIntensityChange, ...]:
        """Read-only, sorted view of the intensity changes."""
        return tuple(self._intensity_changes)

    @property
    def attenuators(self) -> Dict[str, WaveAttenuator]:
        """Copy of the attenuator table, keyed by cause id."""
        return dict(self._attenuators)

    # =========================================================================
    # Stepping
    # =========================================================================

    def step(self, dt: float) -> None:
        """
        Advance the wave in time.

        Args:
            dt (float): Elapsed time in seconds, must not be negative

        Raises:
            IntensityRangeError: If dt is negative.
        """
        if dt < 0:
            raise IntensityRangeError(f"Time step must not be negative, got {dt}")

        distance = self.settings.propagation_speed * dt

        if self.is_sourced:
            self.length = min(self.length + distance, self._distance_to_limit())
            for change in self._intensity_changes:
                if not change.is_anchored:
                    passed = change.distance_from_start
                    change.distance_from_start += distance
                    self._attenuate_crossing_change(change, [
                        attenuator for attenuator in self._attenuators.values()
                        if passed < attenuator.distance_from_start <= change.distance_from_start
                    ])
            propagated = distance
        else:
            remaining = self._distance_to_limit()
            propagated = min(distance, remaining)
            self.start_point = Point(
                self.start_point.x + self._propagation_direction.x * propagated,
                self.start_point.y + self._propagation_direction.y * propagated
            )
            if propagated == remaining:
                self.start_point.y = self._propagation_limit
            self.length = min(self.length, self._distance_to_limit())
            # Attenuators move back toward the start over the free changes
            for change in self._intensity_changes:
                if not change.is_anchored:
                    self._attenuate_crossing_change(change, [
                        attenuator for attenuator in self._attenuators.values()
                        if (attenuator.distance_from_start - propagated
                            <= change.distance_from_start < attenuator.distance_from_start)
                    ])
            for attenuator in self._attenuators.values():
                attenuator.distance_from_start -= propagated
            for change in self._intensity_changes:
                if change.is_anchored:
                    change.distance_from_start -= propagated

            # Attenuators that the start has passed now affect the whole wave
            for cause_id, attenuator in list(self._attenuators.items()):
                if attenuator.distance_from_start <= 0:
                    del self._attenuators[cause_id]
                    anchored = self._find_anchored_change(cause_id)
                    if anchored is not None:
                        self._remove_change(anchored)
                    self.intensity_at_start = max(
                        self.intensity_at_start * (1 - attenuator.attenuation),
                        constants.MINIMUM_INTENSITY
                    )

        if propagated > 0:
            self._unpropagated_companions.clear()

        self._intensity_changes = [
            change for change in self._intensity_changes
            if change.is_anchored or change.distance_from_start < self.length
        ]
        self._sort_changes()
        self._refresh_anchored_changes()

        self.phase_offset_at_origin = _wrap_phase(
            self.phase_offset_at_origin + self.settings.phase_rate * dt
        )
        self.existence_time += dt

    # =========================================================================
    # Intensity
    # =========================================================================

    def get_intensity_at(self, distance_from_start: float) -> float:
        """
        Get the intensity at the given distance from the start of the wave.

        A change exactly at the queried distance does not apply yet.
        """
        intensity = self.intensity_at_start
        for change in self._intensity_changes:
            if change.distance_from_start < distance_from_start:
                intensity = change.post_change_intensity
            else:
                break
        return intensity

    def set_intensity_at_start(self, intensity: float) -> None:
        """
        Set the intensity at the start of the wave.

        The previous value is kept in the wave by recording it in an intensity
        change just beyond the start, so the part of the wave that was already
        emitted keeps its intensity. Changes smaller than the minimum intensity
        change are ignored.

        Raises:
            IntensityRangeError: If intensity is not in (0, 1].
        """
        _check_intensity(intensity)
        if abs(intensity - self.intensity_at_start) < self.settings.min_intensity_change:
            return

        first_change = self._intensity_changes[0] if self._intensity_changes else None
        if (first_change is not None
                and not first_change.is_anchored
                and first_change.distance_from_start < self.settings.min_inter_change_distance):
            first_change.post_change_intensity = self.intensity_at_start
        else:
            self._intensity_changes.append(
                FreeIntensityChange(self.intensity_at_start, self.settings.intensity_change_offset)
            )
            self._sort_changes()
        self.intensity_at_start = intensity

    # =========================================================================
    # Attenuators
    # =========================================================================

    def add_attenuator(self, distance_from_start: float, attenuation: float, cause: CauseLike) -> None:
        """
        Attenuate the wave at a point caused by a model element.

        Args:
            distance_from_start (float): Position of the attenuator, in meters
            attenuation (float): Amount of attenuation, in [0, 1]
            cause (str or AttenuationSource): The element causing it, or its id

        Raises:
            IntensityRangeError: If attenuation is not in [0, 1].
            WaveStateError: If the cause already attenuates this wave.
        """
        _check_attenuation(attenuation)
        cause_id = _cause_id(cause)
        if cause_id in self._attenuators:
            raise WaveStateError(f"Wave {self.uuid} already has an attenuator for {cause_id}")

        offset = self.settings.intensity_change_offset
        arriving_intensity = self.get_intensity_at(distance_from_start)
        beyond_intensity = self.get_intensity_at(distance_from_start + offset)

        self._attenuators[cause_id] = WaveAttenuator(attenuation, distance_from_start)
        self._intensity_changes.append(
            AnchoredIntensityChange(arriving_intensity * (1 - attenuation), distance_from_start, cause_id)
        )

        # The part of the wave already beyond the attenuator keeps its value
        if distance_from_start + offset < self.length:
            companion = FreeIntensityChange(beyond_intensity, distance_from_start + offset)
            self._intensity_changes.append(companion)
            self._unpropagated_companions[cause_id] = companion

        self._sort_changes()
        logger.debug("Added attenuator %s (%.3f) at %.1f m to %r",
                     cause_id, attenuation, distance_from_start, self)

    def remove_attenuator(self, cause: CauseLike) -> None:
        """
        Remove the attenuator caused by the given element.

        If the wave hasn't propagated since the attenuator was added, the wave
        is put back the way it was. Otherwise the change it caused is freed to
        travel with the wave if it lies on the wave, or dropped if it doesn't.

        Raises:
            WaveStateError: If the cause doesn't attenuate this wave.
        """
        cause_id = _cause_id(cause)
        if cause_id not in self._attenuators:
            raise WaveStateError(f"Wave {self.uuid} has no attenuator for {cause_id}")

        attenuator = self._attenuators.pop(cause_id)
        anchored = self._find_anchored_change(cause_id)
        companion = self._unpropagated_companions.pop(cause_id, None)
        if anchored is None:
            raise WaveStateError(f"Wave {self.uuid} lost the intensity change anchored to {cause_id}")

        if companion is not None:
            self._remove_change(anchored)
            self._remove_change(companion)
        elif 0 < anchored.distance_from_start < self.length:
            arriving_intensity = self.get_intensity_at(anchored.distance_from_start)
            self._replace_change(
                anchored,
                anchored.detached(arriving_intensity * (1 - attenuator.attenuation))
            )
        else:
            self._remove_change(anchored)

        self._sort_changes()
        logger.debug("Removed attenuator %s from %r", cause_id, self)

    def set_attenuation(self, cause: CauseLike, attenuation: float) -> None:
        """
        Change the amount of attenuation caused by the given element.

        The part of the wave that already went through the attenuator keeps
        the old value unless another change follows closely, in which case
        the existing anchored change is updated in place.

        Raises:
            IntensityRangeError: If attenuation is not in [0, 1].
            WaveStateError: If the cause doesn't attenuate this wave.
        """
        _check_attenuation(attenuation)
        cause_id = _cause_id(cause)
        attenuator = self._attenuators.get(cause_id)
        if attenuator is None:
            raise WaveStateError(f"Wave {self.uuid} has no attenuator for {cause_id}")
        if abs(attenuation - attenuator.attenuation) < self.settings.min_intensity_change:
            return

        attenuator.attenuation = attenuation
        anchored = self._find_anchored_change(cause_id)
        if anchored is None:
            raise WaveStateError(f"Wave {self.uuid} lost the intensity change anchored to {cause_id}")

        new_intensity = self.get_intensity_at(anchored.distance_from_start) * (1 - attenuation)
        index = self._index_of(anchored)
        following = (self._intensity_changes[index + 1]
                     if index + 1 < len(self._intensity_changes) else None)
        crowded = (following is not None and following.distance_from_start - anchored.distance_from_start
                   < self.settings.min_inter_change_distance)

        if crowded:
            anchored.post_change_intensity = new_intensity
        else:
            freed = FreeIntensityChange(
                anchored.post_change_intensity,
                anchored.distance_from_start + self.settings.intensity_change_offset
            )
            self._replace_change(
                anchored,
                AnchoredIntensityChange(new_intensity, anchored.distance_from_start, cause_id)
            )
            self._intensity_changes.append(freed)
        self._sort_changes()

    def has_attenuator(self, cause: CauseLike) -> bool:
        return _cause_id(cause) in self._attenuators

    def get_attenuator(self, cause: CauseLike) -> Optional[WaveAttenuator]:
        return self._attenuators.get(_cause_id(cause))

    def get_sorted_attenuators(self) -> List[WaveAttenuator]:
        """Attenuators sorted by distance from the start of the wave."""
        return sorted(self._attenuators.values(), key=lambda a: a.distance_from_start)

    # =========================================================================
    # Geometry and phase
    # =========================================================================

    def get_end_point(self) -> Point:
        return Point(
            self.start_point.x + self._propagation_direction.x * self.length,
            self.start_point.y + self._propagation_direction.y * self.length
        )

    def get_end_altitude(self) -> float:
        return self.start_point.y + self._propagation_direction.y * self.length

    def get_phase_at(self, distance_from_origin: float) -> float:
        """
        Get the phase of the wave at a distance from its origin, in [0, 2π).

        Args:
            distance_from_origin (float): Distance from the origin (not the
                start point), in meters
        """
        return _wrap_phase(
            self.phase_offset_at_origin
            + distance_from_origin / self._rendering_wavelength * constants.TWO_PI
        )

    def is_visible(self) -> bool:
        return self._wavelength == constants.VISIBLE_WAVELENGTH

    def is_infrared(self) -> bool:
        return self._wavelength == constants.INFRARED_WAVELENGTH

    def is_completely_propagated(self) -> bool:
        """True once the start point has reached the propagation limit."""
        return abs(self.start_point.y - self._propagation_limit) <= constants.POSITION_TOLERANCE

    # =========================================================================
    # State
    # =========================================================================

    def to_state_object(self) -> Dict[str, Any]:
        """Convert the wave to a JSON-compatible dictionary."""
        return {
            'uuid': self.uuid,
            'parentUuid': self.parent_uuid,
            'interactionType': self.interaction_type,
            'debugTag': self.debug_tag,
            'wavelength': self._wavelength,
            'origin': self._origin.to_dict(),
            'propagationDirection': self._propagation_direction.to_dict(),
            'propagationLimit': self._propagation_limit,
            'startPoint': self.start_point.to_dict(),
            'length': self.length,
            'isSourced': self.is_sourced,
            'existenceTime': self.existence_time,
            'phaseOffsetAtOrigin': self.phase_offset_at_origin,
            'intensityAtStart': self.intensity_at_start,
            'intensityChanges': [change.to_state_object() for change in self._intensity_changes],
            'attenuators': {
                cause_id: attenuator.to_state_object()
                for cause_id, attenuator in self._attenuators.items()
            },
        }

    @classmethod
    def from_state_object(cls, state: Dict[str, Any], settings: Optional[WaveSettings] = None) -> 'Wave':
        """Rebuild a wave from the output of ``to_state_object()``."""
        wave = cls(
            state['wavelength'],
            Point.from_dict(state['origin']),
            Point.from_dict(state['propagationDirection']),
            state['propagationLimit'],
            intensity_at_start=state['intensityAtStart'],
            initial_phase_offset=state['phaseOffsetAtOrigin'],
            settings=settings,
            debug_tag=state.get('debugTag')
        )
        wave.uuid = state['uuid']
        wave.parent_uuid = state.get('parentUuid')
        wave.interaction_type = state.get('interactionType', 'source')
        wave.start_point = Point.from_dict(state['startPoint'])
        wave.length = state['length']
        wave.is_sourced = state['isSourced']
        wave.existence_time = state['existenceTime']
        wave._intensity_changes = [
            intensity_change_from_state_object(change) for change in state['intensityChanges']
        ]
        wave._sort_changes()
        wave._attenuators = {
            cause_id: WaveAttenuator.from_state_object(attenuator)
            for cause_id, attenuator in state['attenuators'].items()
        }
        return wave

    def __repr__(self) -> str:
        kind = 'visible' if self.is_visible() else 'IR' if self.is_infrared() else str(self._wavelength)
        tag = f", tag={self.debug_tag!r}" if self.debug_tag else ""
        return (f"Wave({kind}, start=({self.start_point.x:.1f}, {self.start_point.y:.1f}), "
                f"length={self.length:.1f}, sourced={self.is_sourced}, "
                f"intensity={self.intensity_at_start:.3f}{tag})")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _distance_to_limit(self) -> float:
        return max((self._propagation_limit - self.start_point.y) / self._propagation_direction.y, 0.0)

    def _sort_changes(self) -> None:
        # A free change at the same spot as an anchored one describes the light beyond it
        self._intensity_changes.sort(
            key=lambda change: (change.distance_from_start, not change.is_anchored)
        )

    @staticmethod
    def _attenuate_crossing_change(change: FreeIntensityChange, crossed: List[WaveAttenuator]) -> None:
        for attenuator in crossed:
            change.post_change_intensity *= 1 - attenuator.attenuation

    def _refresh_anchored_changes(self) -> None:
        """Recompute each anchored change from the intensity arriving at it, nearest first."""
        for change in self._intensity_changes:
            if not change.is_anchored:
                continue
            attenuator = self._attenuators.get(change.anchored_to)
            if attenuator is None:
                raise WaveStateError(
                    f"Wave {self.uuid} has an intensity change anchored to unknown {change.anchored_to}"
                )
            change.post_change_intensity = (
                self.get_intensity_at(change.distance_from_start) * (1 - attenuator.attenuation)
            )

    def _find_anchored_change(self, cause_id: str) -> Optional[AnchoredIntensityChange]:
        for change in self._intensity_changes:
            if change.is_anchored and change.anchored_to == cause_id:
                return change
        return None

    def _index_of(self, target: WaveIntensityChange) -> int:
        # Dataclass equality compares values, so look up by identity
        for index, change in enumerate(self._intensity_changes):
            if change is target:
                return index
        raise WaveStateError(f"Intensity change {target} is not part of wave {self.uuid}")

    def _remove_change(self, target: WaveIntensityChange) -> None:
        index = self._index_of(target)
        del self._intensity_changes[index]

    def _replace_change(self, target: WaveIntensityChange, replacement: WaveIntensityChange) -> None:
        self._intensity_changes[self._index_of(target)] = replacement
