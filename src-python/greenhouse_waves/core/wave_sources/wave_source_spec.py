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

from dataclasses import dataclass

from ..exceptions import WaveConfigurationError
from ..geometry import Point


@dataclass(frozen=True)
class WaveSourceSpec:
    """
    One emission lane of a wave source.

    No altitude is included because every lane of a source emits from the
    source's fixed start altitude.

    Attributes:
        x_position (float): Horizontal position the waves originate from, in meters
        propagation_direction (Point): Unit vector the waves travel along
    """
    x_position: float
    propagation_direction: Point

    def __post_init__(self):
        if self.propagation_direction.y == 0:
            raise WaveConfigurationError(
                f"Lane at x={self.x_position} must not emit horizontally"
            )
