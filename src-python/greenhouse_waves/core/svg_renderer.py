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

import math
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np
import svgwrite

from . import constants
from .geometry import geometry
from .model_elements import AtmosphereLayer, Cloud
from .wave import Wave

if TYPE_CHECKING:
    from .waves_model import WavesModel


VISIBLE_WAVE_COLOR = '#e6b800'
INFRARED_WAVE_COLOR = '#d62728'


def wave_color(wave: Wave) -> str:
    """
    Get the stroke color of a wave.

    Args:
        wave (Wave): The wave to color

    Returns:
        str: CSS color string, yellow for visible light and red for IR
    """
    if wave.is_visible():
        return VISIBLE_WAVE_COLOR
    if wave.is_infrared():
        return INFRARED_WAVE_COLOR
    return 'gray'


class WaveSVGRenderer:
    """
    Renders a snapshot of the wave model to an SVG file.

    Each wave is drawn as a sine curve along its segment, with an amplitude
    that follows the intensity along the wave, so attenuation by the cloud or
    the atmosphere shows up as a narrowing of the curve.

    Coordinate System:
        Model coordinates are used directly, in meters, with positive Y pointing
        upward. This is achieved by applying a vertical flip transformation to
        the SVG layers.

    Attributes:
        width (int): Canvas width in pixels
        height (int): Canvas height in pixels
        viewbox (tuple): SVG viewBox (min_x, min_y, width, height), Y-down
        dwg (svgwrite.Drawing): The SVG drawing object
        layer_elements (svgwrite.Group): Group for ground, layers and cloud
        layer_waves (svgwrite.Group): Group for the waves
    """

    def __init__(self, width: int = 850, height: int = 500,
                 viewbox: Optional[Tuple[float, float, float, float]] = None,
                 points_per_wavelength: int = 24):
        """
        Initialize the SVG renderer.

        Args:
            width (int): Canvas width in pixels
            height (int): Canvas height in pixels
            viewbox (tuple or None): Model area to show as (min_x, min_y, width,
                height) in Y-up meters. Defaults to the sunlight span from the
                ground to the top of the atmosphere.
            points_per_wavelength (int): Sampling of the sine curves
        """
        self.width = width
        self.height = height
        self.points_per_wavelength = points_per_wavelength
        if viewbox is None:
            margin = constants.WAVE_AMPLITUDE_FOR_RENDERING
            viewbox = (-constants.SUNLIGHT_SPAN / 2, -margin,
                       constants.SUNLIGHT_SPAN, constants.HEIGHT_OF_ATMOSPHERE + 2 * margin)
        self.user_viewbox = viewbox

        # Flip the Y-up viewbox into SVG's Y-down system
        min_x, min_y, vb_width, vb_height = self.user_viewbox
        self.viewbox = (min_x, -(min_y + vb_height), vb_width, vb_height)

        self.dwg = svgwrite.Drawing(size=(f'{width}px', f'{height}px'), profile='full', debug=False)
        self.dwg.viewbox(*self.viewbox)

        self.dwg.add(self.dwg.rect(
            insert=(self.viewbox[0], self.viewbox[1]),
            size=(self.viewbox[2], self.viewbox[3]),
            fill='#eaf4fb'
        ))

        self.layer_elements = self.dwg.add(self.dwg.g(id='layer-elements', transform='scale(1, -1)'))
        self.layer_waves = self.dwg.add(self.dwg.g(id='layer-waves', transform='scale(1, -1)'))

    def wave_points(self, wave: Wave) -> np.ndarray:
        """
        Sample the sine curve of a wave.

        Args:
            wave (Wave): The wave to sample

        Returns:
            np.ndarray: Array of shape (n, 2) with the x, y coordinates of the curve
        """
        if wave.length <= 0:
            return np.empty((0, 2))

        samples = max(2, int(math.ceil(wave.length / wave.rendering_wavelength * self.points_per_wavelength)) + 1)
        distances = np.linspace(0.0, wave.length, samples)
        intensities = np.array([wave.get_intensity_at(distance) for distance in distances])

        start_distance_from_origin = geometry.distance(wave.origin, wave.start_point)
        phases = (wave.phase_offset_at_origin
                  + (start_distance_from_origin + distances) / wave.rendering_wavelength * constants.TWO_PI)
        offsets = constants.WAVE_AMPLITUDE_FOR_RENDERING * intensities * np.sin(phases)

        direction = wave.propagation_direction
        # Perpendicular to the direction of travel
        normal = (-direction.y, direction.x)
        xs = wave.start_point.x + direction.x * distances + normal[0] * offsets
        ys = wave.start_point.y + direction.y * distances + normal[1] * offsets
        return np.column_stack((xs, ys))

    def draw_wave(self, wave: Wave, stroke_width: float = 250.0) -> None:
        """
        Draw a wave as a polyline.

        Args:
            wave (Wave): The wave to draw
            stroke_width (float): Line width in meters
        """
        points = self.wave_points(wave)
        if len(points) == 0:
            return
        polyline = self.dwg.polyline(
            points=[(float(x), float(y)) for x, y in points],
            stroke=wave_color(wave),
            stroke_width=stroke_width,
            fill='none',
            id=f'wave-{wave.uuid}'
        )
        polyline['class'] = 'wave'
        polyline['data-interaction-type'] = wave.interaction_type
        polyline['data-intensity-at-start'] = f'{wave.intensity_at_start:.4f}'
        if wave.parent_uuid:
            polyline['data-parent-uuid'] = wave.parent_uuid
        self.layer_waves.add(polyline)

    def draw_cloud(self, cloud: Cloud) -> None:
        """Draw the cloud as an ellipse, if enabled."""
        if not cloud.enabled:
            return
        self.layer_elements.add(self.dwg.ellipse(
            center=(cloud.position.x, cloud.position.y),
            r=(cloud.width / 2, cloud.height / 2),
            fill='white',
            stroke='#999999',
            stroke_width=100,
            id=f'element-{cloud.element_id}'
        ))

    def draw_atmosphere_layer(self, layer: AtmosphereLayer, x_range: Optional[Tuple[float, float]] = None) -> None:
        """
        Draw an atmosphere layer as a horizontal line, more opaque as it absorbs more.

        Args:
            layer (AtmosphereLayer): The layer to draw
            x_range (tuple or None): Horizontal extent, the whole viewbox if None
        """
        if x_range is None:
            x_range = (self.user_viewbox[0], self.user_viewbox[0] + self.user_viewbox[2])
        self.layer_elements.add(self.dwg.line(
            start=(x_range[0], layer.altitude),
            end=(x_range[1], layer.altitude),
            stroke='#6a5acd',
            stroke_width=150,
            stroke_opacity=0.15 + 0.85 * layer.energy_absorption_proportion,
            id=f'element-{layer.element_id}'
        ))

    def draw_ground(self, glaciated: bool = False) -> None:
        min_x, _, vb_width, _ = self.user_viewbox
        self.layer_elements.add(self.dwg.rect(
            insert=(min_x, -constants.WAVE_AMPLITUDE_FOR_RENDERING),
            size=(vb_width, constants.WAVE_AMPLITUDE_FOR_RENDERING),
            fill='#5a9e3a',
            id='element-ground'
        ))
        if glaciated:
            self.layer_elements.add(self.dwg.rect(
                insert=(0, -constants.WAVE_AMPLITUDE_FOR_RENDERING / 2),
                size=(min_x + vb_width, constants.WAVE_AMPLITUDE_FOR_RENDERING / 2),
                fill='#f0f8ff',
                id='element-glacier'
            ))

    def draw_model(self, model: 'WavesModel') -> None:
        """
        Draw the ground, the interacting atmosphere layers, the cloud and every wave.

        Args:
            model (WavesModel): The model to draw
        """
        self.draw_ground(glaciated=model.ground_layer.is_glaciated)
        for layer, x_range in model.atmosphere_layer_x_ranges:
            self.draw_atmosphere_layer(layer, x_range)
        self.draw_cloud(model.cloud)
        for wave in model.waves:
            self.draw_wave(wave)

    def save(self, filename: str = None):
        """
        Save the SVG to a file.

        Args:
            filename (str): Output filename (e.g., 'waves.svg')
        """
        if filename is None:
            filename = "waves.svg"
        self.dwg.saveas(filename)

    def to_string(self) -> str:
        """
        Get the SVG as a string.

        Returns:
            str: SVG content as XML string
        """
        return self.dwg.tostring()
