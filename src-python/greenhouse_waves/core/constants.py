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
Constants used throughout the wave simulation.

Everything here is read-only. Values that callers may want to tune per model
instance (speed, phase rate, thresholds) are also exposed through
``WaveSettings`` so that nothing needs to be patched at module level.
"""

import math

TWO_PI = 2 * math.pi

# Wavelengths of the modeled light, in meters
VISIBLE_WAVELENGTH = 580E-9
INFRARED_WAVELENGTH = 850E-9

# Propagation speed in meters/second, far slower than real light so that the
# waves are visible when animated
SPEED_OF_LIGHT = 8000.0

# Phase change rate of every wave, in radians/second
PHASE_RATE = -math.pi

# Wavelengths used when depicting the waves, in meters. Far from real life.
REAL_TO_RENDERING_WAVELENGTH = {
    VISIBLE_WAVELENGTH: 8000.0,
    INFRARED_WAVELENGTH: 12000.0,
}
WAVE_AMPLITUDE_FOR_RENDERING = 2000.0

# Model space, in meters
HEIGHT_OF_ATMOSPHERE = 50000.0
SUNLIGHT_SPAN = 85000.0
DEFAULT_NUMBER_OF_ATMOSPHERE_LAYERS = 12
SCALE_HEIGHT_OF_ATMOSPHERE = 8400.0

# Useful normalized vectors, as (x, y)
STRAIGHT_UP = (0.0, 1.0)
STRAIGHT_DOWN = (0.0, -1.0)

# Intensity bookkeeping thresholds
# Changes in intensity or attenuation smaller than this are ignored
MIN_INTENSITY_CHANGE = 0.01
# Intensity changes closer together than this (in meters) are merged
MIN_INTER_CHANGE_DISTANCE = 2000.0
# Offset (in meters) between an intensity change and the one recorded right after it
INTENSITY_CHANGE_OFFSET = 1E-3

# Floor for the intensity at the start of a wave after a full attenuation
MINIMUM_INTENSITY = 1E-6

# Tolerance for comparing altitudes and positions, in meters
POSITION_TOLERANCE = 1E-6
# Tolerance for the unit-length check on propagation directions
DIRECTION_TOLERANCE = 1E-6

# Largest time step that the model will integrate in one go, in seconds
MAX_DT = 0.1

# Temperatures (Kelvin) and albedo values for the ground
MINIMUM_EARTH_AT_NIGHT_TEMPERATURE = 245.0
MAX_EXPECTED_TEMPERATURE = 295.0
GREEN_MEADOW_ALBEDO = 0.2
PARTIALLY_GLACIATED_LAND_ALBEDO = 0.225

# Wave source behavior
DEFAULT_INTER_WAVE_TIME = 0.75            # seconds between a wave ending and its replacement
DEFAULT_WAVE_LIFETIME_RANGE = (10.0, 15.0)  # seconds
SUN_WAVE_INTENSITY = 0.5
MINIMUM_GROUND_WAVE_INTENSITY = 0.01

# Interaction tuning, chosen for the look of the waves rather than physics
VISUAL_CLOUD_REFLECTIVITY = 0.4
GLACIER_REFLECTED_INTENSITY = 0.25
