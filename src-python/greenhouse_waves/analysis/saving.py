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
===============================================================================
Wave Data Export Utilities
===============================================================================
Utilities for getting the state of a wave model out of the simulation:

- CSV: One row per wave with its geometry, intensity and lineage
- JSON: The full logical state of a model, which can be loaded back
- Statistics: Counts and totals for quick checks
===============================================================================
"""

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union, TYPE_CHECKING

from ..core.wave import Wave

if TYPE_CHECKING:
    from ..core.waves_model import WavesModel


def save_waves_csv(
    waves: Iterable[Wave],
    output_path: Union[str, Path],
    filename: str = "waves.csv",
    precision_coords: int = 2,
    precision_intensity: int = 6,
) -> Path:
    """
    Export wave data to a CSV file.

    Args:
        waves: Waves to export, e.g. ``model.waves``.
        output_path: Directory path where the CSV file will be saved.
        filename: Name of the output CSV file (default: "waves.csv").
        precision_coords: Decimal places for positions and lengths (default: 2).
        precision_intensity: Decimal places for intensities (default: 6).

    Returns:
        Path: Full path to the created CSV file.

    Raises:
        OSError: If the output directory cannot be created or file cannot be written.

    Example:
        >>> from greenhouse_waves.analysis import save_waves_csv
        >>> output_file = save_waves_csv(model.waves, "./output")
    """
    output_dir = Path(output_path)
    output_dir.mkdir(parents=True, exist_ok=True)

    csv_file = output_dir / filename

    coord_fmt = f"{{:.{precision_coords}f}}"
    intensity_fmt = f"{{:.{precision_intensity}f}}"

    with open(csv_file, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow([
            'wave_index',
            'uuid',
            'parent_uuid',
            'interaction_type',
            'wavelength',
            'start_x',
            'start_y',
            'end_x',
            'end_y',
            'length',
            'is_sourced',
            'existence_time',
            'intensity_at_start',
            'intensity_at_end',
            'intensity_change_count',
            'attenuator_count',
        ])

        for i, wave in enumerate(waves):
            end_point = wave.get_end_point()
            writer.writerow([
                i,
                wave.uuid,
                wave.parent_uuid or '',
                wave.interaction_type,
                wave.wavelength,
                coord_fmt.format(wave.start_point.x),
                coord_fmt.format(wave.start_point.y),
                coord_fmt.format(end_point.x),
                coord_fmt.format(end_point.y),
                coord_fmt.format(wave.length),
                wave.is_sourced,
                f"{wave.existence_time:.3f}",
                intensity_fmt.format(wave.intensity_at_start),
                intensity_fmt.format(wave.get_intensity_at(wave.length)),
                len(wave.intensity_changes),
                len(wave.attenuators),
            ])

    return csv_file


def save_model_state(model: 'WavesModel', output_file: Union[str, Path]) -> Path:
    """
    Save the logical state of a model to a JSON file.

    Returns:
        Path: The path written to.
    """
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(model.to_state_object(), f, indent=2)
    return output_file


def load_model_state(model: 'WavesModel', input_file: Union[str, Path]) -> None:
    """Apply a state saved by ``save_model_state()`` to a model."""
    with open(input_file, 'r', encoding='utf-8') as f:
        model.apply_state(json.load(f))


def filter_waves_by_interaction(waves: Iterable[Wave], interaction_type: str) -> List[Wave]:
    """
    Keep the waves created by the given kind of interaction.

    Args:
        waves: Waves to filter.
        interaction_type: 'source', 'cloud_reflection', 'atmosphere_emission'
            or 'glacier_reflection'.
    """
    return [wave for wave in waves if wave.interaction_type == interaction_type]


def get_wave_statistics(waves: Iterable[Wave]) -> Dict[str, Any]:
    """
    Compute statistics about a collection of waves.

    Returns:
        dict: Dictionary containing:
            - total_waves: Total number of waves
            - visible_waves / infrared_waves: Count per wavelength
            - sourced_waves: Waves still attached to their source
            - interaction_counts: Count per interaction type
            - attenuated_waves: Waves with at least one attenuator
            - total_length: Sum of the wave lengths, in meters
            - avg_intensity_at_start: Average intensity at the start of the waves

    Example:
        >>> stats = get_wave_statistics(model.waves)
        >>> print(f"Re-emitted: {stats['interaction_counts'].get('atmosphere_emission', 0)}")
    """
    waves = list(waves)
    interaction_counts: Dict[str, int] = {}
    for wave in waves:
        interaction_counts[wave.interaction_type] = interaction_counts.get(wave.interaction_type, 0) + 1

    return {
        'total_waves': len(waves),
        'visible_waves': sum(1 for wave in waves if wave.is_visible()),
        'infrared_waves': sum(1 for wave in waves if wave.is_infrared()),
        'sourced_waves': sum(1 for wave in waves if wave.is_sourced),
        'interaction_counts': interaction_counts,
        'attenuated_waves': sum(1 for wave in waves if wave.attenuators),
        'total_length': sum(wave.length for wave in waves),
        'avg_intensity_at_start': (sum(wave.intensity_at_start for wave in waves) / len(waves)
                                   if waves else 0.0),
    }
