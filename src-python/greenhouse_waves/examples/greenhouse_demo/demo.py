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
Greenhouse Demo - Sunlight, Cloud, Atmosphere and Glacier

This example runs the wave model with every interaction switched on:

Setup:
- The sun shines straight down on two lanes
- The cloud is present over the left sunlight lane
- The ground is at 288 K, so it radiates IR waves upward on three lanes
- The concentration is set to the ice-age value, which glaciates part of the ground

Expected behavior:
- The left sunlight lane is reflected upward by the cloud and attenuated below it
- Each IR lane is absorbed by one atmosphere layer, which re-emits a wave downward
- The right sunlight lane is reflected upward by the glacier once it reaches the ground
- With wave gaps on, waves are cut loose from their source after a random lifetime
"""

import logging
import os
import random
import sys

# Add parent directories to path to import greenhouse_waves
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', '..'))

from greenhouse_waves import setup_logging
from greenhouse_waves.analysis import get_wave_statistics, save_model_state, save_waves_csv
from greenhouse_waves.core.model_elements import BY_DATE, ICE_AGE
from greenhouse_waves.core.svg_renderer import WaveSVGRenderer
from greenhouse_waves.core.waves_model import WavesModel, map_gas_concentration_to_attenuation


def main():
    """Run the greenhouse demonstration."""
    setup_logging(logging.INFO)

    print("Greenhouse Demo - Sunlight, Cloud, Atmosphere and Glacier")
    print("=" * 60)

    model = WavesModel(wave_gaps_enabled=True, rng=random.Random(2024))
    model.cloud.enabled = True
    model.ground_layer.temperature = 288.0
    model.concentration_model.control_mode = BY_DATE
    model.concentration_model.date = ICE_AGE

    print(f"\nModel setup:")
    print(f"  Cloud: center=({model.cloud.position.x:.0f}, {model.cloud.position.y:.0f}), "
          f"width={model.cloud.width:.0f}")
    print(f"  Ground: T={model.ground_layer.temperature} K, albedo={model.ground_layer.albedo}")
    print(f"  Concentration: {model.concentration} "
          f"(IR attenuation {map_gas_concentration_to_attenuation(model.concentration):.3f})")
    for layer, (x_min, x_max) in model.atmosphere_layer_x_ranges:
        print(f"  {layer.element_id}: altitude={layer.altitude:.0f} m, "
              f"absorption={layer.energy_absorption_proportion:.3f}, x=[{x_min:.0f}, {x_max:.0f}]")

    changes = []
    model.add_waves_changed_listener(lambda: changes.append(len(model.waves)))

    # Run simulation
    print("\nRunning simulation...")
    dt = 0.25
    duration = 20.0
    for _ in range(int(duration / dt)):
        model.step_model(dt)
    print(f"  Simulated {duration} s, the set of waves changed {len(changes)} times")

    stats = get_wave_statistics(model.waves)
    print(f"\nWaves in the model: {stats['total_waves']}")
    print(f"  Visible: {stats['visible_waves']}, IR: {stats['infrared_waves']}")
    print(f"  Sourced: {stats['sourced_waves']}, attenuated: {stats['attenuated_waves']}")
    for interaction_type, count in sorted(stats['interaction_counts'].items()):
        print(f"  {interaction_type}: {count}")

    lineage = model.wave_collection.lineage
    lineage_stats = lineage.get_lineage_statistics()
    print(f"\nLineage: {lineage_stats['wave_count']} waves created, "
          f"{lineage_stats['root_count']} by the sources")
    for interaction in model.wave_atmosphere_interactions:
        path = lineage.get_full_path(interaction.emitted_wave.uuid)
        print(f"  {interaction.atmosphere_layer.element_id}: "
              + " -> ".join(wave.interaction_type for wave in path))

    # Save outputs to the same directory as this script
    output_dir = os.path.dirname(os.path.abspath(__file__))

    renderer = WaveSVGRenderer()
    renderer.draw_model(model)
    svg_file = os.path.join(output_dir, 'output.svg')
    renderer.save(svg_file)
    print(f"\nSVG saved to: {svg_file}")

    csv_file = save_waves_csv(model.waves, output_dir)
    print(f"CSV data exported to: {csv_file}")

    state_file = save_model_state(model, os.path.join(output_dir, 'model_state.json'))
    print(f"Model state saved to: {state_file}")


if __name__ == "__main__":
    main()
