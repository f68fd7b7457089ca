"""
===============================================================================
STATE AND EXPORT - Save/Load, CSV, SVG, Lineage and Logging Test
===============================================================================

Checks everything that gets the model out of the simulation:

- Saving the model state to JSON and loading it into a fresh model
- CSV export and wave statistics
- SVG rendering of waves and model elements
- Wave lineage, including the NetworkX export
- Package logging setup

Run directly or with pytest.
===============================================================================
"""

import csv
import json
import logging
import os
import sys
import tempfile

# Ensure the package is importable when running directly
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from greenhouse_waves import setup_logging
from greenhouse_waves.analysis import (
    filter_waves_by_interaction,
    get_wave_statistics,
    load_model_state,
    save_model_state,
    save_waves_csv,
)
from greenhouse_waves.core import constants
from greenhouse_waves.core.exceptions import WaveStateError
from greenhouse_waves.core.geometry import Point
from greenhouse_waves.core.model_elements import BY_DATE, ICE_AGE
from greenhouse_waves.core.svg_renderer import WaveSVGRenderer
from greenhouse_waves.core.wave import Wave
from greenhouse_waves.core.waves_model import WavesModel


def build_busy_model():
    """A model in which every kind of interaction is going on."""
    model = WavesModel()
    model.cloud.enabled = True
    model.ground_layer.temperature = 288.0
    model.concentration_model.control_mode = BY_DATE
    model.concentration_model.date = ICE_AGE
    model.step_model(7.0)
    return model


def interaction_summary(model):
    return sorted(
        (i.atmosphere_layer.element_id, i.source_wave.uuid, i.emitted_wave.uuid)
        for i in model.wave_atmosphere_interactions
    )


# =============================================================================
# Model state
# =============================================================================

def test_model_state_round_trip():
    """A fresh model loaded from saved state carries on exactly like the saved one."""
    print("\nTest: model state round trip")
    model = build_busy_model()
    assert len(model.cloud_reflected_waves) == 1
    assert len(model.glacier_reflected_waves) == 1
    assert len(model.wave_atmosphere_interactions) == 3

    with tempfile.TemporaryDirectory() as tmp_dir:
        state_file = save_model_state(model, os.path.join(tmp_dir, "state", "model.json"))
        assert state_file.exists()
        restored = WavesModel()
        notifications = []
        restored.add_waves_changed_listener(lambda: notifications.append(True))
        load_model_state(restored, state_file)

    assert notifications, "Loading state should notify listeners"
    assert sorted(w.uuid for w in restored.waves) == sorted(w.uuid for w in model.waves)
    assert interaction_summary(restored) == interaction_summary(model)
    assert {k: v.uuid for k, v in restored.cloud_reflected_waves.items()} == \
        {k: v.uuid for k, v in model.cloud_reflected_waves.items()}
    assert {k: v.uuid for k, v in restored.glacier_reflected_waves.items()} == \
        {k: v.uuid for k, v in model.glacier_reflected_waves.items()}
    assert restored.cloud.enabled
    assert restored.ground_layer.temperature == 288.0
    assert restored.ground_layer.is_glaciated
    assert restored.concentration == model.concentration

    model.step_model(1.0)
    restored.step_model(1.0)
    assert len(restored.waves) == len(model.waves)
    assert sorted(w.interaction_type for w in restored.waves) == sorted(w.interaction_type for w in model.waves)
    for wave in model.waves:
        twin = restored.wave_collection.get(wave.uuid)
        if twin is None:
            # Created during the last step, with a new uuid
            continue
        assert abs(twin.length - wave.length) < 1e-6
        assert abs(twin.intensity_at_start - wave.intensity_at_start) < 1e-9
        assert len(twin.intensity_changes) == len(wave.intensity_changes)
    print(f"  PASS: {len(model.waves)} waves restored and stepped")
    return True


def test_state_with_unknown_wave_is_rejected():
    print("\nTest: state referring to unknown wave")
    model = build_busy_model()
    state = json.loads(json.dumps(model.to_state_object()))
    source_uuid = next(iter(state['cloudReflectedWaves']))
    state['cloudReflectedWaves'][source_uuid] = 'no-such-wave'
    try:
        WavesModel().apply_state(state)
        assert False, "Unknown wave uuid should be rejected"
    except WaveStateError:
        pass
    print("  PASS")
    return True


# =============================================================================
# CSV and statistics
# =============================================================================

def test_csv_export_and_statistics():
    print("\nTest: CSV export and statistics")
    model = build_busy_model()
    waves = model.waves

    with tempfile.TemporaryDirectory() as tmp_dir:
        csv_file = save_waves_csv(waves, os.path.join(tmp_dir, "out"), filename="busy.csv")
        with open(csv_file, newline='', encoding='utf-8') as f:
            rows = list(csv.DictReader(f))

    assert len(rows) == len(waves)
    assert {row['uuid'] for row in rows} == {wave.uuid for wave in waves}
    assert {row['interaction_type'] for row in rows} == \
        {'source', 'cloud_reflection', 'atmosphere_emission', 'glacier_reflection'}

    stats = get_wave_statistics(waves)
    assert stats['total_waves'] == len(waves)
    assert stats['visible_waves'] + stats['infrared_waves'] == len(waves)
    assert stats['interaction_counts']['atmosphere_emission'] == 3
    assert stats['interaction_counts']['source'] == 5
    assert stats['attenuated_waves'] == 4, "Three ground waves and one sun wave are attenuated"
    assert len(filter_waves_by_interaction(waves, 'cloud_reflection')) == 1

    empty = get_wave_statistics([])
    assert empty['total_waves'] == 0 and empty['avg_intensity_at_start'] == 0.0
    print(f"  PASS: {len(rows)} rows written")
    return True


# =============================================================================
# SVG
# =============================================================================

def test_wave_points():
    print("\nTest: wave sampling")
    renderer = WaveSVGRenderer()
    wave = Wave(constants.INFRARED_WAVELENGTH, Point(0, 0), Point(0, 1), constants.HEIGHT_OF_ATMOSPHERE)
    assert renderer.wave_points(wave).shape == (0, 2)

    wave.step(1.5)
    points = renderer.wave_points(wave)
    assert points.shape == (25, 2), f"Unexpected shape {points.shape}"
    assert abs(points[0][1]) < 1e-9 and abs(points[-1][1] - 12000) < 1e-6
    assert abs(points[:, 0]).max() <= constants.WAVE_AMPLITUDE_FOR_RENDERING + 1e-9
    print("  PASS")
    return True


def test_svg_rendering():
    print("\nTest: SVG rendering")
    model = build_busy_model()
    renderer = WaveSVGRenderer()
    renderer.draw_model(model)
    svg = renderer.to_string()

    drawn = [wave for wave in model.waves if wave.length > 0]
    assert svg.count('class="wave"') == len(drawn)
    assert 'id="element-cloud-0"' in svg
    assert 'id="element-glacier"' in svg
    for layer, _ in model.atmosphere_layer_x_ranges:
        assert f'id="element-{layer.element_id}"' in svg

    with tempfile.TemporaryDirectory() as tmp_dir:
        svg_file = os.path.join(tmp_dir, "waves.svg")
        renderer.save(svg_file)
        assert os.path.getsize(svg_file) > 0
    print(f"  PASS: {len(drawn)} waves drawn")
    return True


# =============================================================================
# Lineage and logging
# =============================================================================

def test_lineage_to_networkx():
    print("\nTest: lineage graph")
    model = build_busy_model()
    lineage = model.wave_collection.lineage
    graph = lineage.to_networkx()
    assert graph.number_of_nodes() == lineage.wave_count
    # Every wave made by an interaction has exactly one parent
    derived = [w for w in model.waves if w.parent_uuid is not None]
    assert graph.number_of_edges() == len(derived)
    for wave in derived:
        assert graph.has_edge(wave.parent_uuid, wave.uuid)
        path = lineage.get_full_path(wave.uuid)
        assert path[0].interaction_type == 'source' and path[-1] is wave
    print(f"  PASS: {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges")
    return True


def test_setup_logging():
    print("\nTest: logging setup")
    with tempfile.TemporaryDirectory() as tmp_dir:
        log_file = os.path.join(tmp_dir, "waves.log")
        logger = setup_logging(logging.DEBUG, log_file=log_file)
        try:
            setup_logging(logging.DEBUG, log_file=log_file)
            assert len(logger.handlers) == 2, "Handlers should not pile up"
            WavesModel().step_model(0.1)
            with open(log_file, encoding='utf-8') as f:
                content = f.read()
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            logger.setLevel(logging.WARNING)

    assert "Logging initialized." in content
    assert "greenhouse_waves.core.wave_collection - DEBUG - Created" in content
    print("  PASS")
    return True


def main():
    print("=" * 70)
    print("STATE AND EXPORT TESTS")
    print("=" * 70)

    tests = [
        ("model state round trip", test_model_state_round_trip),
        ("unknown wave rejected", test_state_with_unknown_wave_is_rejected),
        ("CSV export and statistics", test_csv_export_and_statistics),
        ("wave sampling", test_wave_points),
        ("SVG rendering", test_svg_rendering),
        ("lineage graph", test_lineage_to_networkx),
        ("logging setup", test_setup_logging),
    ]

    results = []
    for name, test in tests:
        try:
            results.append((name, test()))
        except AssertionError as e:
            print(f"  FAIL: {e}")
            results.append((name, False))

    print("\n" + "=" * 70)
    passed = sum(1 for _, ok in results if ok)
    print(f"Results: {passed}/{len(results)} tests passed")
    for name, ok in results:
        print(f"  [{'PASS' if ok else 'FAIL'}] {name}")
    print("=" * 70)
    return 0 if passed == len(results) else 1


if __name__ == "__main__":
    sys.exit(main())
