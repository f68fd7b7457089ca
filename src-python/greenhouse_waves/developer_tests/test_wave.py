"""
===============================================================================
WAVE - Propagation and Intensity Bookkeeping Test
===============================================================================

Checks the behavior of a single Wave, without any model around it:

- Construction checks (direction, propagation limit, intensity, phase)
- Growth while sourced, travel while unsourced, completion
- The intensity profile: intensity at start, free and anchored changes
- Attenuators: adding, removing, changing, folding into the start intensity
- Phase and end point geometry
- Saving and restoring a wave

Run directly or with pytest.
===============================================================================
"""

import math
import os
import sys

# Ensure the package is importable when running directly
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from greenhouse_waves.core import constants
from greenhouse_waves.core.exceptions import IntensityRangeError, WaveConfigurationError, WaveStateError
from greenhouse_waves.core.geometry import Point, geometry
from greenhouse_waves.core.wave import Wave
from greenhouse_waves.core.wave_settings import WaveSettings

TOLERANCE = 1e-9

UP = Point(0, 1)
DOWN = Point(0, -1)


def assert_close(actual, expected, tol=TOLERANCE, msg=""):
    assert abs(actual - expected) <= tol, f"{msg}: expected {expected}, got {actual}"


def expect_error(error_type, func, *args, **kwargs):
    try:
        func(*args, **kwargs)
    except error_type:
        return
    raise AssertionError(f"{func.__name__} should have raised {error_type.__name__}")


def make_ir_wave(limit=constants.HEIGHT_OF_ATMOSPHERE, **kwargs):
    return Wave(constants.INFRARED_WAVELENGTH, Point(0, 0), UP, limit, **kwargs)


def profile(wave, distances):
    return [wave.get_intensity_at(d) for d in distances]


# =============================================================================
# Construction
# =============================================================================

def test_construction_checks():
    """Bad directions, limits, intensities and phases are rejected."""
    print("\nTest: construction checks")
    ir = constants.INFRARED_WAVELENGTH

    expect_error(WaveConfigurationError, Wave, ir, Point(0, 100), UP, 100)
    expect_error(WaveConfigurationError, Wave, ir, Point(0, 0), Point(0, 2), 100)
    expect_error(WaveConfigurationError, Wave, ir, Point(0, 0), Point(1, 0), 100)
    expect_error(WaveConfigurationError, Wave, ir, Point(0, 0), UP, -100)
    expect_error(WaveConfigurationError, Wave, ir, Point(0, 100), DOWN, 200)
    expect_error(WaveConfigurationError, Wave, ir, Point(0, 0), UP, 100, initial_phase_offset=7.0)
    expect_error(IntensityRangeError, Wave, ir, Point(0, 0), UP, 100, intensity_at_start=0)
    expect_error(IntensityRangeError, Wave, ir, Point(0, 0), UP, 100, intensity_at_start=1.5)
    expect_error(WaveConfigurationError, Wave, 400E-9, Point(0, 0), UP, 100)

    wave = Wave(ir, Point(0, 100), DOWN, 0, initial_phase_offset=constants.TWO_PI)
    assert wave.phase_offset_at_origin == 0.0
    assert wave.is_sourced
    assert wave.length == 0
    assert wave.interaction_type == 'source'
    assert wave.parent_uuid is None
    print("  PASS: invalid arguments rejected, valid wave created")
    return True


# =============================================================================
# Propagation
# =============================================================================

def test_sourced_wave_is_clamped_at_limit():
    """A very fast sourced wave stops growing at its propagation limit."""
    print("\nTest: sourced wave clamped at limit")
    wave = make_ir_wave(limit=100000, settings=WaveSettings(propagation_speed=3E8))
    wave.step(1)
    assert wave.length == 100000, f"Expected clamped length, got {wave.length}"
    assert not wave.is_completely_propagated()
    assert wave.start_point.x == 0 and wave.start_point.y == 0
    print(f"  PASS: length = {wave.length}")
    return True


def test_sourced_wave_growth_and_phase():
    """Length, existence time and phase advance with each step."""
    print("\nTest: sourced wave growth and phase")
    wave = make_ir_wave()
    wave.step(0.5)
    assert_close(wave.length, 4000, msg="length")
    assert_close(wave.existence_time, 0.5, msg="existence time")
    assert_close(wave.phase_offset_at_origin, 1.5 * math.pi, msg="phase")
    assert 0 <= wave.phase_offset_at_origin < constants.TWO_PI
    print(f"  PASS: length={wave.length}, phase={wave.phase_offset_at_origin:.4f}")
    return True


def test_unsourced_wave_completes():
    """An unsourced wave reaches its limit in finite time, a sourced one never does."""
    print("\nTest: completion")
    sourced = make_ir_wave()
    for _ in range(200):
        sourced.step(0.5)
    assert not sourced.is_completely_propagated()
    assert_close(sourced.length, constants.HEIGHT_OF_ATMOSPHERE, msg="sourced length")

    wave = make_ir_wave()
    wave.step(1)
    wave.is_sourced = False
    steps = 0
    while not wave.is_completely_propagated() and steps < 100:
        wave.step(0.5)
        steps += 1
        assert wave.length <= constants.HEIGHT_OF_ATMOSPHERE - wave.start_point.y + TOLERANCE
    assert wave.is_completely_propagated(), "Unsourced wave never completed"
    assert wave.start_point.y == constants.HEIGHT_OF_ATMOSPHERE
    assert wave.length == 0
    print(f"  PASS: unsourced wave completed after {steps} steps")
    return True


def test_negative_dt_rejected():
    print("\nTest: negative dt")
    wave = make_ir_wave()
    expect_error(IntensityRangeError, wave.step, -0.1)
    print("  PASS")
    return True


# =============================================================================
# Intensity profile
# =============================================================================

def test_attenuator_on_new_wave():
    """An attenuator sets the intensity beyond it, a change at the query point doesn't apply yet."""
    print("\nTest: attenuator on a new wave")
    wave = make_ir_wave()
    wave.add_attenuator(50, 0.5, 'A')
    assert_close(wave.get_intensity_at(60), 0.5, msg="beyond attenuator")
    assert_close(wave.get_intensity_at(40), 1.0, msg="before attenuator")
    assert_close(wave.get_intensity_at(50), 1.0, msg="at attenuator")
    assert len(wave.intensity_changes) == 1
    assert wave.intensity_changes[0].is_anchored
    assert wave.has_attenuator('A')
    print("  PASS")
    return True


def test_removed_attenuator_change_keeps_traveling():
    """Once the wave has moved on, removing an attenuator frees its change instead of erasing it."""
    print("\nTest: removed attenuator change travels with the wave")
    wave = make_ir_wave()
    wave.step(1)
    wave.add_attenuator(50, 0.5, 'cloud')

    # The light beyond the attenuator went through before it existed
    assert_close(wave.get_intensity_at(60), 1.0, msg="right after adding")

    wave.step(0.01)
    assert_close(wave.get_intensity_at(60), 0.5, msg="after a step")
    assert_close(wave.get_intensity_at(40), 1.0, msg="before attenuator")

    wave.remove_attenuator('cloud')
    assert not wave.has_attenuator('cloud')
    assert_close(wave.get_intensity_at(60), 0.5, msg="right after removing")
    assert not wave.intensity_changes[0].is_anchored

    wave.step(0.01)
    assert_close(wave.get_intensity_at(60), 1.0, msg="freed change moved on")
    assert_close(wave.get_intensity_at(140), 0.5, msg="freed change position")
    print("  PASS")
    return True


def test_add_remove_round_trip():
    """Adding then removing an attenuator with no step in between restores the profile."""
    print("\nTest: add/remove round trip")
    wave = make_ir_wave()
    wave.step(1)
    wave.set_intensity_at_start(0.8)
    wave.step(0.25)
    distances = [0, 500, 1000, 1000.0005, 2000, 2000.001, 2000.5, 5000, 9999, 20001]
    before = profile(wave, distances)
    changes_before = len(wave.intensity_changes)

    wave.add_attenuator(1000, 0.3, 'X')
    wave.remove_attenuator('X')
    wave.add_attenuator(20000, 0.3, 'Y')
    wave.remove_attenuator('Y')

    after = profile(wave, distances)
    for d, b, a in zip(distances, before, after):
        assert_close(a, b, msg=f"intensity at {d}")
    assert len(wave.intensity_changes) == changes_before
    print(f"  PASS: profile restored at {len(distances)} points")
    return True


def test_remove_attenuator_beyond_wave_deletes_change():
    print("\nTest: remove attenuator beyond the wave")
    wave = make_ir_wave()
    wave.step(1)
    wave.add_attenuator(20000, 0.5, 'far')
    wave.step(0.01)
    wave.remove_attenuator('far')
    assert len(wave.intensity_changes) == 0
    print("  PASS")
    return True


def test_profile_never_increases_with_distance():
    """Attenuation met by the wave front only ever lowers the intensity further along."""
    print("\nTest: non-increasing profile")
    wave = make_ir_wave()
    wave.add_attenuator(1000, 0.3, 'a')
    wave.add_attenuator(3000, 0.5, 'b')
    distances = [i * 100.0 for i in range(0, 81)]

    wave.step(1)
    values = profile(wave, distances)
    assert all(later <= earlier for earlier, later in zip(values, values[1:])), values
    assert_close(wave.get_intensity_at(8000), 0.35, msg="after both attenuators")

    wave.is_sourced = False
    wave.step(0.1)
    values = profile(wave, distances)
    assert all(later <= earlier for earlier, later in zip(values, values[1:])), values
    print(f"  PASS: {len(distances)} samples non-increasing")
    return True


def test_intensity_change_crossing_attenuator_while_sourced():
    """A change emitted at the origin is attenuated when it travels past an attenuator."""
    print("\nTest: intensity change crossing an attenuator (sourced)")
    wave = make_ir_wave()
    wave.add_attenuator(5000, 0.5, 'layer')
    wave.step(2.5)
    wave.set_intensity_at_start(0.9)
    wave.step(1)

    free = [c for c in wave.intensity_changes if not c.is_anchored]
    assert len(free) == 1
    assert_close(free[0].distance_from_start, 8000.001, tol=1e-6, msg="change position")
    assert_close(free[0].post_change_intensity, 0.5, msg="old light after the attenuator")

    assert_close(wave.get_intensity_at(4000), 0.9, msg="before attenuator")
    assert_close(wave.get_intensity_at(6000), 0.45, msg="new light after the attenuator")
    assert_close(wave.get_intensity_at(10000), 0.5, msg="old light after the attenuator")
    beyond = profile(wave, [5000.5 + i * 500.0 for i in range(45)])
    assert max(beyond) <= 0.5 + TOLERANCE, f"Unattenuated light beyond the attenuator: {beyond}"
    print("  PASS: profile 0.9 / 0.45 / 0.5")
    return True


def test_attenuator_crossing_intensity_change_while_unsourced():
    """An attenuator moving back over a change attenuates it, then folds into the start."""
    print("\nTest: attenuator crossing an intensity change (unsourced)")
    wave = make_ir_wave()
    wave.step(1)
    wave.set_intensity_at_start(0.8)
    wave.step(0.5)
    # Ahead of the wave front, so no change is left beyond it
    wave.add_attenuator(14000, 0.5, 'layer')
    assert len(wave.intensity_changes) == 2

    wave.is_sourced = False
    wave.step(1.25)
    assert_close(wave.get_attenuator('layer').distance_from_start, 4000, msg="attenuator position")
    assert_close(wave.get_intensity_at(2000), 0.8, msg="before attenuator")
    assert_close(wave.get_intensity_at(4000.0005), 0.4, msg="new light after the attenuator")
    assert_close(wave.get_intensity_at(8000), 0.5, msg="old light after the attenuator")
    assert_close(wave.get_intensity_at(11999), 0.5, msg="wave end")

    wave.step(0.5)
    assert not wave.has_attenuator('layer')
    assert_close(wave.intensity_at_start, 0.4, msg="folded intensity")
    assert_close(wave.get_intensity_at(8000), 0.5, msg="old light keeps its value")
    print("  PASS")
    return True


def test_set_intensity_at_start():
    """Small changes are ignored, nearby changes are reused."""
    print("\nTest: set_intensity_at_start")
    wave = make_ir_wave()
    wave.step(1)
    wave.set_intensity_at_start(0.8)
    assert len(wave.intensity_changes) == 1
    assert_close(wave.intensity_changes[0].post_change_intensity, 1.0, msg="old value kept")
    assert_close(wave.intensity_changes[0].distance_from_start, constants.INTENSITY_CHANGE_OFFSET,
                 msg="change offset")

    snapshot = [(c.distance_from_start, c.post_change_intensity) for c in wave.intensity_changes]
    for value in (0.805, 0.795, 0.8):
        wave.set_intensity_at_start(value)
    assert [(c.distance_from_start, c.post_change_intensity) for c in wave.intensity_changes] == snapshot
    assert wave.intensity_at_start == 0.8

    # Within the minimum inter-change distance, the existing change is reused
    wave.set_intensity_at_start(0.6)
    assert len(wave.intensity_changes) == 1
    assert_close(wave.intensity_changes[0].post_change_intensity, 0.8, msg="reused change")
    assert_close(wave.intensity_at_start, 0.6, msg="new intensity")

    expect_error(IntensityRangeError, wave.set_intensity_at_start, 0)
    print("  PASS")
    return True


def test_set_attenuation():
    """Attenuation updates in place next to another change, otherwise frees the old change."""
    print("\nTest: set_attenuation")
    crowded = make_ir_wave()
    crowded.step(1)
    crowded.add_attenuator(1000, 0.5, 'A')
    crowded.set_attenuation('A', 0.7)
    assert len(crowded.intensity_changes) == 2
    assert_close(crowded.get_attenuator('A').attenuation, 0.7, msg="attenuation")
    assert_close(crowded.get_intensity_at(1000.0005), 0.3, msg="updated in place")

    spaced = make_ir_wave()
    spaced.add_attenuator(1000, 0.5, 'A')
    spaced.set_attenuation('A', 0.7)
    changes = spaced.intensity_changes
    assert len(changes) == 2
    assert changes[0].is_anchored and changes[0].anchored_to == 'A'
    assert not changes[1].is_anchored
    assert_close(spaced.get_intensity_at(1000.0005), 0.3, msg="new anchored value")
    assert_close(spaced.get_intensity_at(2000), 0.5, msg="freed old value")

    spaced.set_attenuation('A', 0.705)
    assert len(spaced.intensity_changes) == 2
    assert_close(spaced.get_attenuator('A').attenuation, 0.7, msg="below threshold ignored")
    print("  PASS")
    return True


def test_attenuator_errors():
    print("\nTest: attenuator errors")
    wave = make_ir_wave()
    wave.add_attenuator(100, 0.5, 'A')
    expect_error(WaveStateError, wave.add_attenuator, 200, 0.5, 'A')
    expect_error(WaveStateError, wave.remove_attenuator, 'missing')
    expect_error(WaveStateError, wave.set_attenuation, 'missing', 0.5)
    expect_error(IntensityRangeError, wave.add_attenuator, 100, 1.5, 'B')
    expect_error(IntensityRangeError, wave.set_attenuation, 'A', -0.1)
    print("  PASS")
    return True


def test_attenuator_folds_into_start_intensity():
    """Once the start of an unsourced wave passes an attenuator, it applies to the whole wave."""
    print("\nTest: attenuator folding")
    wave = make_ir_wave()
    wave.step(1)
    wave.add_attenuator(1000, 0.5, 'A')
    wave.is_sourced = False
    wave.step(0.25)
    assert not wave.has_attenuator('A')
    assert_close(wave.intensity_at_start, 0.5, msg="folded intensity")
    assert all(not change.is_anchored for change in wave.intensity_changes)
    assert_close(wave.get_intensity_at(500), 0.5, msg="behind the old companion change")
    print("  PASS")
    return True


def test_attenuators_move_with_unsourced_start():
    print("\nTest: attenuators fixed in space")
    wave = make_ir_wave()
    wave.step(1)
    wave.add_attenuator(5000, 0.2, 'A')
    wave.add_attenuator(3000, 0.1, 'B')
    wave.is_sourced = False
    wave.step(0.125)
    sorted_distances = [a.distance_from_start for a in wave.get_sorted_attenuators()]
    assert_close(sorted_distances[0], 2000, msg="B")
    assert_close(sorted_distances[1], 4000, msg="A")
    anchored = [c for c in wave.intensity_changes if c.is_anchored]
    assert_close(anchored[0].distance_from_start, 2000, msg="anchored B")
    print("  PASS")
    return True


# =============================================================================
# Geometry, phase and state
# =============================================================================

def test_phase_and_end_point():
    print("\nTest: phase and end point")
    wave = make_ir_wave()
    assert_close(wave.get_phase_at(3000), math.pi / 2, msg="quarter wavelength")
    assert_close(wave.get_phase_at(6000), math.pi, msg="half wavelength")

    direction = geometry.rotate_vec(UP, math.pi * 0.1)
    tilted = Wave(constants.VISIBLE_WAVELENGTH, Point(1000, 0), direction, 50000)
    tilted.step(1)
    end = tilted.get_end_point()
    assert_close(end.x, 1000 - math.sin(math.pi * 0.1) * 8000, tol=1e-6, msg="end x")
    assert_close(end.y, math.cos(math.pi * 0.1) * 8000, tol=1e-6, msg="end y")
    assert_close(tilted.get_end_altitude(), end.y, tol=1e-6, msg="end altitude")
    assert tilted.is_visible() and not tilted.is_infrared()
    print("  PASS")
    return True


def test_state_round_trip():
    print("\nTest: wave state round trip")
    wave = make_ir_wave(debug_tag='lane-1')
    wave.step(1)
    wave.set_intensity_at_start(0.7)
    wave.add_attenuator(3000, 0.4, 'layer-3')
    wave.parent_uuid = 'parent'
    wave.interaction_type = 'atmosphere_emission'

    restored = Wave.from_state_object(wave.to_state_object())
    assert restored.uuid == wave.uuid
    assert restored.parent_uuid == 'parent'
    assert restored.interaction_type == 'atmosphere_emission'
    assert restored.debug_tag == 'lane-1'
    assert restored.has_attenuator('layer-3')
    for d in (0, 1, 2999, 3001, 3001.5, 7999):
        assert_close(restored.get_intensity_at(d), wave.get_intensity_at(d), msg=f"intensity at {d}")
    assert_close(restored.length, wave.length, msg="length")
    print("  PASS")
    return True


def main():
    print("=" * 70)
    print("WAVE TESTS")
    print("=" * 70)

    tests = [
        ("construction checks", test_construction_checks),
        ("sourced wave clamped", test_sourced_wave_is_clamped_at_limit),
        ("growth and phase", test_sourced_wave_growth_and_phase),
        ("completion", test_unsourced_wave_completes),
        ("negative dt", test_negative_dt_rejected),
        ("attenuator on new wave", test_attenuator_on_new_wave),
        ("freed change travels", test_removed_attenuator_change_keeps_traveling),
        ("add/remove round trip", test_add_remove_round_trip),
        ("remove beyond wave", test_remove_attenuator_beyond_wave_deletes_change),
        ("non-increasing profile", test_profile_never_increases_with_distance),
        ("change crosses attenuator", test_intensity_change_crossing_attenuator_while_sourced),
        ("attenuator crosses change", test_attenuator_crossing_intensity_change_while_unsourced),
        ("set_intensity_at_start", test_set_intensity_at_start),
        ("set_attenuation", test_set_attenuation),
        ("attenuator errors", test_attenuator_errors),
        ("attenuator folding", test_attenuator_folds_into_start_intensity),
        ("attenuators fixed in space", test_attenuators_move_with_unsourced_start),
        ("phase and end point", test_phase_and_end_point),
        ("state round trip", test_state_round_trip),
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
