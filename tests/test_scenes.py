import math

import numpy as np
import pytest

from yee2d import Engine
from yee2d.scenes import SCENES, continuous_wave, double_slit, fiber_cross_section, gaussian_pulse


def test_continuous_wave():
    assert continuous_wave(0.0, 1.0) == 0.0
    assert continuous_wave(0.25, 1.0, amplitude=2.0) == pytest.approx(2.0)
    # half way through the ramp the envelope is 0.5
    assert continuous_wave(0.25, 1.0, ramp=0.5) == pytest.approx(0.5)
    assert continuous_wave(1.25, 1.0, ramp=0.5) == pytest.approx(1.0)


def test_gaussian_pulse():
    assert gaussian_pulse(3.0, t0=3.0, spread=1.0, amplitude=0.7) == pytest.approx(0.7)
    assert gaussian_pulse(4.0, t0=3.0, spread=1.0) == pytest.approx(math.exp(-0.5))


def test_fiber_cross_section_layers():
    engine = Engine.with_size(90, 60)
    sx, sy = fiber_cross_section(engine, core_index=1.5, cladding_index=1.2,
                                 core_width=6, cladding_width=20)
    eps = engine.material.eps_r
    obstacle = engine.material.obstacle
    assert engine.geometry.is_interior(sx, sy)
    assert eps[sy, sx] == pytest.approx(2.25)
    # cladding rows 20..39, core rows 27..32
    assert np.all(eps[27:33] == np.float32(2.25))
    assert np.allclose(eps[20:27], 1.44) and np.allclose(eps[33:40], 1.44)
    assert np.all(obstacle[19]) and np.all(obstacle[40])
    assert np.all(eps[:19] == 1.0) and not obstacle[20:40].any()


def test_fiber_without_jacket():
    engine = Engine.with_size(40, 30)
    fiber_cross_section(engine, jacket=False)
    assert not engine.material.obstacle.any()


def test_double_slit_openings():
    engine = Engine.with_size(120, 100)
    sx, sy = double_slit(engine, wall_x=40, slit_width=4, slit_separation=20)
    column = engine.material.obstacle[:, 40]
    openings = np.flatnonzero(~column)
    assert list(openings) == [38, 39, 40, 41, 58, 59, 60, 61]
    assert engine.material.obstacle.sum() == 100 - 8
    assert sx < 40 and engine.geometry.is_interior(sx, sy)


@pytest.mark.parametrize('name', sorted(SCENES))
def test_scenes_drive_a_stable_run(name):
    engine = Engine.with_size(80, 60)
    sx, sy = SCENES[name](engine)
    for _ in range(100):
        engine.add_source(sx, sy, continuous_wave(engine.clock, 0.25, ramp=2.0))
        engine.step(1.0)
    assert engine.check_divergence()
    assert engine.fields.is_finite()
    frame = engine.encode()
    assert len(frame) == 80 * 60
