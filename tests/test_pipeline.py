import numpy as np
import pytest

from facefx.face_signal import FaceSignalAdapter
from facefx.gestures import Gesture
from facefx.modes import InputModeController
from facefx.pipeline import EffectPipeline

from conftest import FakeAudio, make_face, smiling_face

WIDTH, HEIGHT = 160, 120


@pytest.fixture
def modes():
    return InputModeController()


@pytest.fixture
def face_signal(modes):
    return FaceSignalAdapter(modes, FakeAudio(), canvas_height=HEIGHT)


@pytest.fixture
def pipeline(face_signal, modes, rng):
    return EffectPipeline(face_signal, modes, width=WIDTH, height=HEIGHT, rng=rng)


def blank():
    return np.zeros((HEIGHT, WIDTH, 3), dtype=np.uint8)


def test_initial_pool(pipeline):
    assert len(pipeline.particles) == 100
    assert pipeline.ripples == []
    for particle in pipeline.particles:
        x, y = particle.position
        assert 0 <= x <= WIDTH and 0 <= y <= HEIGHT


def test_no_face_pauses_everything(pipeline, face_signal):
    face_signal.on_detection([make_face(nose=(80, 60))])
    for _ in range(30):
        pipeline.tick(blank())
    face_signal.on_detection([])

    lifespans = [p.lifespan for p in pipeline.particles]
    ripple_sizes = [r.size for r in pipeline.ripples]
    history = list(face_signal.gesture_history)

    for _ in range(20):
        pipeline.tick(blank())

    assert [p.lifespan for p in pipeline.particles] == lifespans
    assert [r.size for r in pipeline.ripples] == ripple_sizes
    assert list(face_signal.gesture_history) == history


def test_no_face_draws_only_the_status_line(pipeline):
    img = pipeline.tick(blank())
    assert img[40:, :].sum() == 0
    assert img[:30, :].sum() > 0


def test_particles_age_while_a_face_is_present(pipeline, face_signal):
    face_signal.on_detection([make_face(nose=(80, 60))])
    pipeline.tick(blank())
    assert {p.lifespan for p in pipeline.particles} == {254}


def test_pool_size_is_invariant_across_deaths(pipeline, face_signal):
    face_signal.on_detection([make_face(nose=(80, 60))])
    for _ in range(300):
        pipeline.tick(blank())
        assert len(pipeline.particles) == 100
    # every initial particle died and was replaced by now
    assert max(p.lifespan for p in pipeline.particles) > 0
    assert all(p.lifespan >= -1 for p in pipeline.particles)


def test_dead_particles_are_replaced_without_moving(pipeline, face_signal):
    face_signal.on_detection([make_face(nose=(80, 60))])
    dead = pipeline.particles[0]
    dead.lifespan = -1
    pipeline.tick(blank())
    assert dead not in pipeline.particles
    assert len(pipeline.particles) == 100
    assert pipeline.particles[-1].lifespan == 255


def test_particles_follow_the_face(pipeline, face_signal):
    face_signal.on_detection([make_face(nose=(80, 60))])
    for particle in pipeline.particles:
        particle.velocity = np.zeros(2)
    distances = [np.linalg.norm(p.position - (80, 60)) for p in pipeline.particles]
    pipeline.tick(blank(), pointer=(0, 0))
    for particle, before in zip(pipeline.particles, distances):
        assert np.linalg.norm(particle.position - (80, 60)) <= before


def test_particles_follow_the_mouse(pipeline, face_signal, modes):
    face_signal.on_detection([make_face(nose=(80, 60))])
    modes.toggle_follow_target()
    pipeline.particles = pipeline.particles[:1]
    particle = pipeline.particles[0]
    particle.position = np.array([50.0, 50.0])
    particle.velocity = np.zeros(2)
    pipeline.tick(blank(), pointer=(150, 50))
    np.testing.assert_allclose(particle.position, [50.5, 50.0])


def test_ripples_spawn_at_the_nose(face_signal, modes, rng):
    pipeline = EffectPipeline(
        face_signal, modes, width=WIDTH, height=HEIGHT, ripple_probability=1.0, rng=rng
    )
    face_signal.on_detection([make_face(nose=(70, 50))])
    pipeline.tick(blank())
    assert len(pipeline.ripples) == 1
    assert pipeline.ripples[0].origin == (70.0, 50.0)
    assert pipeline.ripples[0].size > 0


def test_ripples_are_culled_when_dead(face_signal, modes, rng):
    pipeline = EffectPipeline(
        face_signal, modes, width=WIDTH, height=HEIGHT, ripple_probability=0.0, rng=rng
    )
    face_signal.on_detection([make_face(nose=(70, 50))])
    from facefx.particles import Ripple

    pipeline.ripples = [Ripple(70, 50, max_size=10, speed=4)]
    for _ in range(2):
        pipeline.tick(blank())
    assert len(pipeline.ripples) == 1
    pipeline.tick(blank())
    assert pipeline.ripples == []


def test_ripple_spawn_rate(face_signal, modes):
    pipeline = EffectPipeline(
        face_signal,
        modes,
        width=WIDTH,
        height=HEIGHT,
        n_particles=0,
        rng=np.random.default_rng(1),
    )
    face_signal.on_detection([make_face(nose=(70, 50))])
    n_spawned = 0
    for _ in range(2000):
        n_before = len(pipeline.ripples)
        pipeline.maybe_spawn_ripple((70, 50))
        n_spawned += len(pipeline.ripples) - n_before
    assert 120 < n_spawned < 280


def test_ripple_cap(face_signal, modes, rng):
    pipeline = EffectPipeline(
        face_signal,
        modes,
        width=WIDTH,
        height=HEIGHT,
        ripple_probability=1.0,
        max_ripples=3,
        rng=rng,
    )
    face_signal.on_detection([make_face(nose=(70, 50))])
    for _ in range(10):
        pipeline.tick(blank())
    assert len(pipeline.ripples) <= 3


def test_smile_spawns_particles_in_gesture_mode_2(pipeline, face_signal, modes):
    modes.gesture_mode = 2
    face_signal.on_detection([smiling_face(nose=(80, 60))])
    assert face_signal.current_gesture is Gesture.SMILE
    for n in range(1, 6):
        pipeline.tick(blank())
        assert len(pipeline.particles) == 100 + 5 * n


def test_smile_does_not_spawn_in_other_gesture_modes(pipeline, face_signal, modes):
    face_signal.on_detection([smiling_face(nose=(80, 60))])
    for gesture_mode in (0, 1):
        modes.gesture_mode = gesture_mode
        for _ in range(3):
            pipeline.tick(blank())
        assert len(pipeline.particles) == 100


def test_other_gestures_do_not_spawn(pipeline, face_signal, modes):
    modes.gesture_mode = 2
    face_signal.on_detection([make_face(nose=(80, 60), left_eyelid_y=100, right_eyelid_y=80)])
    assert face_signal.current_gesture is Gesture.WINK
    for _ in range(3):
        pipeline.tick(blank())
    assert len(pipeline.particles) == 100


def test_smile_without_face_does_not_spawn(pipeline, face_signal, modes):
    modes.gesture_mode = 2
    face_signal.on_detection([smiling_face()])
    face_signal.on_detection([])
    assert face_signal.current_gesture is Gesture.SMILE
    pipeline.tick(blank())
    assert len(pipeline.particles) == 100


def test_particle_cap(face_signal, modes, rng):
    pipeline = EffectPipeline(
        face_signal, modes, width=WIDTH, height=HEIGHT, max_particles=112, rng=rng
    )
    modes.gesture_mode = 2
    face_signal.on_detection([smiling_face(nose=(80, 60))])
    for _ in range(5):
        pipeline.tick(blank())
    assert len(pipeline.particles) == 112


def test_gesture_label_is_drawn_in_gesture_modes(face_signal, modes, rng):
    pipeline = EffectPipeline(
        face_signal,
        modes,
        width=WIDTH,
        height=HEIGHT,
        n_particles=0,
        ripple_probability=0.0,
        rng=rng,
    )
    face_signal.on_detection([make_face(nose=(80, 60))])
    label_area = (slice(HEIGHT - 50, HEIGHT - 20), slice(0, 120))

    assert pipeline.tick(blank())[label_area].sum() == 0
    modes.gesture_mode = 1
    assert pipeline.tick(blank())[label_area].sum() > 0


@pytest.mark.parametrize('draw_mode', [1, 2, 3])
def test_draw_modes_draw_something(face_signal, modes, rng, draw_mode):
    pipeline = EffectPipeline(
        face_signal,
        modes,
        width=WIDTH,
        height=HEIGHT,
        n_particles=0,
        ripple_probability=0.0,
        rng=rng,
    )
    face_signal.on_detection([make_face(nose=(80, 60))])
    without = pipeline.tick(blank())
    modes.draw_mode = draw_mode
    with_overlay = pipeline.tick(blank())
    assert with_overlay.sum() > without.sum()


def test_filter_is_applied(pipeline, modes):
    modes.filter_mode = 2
    img = pipeline.tick(blank())
    # inverted black, except where the status line is drawn
    assert (img[40:] == 255).all()


def test_filter_does_not_touch_the_input_frame(pipeline, modes):
    modes.filter_mode = 1
    frame = blank()
    pipeline.tick(frame)
    assert frame.sum() == 0
