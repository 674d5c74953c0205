import pytest

from facefx.modes import FollowTarget, InputModeController

from conftest import FakeAudio


def test_defaults():
    modes = InputModeController()
    assert (modes.filter_mode, modes.draw_mode, modes.gesture_mode) == (0, 0, 0)
    assert modes.follow_target is FollowTarget.FACE
    assert not modes.sound_enabled


@pytest.mark.parametrize(
    'key, attr, expected',
    [
        ('f', 'filter_mode', [1, 2, 3, 0, 1]),
        ('d', 'draw_mode', [1, 2, 3, 0, 1]),
        ('g', 'gesture_mode', [1, 2, 0, 1, 2]),
        ('s', 'sound_enabled', [True, False, True, False, True]),
    ],
)
def test_keys_cycle_modes(key, attr, expected):
    modes = InputModeController()
    seen = []
    for _ in expected:
        assert modes.handle_key(key)
        seen.append(getattr(modes, attr))
    assert seen == expected


def test_modes_are_independent():
    modes = InputModeController()
    modes.handle_key('f')
    modes.handle_key('g')
    modes.handle_key('g')
    assert (modes.filter_mode, modes.draw_mode, modes.gesture_mode) == (1, 0, 2)


def test_key_codes():
    modes = InputModeController()
    assert modes.handle_key(ord('d'))
    assert modes.draw_mode == 1
    assert not modes.handle_key(255)  # cv2.waitKey(...) & 0xFF with no key
    assert not modes.handle_key(-1)
    assert modes.draw_mode == 1


def test_keys_are_case_sensitive():
    modes = InputModeController()
    for key in 'FDGS':
        assert not modes.handle_key(key)
        assert not modes.handle_key(ord(key))
    assert modes.status_line() == InputModeController().status_line()


def test_unbound_keys():
    modes = InputModeController()
    before = modes.status_line()
    assert not modes.handle_key('q')
    assert modes.status_line() == before


def test_click_toggles_follow_target_and_starts_audio_once():
    modes = InputModeController()
    audio = FakeAudio()
    modes.handle_click(audio)
    assert modes.follow_mouse
    assert modes.sound_enabled
    modes.handle_click(audio)
    assert modes.follow_target is FollowTarget.FACE
    assert audio.start_calls == 1


def test_click_while_sound_off_re_enables_it():
    modes = InputModeController()
    audio = FakeAudio()
    modes.handle_click(audio)
    modes.handle_key('s')
    assert not modes.sound_enabled
    modes.handle_click(audio)
    assert modes.sound_enabled


def test_click_with_failing_audio_keeps_sound_off():
    modes = InputModeController()
    modes.handle_click(FakeAudio(can_start=False))
    assert modes.follow_mouse
    assert not modes.sound_enabled


def test_click_without_audio():
    modes = InputModeController()
    modes.handle_click()
    assert modes.follow_mouse


def test_status_line():
    modes = InputModeController(filter_mode=3, draw_mode=1, gesture_mode=2)
    modes.handle_click(FakeAudio())
    assert modes.status_line() == (
        'Mode: Mouse | Filter: 3 | Draw: 1 | Gesture: 2 | Sound: on'
    )


@pytest.mark.parametrize(
    'kwargs', [{'filter_mode': 4}, {'draw_mode': -1}, {'gesture_mode': 3}]
)
def test_invalid_initial_modes(kwargs):
    with pytest.raises(ValueError):
        InputModeController(**kwargs)


def test_click_after_sound_key_still_starts_audio():
    modes = InputModeController()
    audio = FakeAudio()
    modes.handle_key('s')
    assert modes.sound_enabled
    assert not audio.running
    modes.handle_click(audio)
    assert audio.running
    assert audio.start_calls == 1
    assert modes.sound_enabled


def test_click_after_sound_key_with_failing_audio():
    modes = InputModeController()
    audio = FakeAudio(can_start=False)
    modes.handle_key('s')
    modes.handle_click(audio)
    modes.handle_click(audio)
    assert audio.failed
    assert audio.start_calls == 1
    # the flag is the user's; with no synth, pitches are simply not played
    assert modes.sound_enabled
