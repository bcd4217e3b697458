import os

import pytest

from pixel_synth.file_manager import GradioFileManager, track_filename


@pytest.fixture
def manager(tmp_path, monkeypatch):
    monkeypatch.setenv("GRADIO_TEMP_DIR", str(tmp_path))
    fm = GradioFileManager("abc")
    yield fm
    fm.cleanup_all()


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Neon Rain", "NEON_RAIN.mid"),
        ("  city//lights!! ", "CITY_LIGHTS.mid"),
        ("track-7", "TRACK_7.mid"),
    ],
)
def test_track_filename(title, expected):
    assert track_filename(title) == expected


def test_track_filename_fallback():
    name = track_filename(None, ".wav")
    assert name.startswith("DARK_SYNTH_")
    assert name.endswith(".wav")
    assert track_filename("!!!").startswith("DARK_SYNTH_")


def test_session_directory(manager, tmp_path):
    assert manager.session_dir == tmp_path / "pixel-synth-abc"
    assert manager.session_dir.is_dir()


def test_anonymous_sessions_get_unique_dirs(tmp_path, monkeypatch):
    monkeypatch.setenv("GRADIO_TEMP_DIR", str(tmp_path))
    a, b = GradioFileManager(), GradioFileManager()
    assert a.session_dir != b.session_dir
    a.cleanup_all()
    b.cleanup_all()


def test_write_file_overwrites(manager):
    path = manager.write_file("midi", b"first", "A.mid")
    manager.write_file("midi", b"second", "A.mid")
    with open(path, "rb") as f:
        assert f.read() == b"second"
    assert not os.path.exists(path + ".tmp")


def test_new_name_replaces_previous_file(manager):
    old = manager.write_file("midi", b"x", "OLD.mid")
    new = manager.write_file("midi", b"y", "NEW.mid")
    assert not os.path.exists(old)
    assert os.path.exists(new)


def test_types_are_independent(manager):
    midi = manager.write_file("midi", b"x", "T.mid")
    wav = manager.write_file("wav", b"y", "T.wav")
    manager.cleanup_file("wav")
    assert os.path.exists(midi)
    assert not os.path.exists(wav)


def test_cleanup_all_is_repeatable(manager):
    manager.write_file("midi", b"x", "T.mid")
    manager.cleanup_all()
    manager.cleanup_all()
    assert not manager.session_dir.exists()
    assert manager.current_files == {}
