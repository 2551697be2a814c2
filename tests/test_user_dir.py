from __future__ import annotations

from pathlib import Path

from codesmith.core.user_dir import configure_user_dir, get_user_dir, user_dir_context


def test_user_dir_respects_environment(monkeypatch, tmp_path: Path) -> None:
    env_home = tmp_path / "home-root"
    monkeypatch.setenv("CODESMITH_HOME", str(env_home))

    with user_dir_context() as user_dir:
        assert user_dir.root == env_home
        assert user_dir.settings_path() == env_home / "settings.json"
        assert env_home.exists()


def test_default_root_is_in_home(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("CODESMITH_HOME", raising=False)
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    with user_dir_context():
        assert get_user_dir().root == tmp_path / ".codesmith"


def test_pinned_root_wins_over_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CODESMITH_HOME", str(tmp_path / "env"))
    with user_dir_context(tmp_path / "custom") as user_dir:
        assert user_dir.root == tmp_path / "custom"
        assert get_user_dir().root == tmp_path / "custom"
    assert get_user_dir().root == tmp_path / "env"


def test_default_lookup_follows_environment_changes(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CODESMITH_HOME", str(tmp_path / "first"))
    with user_dir_context():
        assert get_user_dir().root == tmp_path / "first"
        monkeypatch.setenv("CODESMITH_HOME", str(tmp_path / "later"))
        assert get_user_dir().root == tmp_path / "later"


def test_configure_user_dir_can_be_reset(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CODESMITH_HOME", str(tmp_path / "env"))
    with user_dir_context():
        assert configure_user_dir(tmp_path / "pinned").root == tmp_path / "pinned"
        assert configure_user_dir().root == tmp_path / "env"


def test_data_path_without_creation(tmp_path: Path) -> None:
    with user_dir_context(tmp_path / "lazy") as user_dir:
        target = user_dir.data_path("nested", "file.json", create=False)
        assert target == tmp_path / "lazy" / "nested" / "file.json"
        assert not target.parent.exists()
