import logging

import pytest
import yaml

from kpieval.config import ConfigLoader, KpievalConfig, load_config


@pytest.fixture(autouse=True)
def user_config_dir(tmp_path, monkeypatch):
    user_dir = tmp_path / "user"
    monkeypatch.setattr(ConfigLoader, "USER_CONFIG_DIR", user_dir)
    return user_dir


@pytest.fixture
def project(tmp_path):
    path = tmp_path / "project"
    path.mkdir()
    return path


def write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


class TestConfigLoader:
    def test_defaults_without_file(self, project):
        loader = ConfigLoader(project)
        assert loader.get_config_path() is None
        config = loader.load()
        assert config == KpievalConfig()
        assert config.database.path == "kpieval.duckdb"
        assert config.logging.level == "INFO"

    def test_project_file(self, project):
        write_yaml(project / "kpieval.yaml", {"database": {"path": "data/kpi.duckdb"}, "logging": {"level": "DEBUG"}})
        config = ConfigLoader(project).load()
        assert config.database.path == "data/kpi.duckdb"
        assert config.logging.level == "DEBUG"

    def test_project_file_wins_over_user_file(self, project, user_config_dir):
        write_yaml(user_config_dir / "kpieval.yaml", {"logging": {"level": "ERROR"}})
        write_yaml(project / "kpieval.yaml", {"logging": {"level": "WARNING"}})
        assert ConfigLoader(project).load().logging.level == "WARNING"

    def test_user_file_fallback(self, project, user_config_dir):
        write_yaml(user_config_dir / "kpieval.yaml", {"logging": {"level": "ERROR"}})
        loader = ConfigLoader(project)
        assert loader.get_config_path() == user_config_dir / "kpieval.yaml"
        assert loader.load().logging.level == "ERROR"

    def test_empty_file(self, project):
        (project / "kpieval.yaml").write_text("", encoding="utf-8")
        assert ConfigLoader(project).load() == KpievalConfig()

    @pytest.mark.parametrize("content", ["database: [unclosed", "database:\n  path: [1, 2]\n"])
    def test_unreadable_file_falls_back_to_defaults(self, project, caplog, content):
        (project / "kpieval.yaml").write_text(content, encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="kpieval.config.loader"):
            config = ConfigLoader(project).load()
        assert config == KpievalConfig()
        assert "Failed to load config" in caplog.text

    def test_save_and_load(self, project):
        loader = ConfigLoader(project)
        config = KpievalConfig()
        config.database.path = ":memory:"
        path = loader.save(config)
        assert path == project / "kpieval.yaml"
        assert loader.load().database.path == ":memory:"

    def test_save_user_level(self, project, user_config_dir):
        path = ConfigLoader(project).save(KpievalConfig(), user_level=True)
        assert path == user_config_dir / "kpieval.yaml"
        assert yaml.safe_load(path.read_text(encoding="utf-8"))["version"] == 1

    def test_database_path(self, project, tmp_path):
        loader = ConfigLoader(project)
        config = KpievalConfig()
        assert loader.database_path(config) == str(project / "kpieval.duckdb")

        config.database.path = ":memory:"
        assert loader.database_path(config) == ":memory:"

        config.database.path = str(tmp_path / "abs.duckdb")
        assert loader.database_path(config) == str(tmp_path / "abs.duckdb")


def test_load_config_accepts_str(project):
    write_yaml(project / "kpieval.yaml", {"version": 2})
    assert load_config(str(project)).version == 2
