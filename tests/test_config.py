"""Tests for configuration management system."""

import pytest
import tempfile
import shutil
from pathlib import Path
from omegaconf import DictConfig, OmegaConf

from slide_solver.config import (
    ConfigManager, load_config, get_config, get_parameter, validate_config,
    ConfigValidationError, check_config_consistency, default_config_dir
)
from slide_solver.config.config_manager import ConfigContext


CONFIG_CONTENT = """
solver:
  engine: sequential
  use_cache: true

search:
  astar:
    heuristic_threshold: null
    max_iterations: 1000
    max_computation_time: null
    statistics_tracking: true
  parallel:
    num_workers: 4

batch:
  header_lines: 2
  threads: 2
  answers_file: answers.txt

system:
  caching:
    redis:
      enabled: true
      backend: memory
      port: 6379
      ttl: 0
    file_cache:
      enabled: false
      max_cache_size: 0.1

logging:
  level: INFO
"""


@pytest.fixture
def temp_config_dir():
    """Create temporary configuration directory."""
    temp_dir = tempfile.mkdtemp()
    config_dir = Path(temp_dir) / "conf"
    config_dir.mkdir()

    config_file = config_dir / "config.yaml"
    with open(config_file, 'w') as f:
        f.write(CONFIG_CONTENT)

    yield config_dir

    # Cleanup
    shutil.rmtree(temp_dir)


class TestConfigManager:
    """Test ConfigManager functionality."""

    def test_config_manager_initialization(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        assert manager.config_dir.resolve() == temp_config_dir.resolve()
        assert manager.config is None

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(tmp_path / "missing")

    def test_load_config_basic(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        config = manager.load_config()

        assert isinstance(config, DictConfig)
        assert config.solver.engine == "sequential"
        assert config.search.astar.max_iterations == 1000
        assert config.search.astar.heuristic_threshold is None
        assert manager.config is config

    def test_load_config_with_overrides(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        config = manager.load_config(overrides=[
            "solver.engine=parallel",
            "search.parallel.num_workers=8",
            "search.astar.heuristic_threshold=12.5",
        ])

        assert config.solver.engine == "parallel"
        assert config.search.parallel.num_workers == 8
        assert config.search.astar.heuristic_threshold == 12.5

    def test_invalid_override_fails_validation(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        with pytest.raises(ConfigValidationError):
            manager.load_config(overrides=["search.parallel.num_workers=0"])

    def test_get_parameter(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        manager.load_config()

        assert manager.get_parameter("batch.header_lines") == 2
        assert manager.get_parameter("system.caching.redis.backend") == "memory"
        assert manager.get_parameter("nonexistent.param", "default") == "default"

    def test_set_parameter(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        manager.load_config()

        manager.set_parameter("batch.threads", 8)
        assert manager.get_parameter("batch.threads") == 8

        manager.set_parameter("new.parameter", "test_value")
        assert manager.get_parameter("new.parameter") == "test_value"

    def test_update_config(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        manager.load_config()

        manager.update_config({
            "search.astar.max_iterations": 50,
            "solver.use_cache": False
        })

        assert manager.get_parameter("search.astar.max_iterations") == 50
        assert manager.get_parameter("solver.use_cache") is False

    def test_save_config(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        manager.load_config()
        manager.set_parameter("solver.engine", "parallel")

        output_file = temp_config_dir / "saved" / "config.yaml"
        manager.save_config(output_file)

        assert output_file.exists()
        saved_config = OmegaConf.load(output_file)
        assert saved_config.solver.engine == "parallel"

    def test_to_yaml(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)
        manager.load_config()
        assert "num_workers: 4" in manager.to_yaml()

    def test_config_without_loading(self, temp_config_dir):
        manager = ConfigManager(temp_config_dir)

        with pytest.raises(RuntimeError, match="No configuration loaded"):
            manager.get_parameter("solver.engine")

        with pytest.raises(RuntimeError, match="No configuration loaded"):
            manager.set_parameter("solver.engine", "parallel")

        with pytest.raises(RuntimeError, match="No configuration loaded"):
            manager.update_config({"solver.engine": "parallel"})

        with pytest.raises(RuntimeError, match="No configuration loaded"):
            manager.save_config("test.yaml")

    def test_project_config_is_valid(self):
        assert default_config_dir().name == "conf"
        config = ConfigManager().load_config()

        assert config.search.parallel.num_workers == 24
        assert config.search.astar.max_iterations == 1_000_000
        assert config.batch.header_lines == 2
        assert config.system.caching.redis.backend == "memory"

    def test_project_config_accepts_updates(self):
        manager = ConfigManager()
        manager.load_config()

        manager.set_parameter("search.parallel.num_workers", 3)
        manager.update_config({"batch.threads": 6, "extra.note": "added"})

        assert manager.get_parameter("search.parallel.num_workers") == 3
        assert manager.get_parameter("batch.threads") == 6
        assert manager.get_parameter("extra.note") == "added"


class TestGlobalConfigFunctions:
    """Test global configuration functions."""

    def test_load_config_global(self, temp_config_dir):
        config = load_config(config_dir=temp_config_dir)

        assert isinstance(config, DictConfig)
        assert get_config() is config
        assert get_parameter("batch.threads") == 2
        assert get_parameter("missing.key", 7) == 7

    def test_load_config_with_overrides_global(self, temp_config_dir):
        config = load_config(overrides=["batch.header_lines=0"], config_dir=temp_config_dir)
        assert config.batch.header_lines == 0


class TestConfigContext:
    """Test ConfigContext context manager."""

    def test_config_context(self, temp_config_dir):
        config = load_config(config_dir=temp_config_dir)
        assert config.search.parallel.num_workers == 4

        with ConfigContext(**{
            "search.parallel.num_workers": 2,
            "solver.engine": "parallel"
        }) as ctx_config:
            assert ctx_config.search.parallel.num_workers == 2
            assert ctx_config.solver.engine == "parallel"

        final_config = get_config()
        assert final_config.search.parallel.num_workers == 4
        assert final_config.solver.engine == "sequential"

    def test_new_keys_are_removed(self, temp_config_dir):
        load_config(config_dir=temp_config_dir)

        with ConfigContext(**{"solver.extra": 1}) as ctx_config:
            assert ctx_config.solver.extra == 1

        assert "extra" not in get_config().solver


class TestConfigValidation:
    """Test configuration validation."""

    def test_valid_config(self):
        validate_config(OmegaConf.create(CONFIG_CONTENT))

    def test_empty_config_sections(self):
        validate_config(OmegaConf.create({}))
        validate_config(OmegaConf.create({"solver": {}, "search": {}, "batch": {}}))

    @pytest.mark.parametrize("section", [
        {"solver": {"engine": "breadth_first"}},
        {"search": {"astar": {"heuristic_threshold": 0}}},
        {"search": {"astar": {"heuristic_threshold": -3.5}}},
        {"search": {"astar": {"max_iterations": 0}}},
        {"search": {"astar": {"max_computation_time": 0}}},
        {"search": {"parallel": {"num_workers": 0}}},
        {"batch": {"header_lines": -1}},
        {"batch": {"threads": 0}},
        {"system": {"caching": {"redis": {"enabled": True, "backend": "memcached"}}}},
        {"system": {"caching": {"redis": {"enabled": True, "port": 70000}}}},
        {"system": {"caching": {"redis": {"enabled": True, "ttl": -1}}}},
        {"system": {"caching": {"file_cache": {"max_cache_size": 0}}}},
        {"logging": {"level": "CHATTY"}},
    ])
    def test_invalid_config(self, section):
        with pytest.raises(ConfigValidationError):
            validate_config(OmegaConf.create(section))

    def test_disabled_redis_is_not_checked(self):
        validate_config(OmegaConf.create(
            {"system": {"caching": {"redis": {"enabled": False, "port": 0}}}}
        ))

    def test_consistency_warnings(self):
        config = OmegaConf.create({
            "solver": {"engine": "parallel", "use_cache": False},
            "search": {"parallel": {"num_workers": 1}},
            "system": {"caching": {"redis": {"enabled": True}}}
        })

        issues = check_config_consistency(config)
        assert len(issues) == 2
        assert any("single worker" in issue for issue in issues)
        assert any("use_cache" in issue for issue in issues)

    def test_consistent_config_has_no_warnings(self):
        assert check_config_consistency(OmegaConf.create(CONFIG_CONTENT)) == []
