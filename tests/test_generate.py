"""
Tests for the static data generator.

Tests cover:
- One generation cycle writes data.json with reading, values and details
- Command line entry point in mock mode
- Error scenarios: invalid configuration, missing rule file
"""

import json
import os
from unittest.mock import patch

import pytest

from weaaqi.dashboard_system import DashboardSystem
from weaaqi.generate import DATA_FILE_NAME, build_parser, generate, main
from weaaqi.openweather_service import OpenWeatherService


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Run inside tmp_path with no .env files and a clean environment."""
    monkeypatch.chdir(tmp_path)
    with patch("weaaqi.config.load_dotenv"), patch("weaaqi.openweather_service.load_dotenv"), \
            patch.dict(os.environ, {}, clear=True):
        yield tmp_path


class TestGenerate:
    """Test suite for a single generation cycle."""

    def test_writes_data_file(self, isolated_env, fixed_now):
        system = DashboardSystem()
        system.LOG_DIR = isolated_env / "logs"
        system.LOG_FILE = system.LOG_DIR / "dashboard_log.log"
        service = OpenWeatherService(mode="mock")

        path = generate(system, service, isolated_env / "dist", now=fixed_now)

        assert path == isolated_env / "dist" / DATA_FILE_NAME
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["generated_at"] == fixed_now.isoformat()
        assert document["reading"]["condition_code"] == 721
        assert document["presentation"]["condition"] == "MIST/FOG/HAZE"
        assert document["presentation"]["aqi_status"] == "UNHEALTHY"
        assert document["presentation"]["update_time"] == "14:30"
        assert document["details"]["data_mode"] == "mock"
        assert system.LOG_FILE.exists()


class TestMain:
    """Test suite for the command line entry point."""

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.output_dir is None
        assert args.mode is None
        assert args.watch is False

    def test_parser_rejects_unknown_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--mode", "satellite"])

    def test_mock_run(self, isolated_env):
        output_dir = isolated_env / "out"

        assert main(["--output-dir", str(output_dir), "--mode", "mock"]) == 0

        document = json.loads((output_dir / DATA_FILE_NAME).read_text(encoding="utf-8"))
        assert document["presentation"]["location"] == "HANOI, VIETNAM"
        assert (isolated_env / "logs" / "dashboard_log.log").exists()

    def test_output_dir_from_environment(self, isolated_env):
        with patch.dict(os.environ, {"WEAAQI_OUTPUT_DIR": str(isolated_env / "public")}):
            assert main([]) == 0
        assert (isolated_env / "public" / DATA_FILE_NAME).exists()

    # ==================== Error Scenarios ====================

    def test_invalid_configuration(self, isolated_env):
        with patch.dict(os.environ, {"WEAAQI_LAT": "abc"}):
            assert main(["--output-dir", str(isolated_env)]) == 1

    def test_unknown_timezone(self, isolated_env):
        """A mistyped zone is reported as a configuration error, not a traceback."""
        with patch.dict(os.environ, {"WEAAQI_TIMEZONE": "Mars/Olympus"}):
            assert main(["--output-dir", str(isolated_env / "out"), "--mode", "mock"]) == 1
        assert not (isolated_env / "out" / DATA_FILE_NAME).exists()

    def test_missing_rules_file(self, isolated_env):
        with patch.dict(os.environ, {"WEAAQI_RULES_PATH": str(isolated_env / "missing.yaml")}):
            assert main(["--output-dir", str(isolated_env / "out")]) == 1
        assert not (isolated_env / "out" / DATA_FILE_NAME).exists()
