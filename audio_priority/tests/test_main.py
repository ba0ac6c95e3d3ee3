"""
Тесты для CLI
"""

import json
from unittest.mock import patch

import pytest

from audio_priority.core.types import DeviceClass, RankedDevice
from audio_priority.main import build_parser, main, render_ranked_devices
from audio_priority.storage.local_storage import JsonFileStorage


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"storage:\n  path: {tmp_path / 'storage.json'}\n"
        f"logging:\n  dir: {tmp_path / 'logs'}\n  console: false\n",
        encoding="utf-8",
    )
    return path


class TestParser:
    """Тесты разбора аргументов"""

    def test_edit_command(self):
        """Тест команды перестановки"""
        args = build_parser().parse_args(["up", "input", "USB Mic"])
        assert args.command == "up"
        assert args.device_class == "input"
        assert args.name == "USB Mic"

    def test_list_class_filter(self):
        """Тест фильтра класса"""
        assert build_parser().parse_args(["list", "--class", "output"]).device_class == "output"
        assert build_parser().parse_args(["list"]).device_class is None

    def test_invalid_class_is_rejected(self):
        """Тест неверного класса"""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["top", "speakers", "AirPods"])


def test_render_ranked_devices():
    """Тест таблицы ранжированного списка"""
    devices = [
        RankedDevice(id="1", uid="u1", name="AirPods", transport_type="bluetooth",
                     is_output=True, priority_rank=1, is_current=True),
        RankedDevice(id="", uid="unavailable-HDMI", name="HDMI", is_output=True,
                     priority_rank=2, is_available=False),
    ]
    table = render_ranked_devices(DeviceClass.OUTPUT, devices)
    assert table.row_count == 2
    assert table.title == "Output devices"


class TestMain:
    """Тесты точки входа"""

    def test_top_command_updates_storage(self, config_file, tmp_path, backend):
        """Тест: top переставляет устройство и сохраняет список"""
        storage = JsonFileStorage(str(tmp_path / "storage.json"))
        storage.set_item("output_priority_list", json.dumps(["Speakers", "AirPods"]))
        backend.add("Speakers", active=True)

        with patch("audio_priority.main.setup_logging"), \
                patch("audio_priority.main.create_backend", return_value=backend):
            exit_code = main(["--config", str(config_file), "top", "output", "airpods"])

        assert exit_code == 0
        assert json.loads(storage.get_item("output_priority_list")) == ["AirPods", "Speakers"]
        assert storage.get_item("output_priority_dirty") == "true"

    def test_refresh_command(self, config_file, backend):
        """Тест: refresh переключает на лучшее устройство"""
        backend.add("Speakers", active=True)
        backend.add("USB Mic", DeviceClass.INPUT, active=True)

        with patch("audio_priority.main.setup_logging"), \
                patch("audio_priority.main.create_backend", return_value=backend):
            exit_code = main(["--config", str(config_file), "refresh"])

        assert exit_code == 0
        assert backend.switch_calls == []

    def test_unexpected_error_returns_1(self, config_file):
        """Тест: непредвиденная ошибка - код 1"""
        with patch("audio_priority.main.setup_logging"), \
                patch("audio_priority.main.create_backend", side_effect=RuntimeError("boom")):
            assert main(["--config", str(config_file), "check"]) == 1
