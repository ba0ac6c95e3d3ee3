"""
Тесты для UnifiedConfigLoader
"""

import os

from audio_priority.config.unified_config_loader import CONFIG_ENV_VAR, UnifiedConfigLoader


class TestUnifiedConfigLoader:
    """Тесты загрузки конфигурации"""

    def test_defaults_without_user_file(self, tmp_path):
        """Тест: без пользовательского файла - значения по умолчанию"""
        loader = UnifiedConfigLoader(tmp_path / "missing.yaml")

        priority = loader.get_priority_config()
        assert priority.auto_switch_enabled is True
        assert priority.also_switch_system_sound is False
        assert priority.polling_interval == 5.0
        assert loader.get_storage_config().path == "~/.audio_priority/storage.json"
        assert loader.get_backend_config().switchaudio_path is None
        assert loader.get_app_config().name == "AudioPriority"

    def test_user_file_overrides_defaults(self, tmp_path):
        """Тест: пользовательский файл перекрывает только указанные ключи"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "priority:\n  auto_switch_enabled: false\nswitchaudio:\n  path: /usr/local/bin/SwitchAudioSource\n",
            encoding="utf-8",
        )
        loader = UnifiedConfigLoader(config_file)

        priority = loader.get_priority_config()
        assert priority.auto_switch_enabled is False
        assert priority.polling_interval == 5.0
        backend = loader.get_backend_config()
        assert backend.switchaudio_path == "/usr/local/bin/SwitchAudioSource"
        assert backend.switchaudio_timeout == 10.0

    def test_reload_on_modification(self, tmp_path):
        """Тест: изменение файла подхватывается на следующем чтении"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("priority:\n  auto_switch_enabled: true\n", encoding="utf-8")
        loader = UnifiedConfigLoader(config_file)
        assert loader.get_priority_config().auto_switch_enabled is True

        config_file.write_text("priority:\n  auto_switch_enabled: false\n", encoding="utf-8")
        mtime = os.path.getmtime(config_file) + 10
        os.utime(config_file, (mtime, mtime))

        assert loader.get_priority_config().auto_switch_enabled is False

    def test_broken_user_file_falls_back_to_defaults(self, tmp_path):
        """Тест: битый YAML - значения по умолчанию"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("priority: [unclosed\n", encoding="utf-8")
        loader = UnifiedConfigLoader(config_file)

        assert loader.get_priority_config().auto_switch_enabled is True

    def test_env_var_selects_file(self, tmp_path, monkeypatch):
        """Тест: путь из переменной окружения"""
        config_file = tmp_path / "env.yaml"
        config_file.write_text("logging:\n  level: debug\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        loader = UnifiedConfigLoader()

        assert loader.config_file == config_file
        assert loader.get_logging_config().level == "DEBUG"
