import json
import logging
import os
import queue
import threading
import time

import pytest

from slider_bridge.config import ConfigStore, load_slider_config
from slider_bridge.models import SliderConfig
from slider_bridge.reload import ConfigReloadWatcher


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "sliders_config.json"
    _write(path, {
        "esphome_ip_addr": "192.168.1.50",
        "esphome_slider_names": ["a", "b"],
        "invert_sliders": True,
        "noise_reduction": "high",
    })
    return path


class TestLoadSliderConfig:
    def test_load(self, config_file):
        config = load_slider_config(str(config_file))
        assert config.esphome_ip_addr == "192.168.1.50"
        assert config.esphome_slider_names == ["a", "b"]
        assert config.slider_count == 2
        assert config.invert_sliders is True
        assert config.noise_reduction_level == 0.035

    def test_missing_file_is_empty_config(self, tmp_path):
        config = load_slider_config(str(tmp_path / "nope.json"))
        assert config.slider_count == 0
        assert config.noise_reduction_level == 0.025

    @pytest.mark.parametrize(
        "level,expected",
        [("low", 0.015), ("default", 0.025), ("HIGH", 0.035), ("bogus", 0.025), (0.05, 0.05), ("0.1", 0.1)],
    )
    def test_noise_reduction_levels(self, level, expected):
        config = SliderConfig.model_validate({"noise_reduction": level})
        assert config.noise_reduction_level == expected

    def test_unknown_noise_reduction_name_is_logged(self, caplog):
        caplog.set_level(logging.WARNING, logger="slider_bridge")
        config = SliderConfig.model_validate({"noise_reduction": "hihg"})
        assert config.noise_reduction_level == 0.025
        assert "hihg" in caplog.text

    def test_out_of_range_noise_reduction_is_invalid(self, tmp_path):
        path = tmp_path / "bad.json"
        _write(path, {"noise_reduction": 5})
        with pytest.raises(ValueError):
            load_slider_config(str(path))

    def test_broken_json_is_invalid(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ValueError):
            load_slider_config(str(path))


class TestConfigStore:
    def test_update_notifies_subscribers(self):
        store = ConfigStore()
        first = store.subscribe_to_changes()
        second = store.subscribe_to_changes()
        new_config = SliderConfig(esphome_slider_names=["x"])

        store.update(new_config)

        assert store.current is new_config
        assert first.get_nowait() is new_config
        assert second.get_nowait() is new_config

    def test_reload_reads_file(self, config_file):
        store = ConfigStore(str(config_file))
        changes = store.subscribe_to_changes()
        _write(config_file, {"esphome_ip_addr": "10.0.0.1", "esphome_slider_names": ["c"]})

        assert store.reload() is True
        assert store.current.esphome_ip_addr == "10.0.0.1"
        assert changes.get_nowait().esphome_slider_names == ["c"]

    def test_invalid_reload_keeps_previous_config(self, config_file):
        store = ConfigStore(str(config_file))
        changes = store.subscribe_to_changes()
        config_file.write_text("not json", encoding="utf-8")

        assert store.reload() is False
        assert store.current.esphome_slider_names == ["a", "b"]
        assert changes.empty()

    def test_reload_keeps_config_when_file_removed(self, config_file):
        store = ConfigStore(str(config_file))
        changes = store.subscribe_to_changes()
        config_file.unlink()

        assert store.reload() is False
        assert store.current.esphome_slider_names == ["a", "b"]
        assert changes.empty()

    def test_watcher_survives_file_being_rewritten(self, config_file):
        store = ConfigStore(str(config_file))
        changes = store.subscribe_to_changes()
        store.start_watching(interval_s=0.02)
        try:
            config_file.unlink()
            time.sleep(0.1)
            assert store.current.esphome_slider_names == ["a", "b"]
            assert changes.empty()

            _write(config_file, {"esphome_slider_names": ["a", "b", "c"]})
            config = changes.get(timeout=2.0)
            assert config.esphome_slider_names == ["a", "b", "c"]
        finally:
            store.stop_watching()

    def test_reload_without_file(self):
        assert ConfigStore().reload() is False

    def test_watcher_reloads_on_file_change(self, config_file):
        store = ConfigStore(str(config_file))
        changes = store.subscribe_to_changes()
        store.start_watching(interval_s=0.02)
        try:
            _write(config_file, {"esphome_slider_names": ["a", "b", "c"]})
            mtime = os.path.getmtime(config_file) + 10
            os.utime(config_file, (mtime, mtime))

            config = changes.get(timeout=2.0)
            assert config.esphome_slider_names == ["a", "b", "c"]
        finally:
            store.stop_watching()


class TestConfigReloadWatcher:
    def test_callback_runs_for_every_change(self):
        store = ConfigStore()
        calls = queue.Queue()
        watcher = ConfigReloadWatcher(store, lambda: calls.put(True))
        watcher.start()
        try:
            store.update(SliderConfig())
            store.update(SliderConfig())
            assert calls.get(timeout=2.0) is True
            assert calls.get(timeout=2.0) is True
        finally:
            watcher.stop()

    def test_stop_is_idempotent(self):
        watcher = ConfigReloadWatcher(ConfigStore(), threading.Event().set)
        watcher.stop()
        watcher.start()
        watcher.stop()
        watcher.stop()
