"""
Тесты для Reconciler
"""

import pytest

from audio_priority.core.reconciler import (
    PriorityReconciler, append_unseen_devices, bootstrap_priority_list, get_highest_priority_device
)
from audio_priority.core.types import DeviceClass


class TestBootstrap:
    """Тесты начального списка"""

    def test_active_device_goes_first(self, device_factory):
        """Тест: активное устройство первым, остальные в порядке перечисления"""
        live = [device_factory("Built-in Microphone", DeviceClass.INPUT),
                device_factory("USB Mic", DeviceClass.INPUT)]
        assert bootstrap_priority_list(live, live[1]) == ["USB Mic", "Built-in Microphone"]

    def test_without_active_device(self, device_factory):
        """Тест: без активного устройства - порядок перечисления"""
        live = [device_factory("A"), device_factory("B")]
        assert bootstrap_priority_list(live, None) == ["A", "B"]

    def test_append_unseen_is_case_insensitive(self, device_factory):
        """Тест: имя в другом регистре не дописывается"""
        live = [device_factory("airpods pro"), device_factory("HDMI"), device_factory("Dock")]
        assert append_unseen_devices(["AirPods Pro"], live) == ["AirPods Pro", "HDMI", "Dock"]


class TestHighestPriority:
    """Тесты выбора лучшего устройства"""

    def test_minimal_rank_wins(self, device_factory):
        """Тест: выбирается устройство с наименьшим рангом"""
        live = [device_factory("Speakers"), device_factory("AirPods")]
        assert get_highest_priority_device(live, ["airpods", "speakers"]).name == "AirPods"

    def test_unlisted_devices_are_ignored(self, device_factory):
        """Тест: нет ни одного живого устройства в списке"""
        live = [device_factory("Speakers")]
        assert get_highest_priority_device(live, ["AirPods"]) is None
        assert get_highest_priority_device([], ["AirPods"]) is None


class TestPriorityReconciler:
    """Тесты для PriorityReconciler"""

    @pytest.fixture
    def reconciler(self, store):
        return PriorityReconciler(store)

    def test_bootstrap_is_persisted(self, reconciler, store, device_factory):
        """Тест: начальный список сохраняется и выставляет dirty"""
        live = [device_factory("Built-in Microphone", DeviceClass.INPUT),
                device_factory("USB Mic", DeviceClass.INPUT)]

        priority_list, persisted = reconciler.reconcile_priority_list(DeviceClass.INPUT, live, live[1])

        assert persisted
        assert priority_list == ["USB Mic", "Built-in Microphone"]
        assert store.get_priority_list(DeviceClass.INPUT) == priority_list
        assert store.is_dirty(DeviceClass.INPUT)
        assert not store.is_dirty(DeviceClass.OUTPUT)

    def test_reconcile_is_idempotent(self, reconciler, store, device_factory):
        """Тест: повторное сведение без изменений ничего не пишет"""
        live = [device_factory("AirPods"), device_factory("Speakers")]
        reconciler.reconcile_priority_list(DeviceClass.OUTPUT, live)
        store.clear_dirty(DeviceClass.OUTPUT)

        priority_list, persisted = reconciler.reconcile_priority_list(DeviceClass.OUTPUT, live)

        assert not persisted
        assert priority_list == ["AirPods", "Speakers"]
        assert not store.is_dirty(DeviceClass.OUTPUT)

    def test_every_live_device_is_listed(self, reconciler, store, device_factory):
        """Тест: после сведения каждое живое устройство есть в списке"""
        store.set_priority_list(DeviceClass.OUTPUT, ["AirPods", "Speakers"])
        live = [device_factory("speakers"), device_factory("HDMI Monitor"), device_factory("Dock")]

        priority_list, persisted = reconciler.reconcile_priority_list(DeviceClass.OUTPUT, live)

        assert persisted
        assert priority_list == ["AirPods", "Speakers", "HDMI Monitor", "Dock"]

    def test_ranked_view_includes_absent_devices(self, reconciler, store, device_factory):
        """Тест: отключенные устройства показываются с запомненным типом"""
        airpods = device_factory("AirPods", transport_type="bluetooth")
        speakers = device_factory("Speakers", transport_type="builtin")
        reconciler.build_ranked_view(DeviceClass.OUTPUT, [airpods, speakers], speakers)

        view = reconciler.build_ranked_view(DeviceClass.OUTPUT, [speakers], speakers)

        assert [d.name for d in view] == ["Speakers", "AirPods"]
        absent = view[1]
        assert absent.priority_rank == 2
        assert not absent.is_available
        assert not absent.is_current
        assert absent.transport_type == "bluetooth"
        assert absent.id == ""
        assert absent.uid == "unavailable-AirPods"
        assert view[0].is_current
        assert view[0].priority_rank == 1

    def test_absent_device_without_info_is_unknown(self, reconciler, store, device_factory):
        """Тест: тип неизвестного отключенного устройства - unknown"""
        store.set_priority_list(DeviceClass.INPUT, ["Old Headset"])
        view = reconciler.rank_devices(DeviceClass.INPUT, [], ["Old Headset"])
        assert view[0].transport_type == "unknown"
        assert view[0].is_input

    def test_uncaptured_live_device_is_appended(self, reconciler, device_factory):
        """Тест: живое устройство вне списка получает ранг len+1"""
        live = [device_factory("A"), device_factory("B")]
        view = reconciler.rank_devices(DeviceClass.OUTPUT, live, ["A"])
        assert [(d.name, d.priority_rank) for d in view] == [("A", 1), ("B", 2)]

    def test_ranked_view_is_idempotent(self, reconciler, device_factory):
        """Тест: повторный вызов с теми же данными дает тот же результат"""
        live = [device_factory("Speakers"), device_factory("AirPods")]
        first = reconciler.build_ranked_view(DeviceClass.OUTPUT, live, live[0])
        second = reconciler.build_ranked_view(DeviceClass.OUTPUT, live, live[0])
        assert first == second
        assert [d.name for d in first] == ["Speakers", "AirPods"]

    def test_names_differing_only_in_case_are_listed_once(self, reconciler, store, device_factory):
        """Тест: два живых устройства с одинаковым именем в разном регистре"""
        speakers = device_factory("Speakers")
        first = device_factory("USB Headset", uid="u1")
        second = device_factory("usb headset", uid="u2")
        live = [speakers, first, second]

        priority_list, persisted = reconciler.reconcile_priority_list(DeviceClass.OUTPUT, live, speakers)

        assert persisted
        assert priority_list == ["Speakers", "USB Headset"]
        assert priority_list == store.get_priority_list(DeviceClass.OUTPUT)

        view = reconciler.build_ranked_view(DeviceClass.OUTPUT, live, speakers)
        assert [(d.uid, d.priority_rank) for d in view] == [(speakers.uid, 1), ("u1", 2), ("u2", 2)]
