import threading
import time

import pytest

from airmenu import config
from airmenu.lifecycle import ClientManager
from airmenu.models import MetricKey
from airmenu.poller import Poller
from airmenu.service import MenuService

from conftest import DEVICES, FakeSource, ScriptedPrompt, make_reading


@pytest.fixture
def make_service(state, settings):
    def _make(*answers, factory=None):
        clients = ClientManager(state, settings, ScriptedPrompt(*answers), factory or (lambda i, s: FakeSource()))
        poller = Poller(state, sleep=lambda s: None)
        return MenuService(state, settings, clients, poller)

    return _make


def test_toggle_metric_focuses_and_persists(state, settings, make_service):
    service = make_service()
    service.toggle_metric(MetricKey.RADON)
    assert state.snapshot().focused_metric is MetricKey.RADON
    assert settings.get(config.SELECTED_SENSOR_KEY) == "radon"


def test_toggle_same_metric_clears_focus(state, settings, make_service):
    service = make_service()
    service.toggle_metric(MetricKey.CO2)
    service.toggle_metric(MetricKey.CO2)
    assert state.snapshot().focused_metric is None
    assert settings.get(config.SELECTED_SENSOR_KEY) == ""


def test_toggle_other_metric_moves_focus(state, make_service):
    service = make_service()
    service.toggle_metric(MetricKey.CO2)
    service.toggle_metric(MetricKey.PM25)
    assert state.snapshot().focused_metric is MetricKey.PM25


def test_concurrent_toggles_save_the_focus_the_state_holds(state, settings, make_service):
    service = make_service()
    save = settings.set

    def _slow_save(key, value):
        time.sleep(0.001)
        save(key, value)

    settings.set = _slow_save
    metrics = [MetricKey.CO2, MetricKey.PM25, MetricKey.RADON, MetricKey.CO2]

    def _toggle(metric):
        for _ in range(10):
            service.toggle_metric(metric)

    threads = [threading.Thread(target=_toggle, args=(m,)) for m in metrics]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5.0)

    focus = state.snapshot().focused_metric
    assert settings.get(config.SELECTED_SENSOR_KEY) == (focus.value if focus else "")


def test_restore_focus(state, settings, make_service):
    settings.set(config.SELECTED_SENSOR_KEY, "voc")
    make_service().restore_focus()
    assert state.snapshot().focused_metric is MetricKey.VOC


def test_restore_ignores_unknown_metric(state, settings, make_service):
    settings.set(config.SELECTED_SENSOR_KEY, "ozone")
    make_service().restore_focus()
    assert state.snapshot().focused_metric is None


def test_select_device_present_in_list(state, make_service):
    state.set_devices(DEVICES)
    make_service().select_device("dev-2")
    assert state.snapshot().selected_device_id == "dev-2"


def test_select_device_absent_from_list_is_accepted(state, make_service):
    # selection is not validated against the device list
    state.set_devices(DEVICES[:1])
    make_service().select_device("dev-2")
    assert state.snapshot().selected_device_id == "dev-2"


def test_title_and_menu_reflect_state(state, make_service):
    service = make_service()
    with state.exclusive() as tx:
        tx.set_reading(make_reading(co2=801.2))
        tx.set_focused_metric(MetricKey.CO2)
        tx.set_error("error getting data: 502")

    assert service.title() == "CO2: 801 ppm(err)"
    items = service.menu_items()
    assert items[0].text == "CO2: 801 ppm"
    assert items[0].state is True

    items[0].clicked()
    assert state.snapshot().focused_metric is None


def test_reset_credentials_installs_client_and_refreshes(state, make_service):
    new_source = FakeSource(reading=make_reading(co2=555.0))
    service = make_service(["new-id", "new-secret"], factory=lambda i, s: new_source)
    with state.exclusive() as tx:
        tx.set_client(FakeSource())
        tx.set_devices(DEVICES)
        tx.set_selected_device("dev-2")
        tx.set_reading(make_reading())

    service.reset_credentials().join(2.0)
    assert service.last_refresh is not None
    service.last_refresh.join(2.0)

    snap = state.snapshot()
    assert snap.client is new_source
    assert snap.selected_device_id == "dev-1"
    assert snap.reading.co2 == 555.0
    assert new_source.device_calls == 1


def test_cancelled_reset_does_not_refresh(state, make_service):
    old = FakeSource()
    service = make_service(None)
    state.set_client(old)
    before = state.snapshot()

    service.reset_credentials().join(2.0)

    assert service.last_refresh is None
    assert state.snapshot() == before
    assert old.reading_calls == []
