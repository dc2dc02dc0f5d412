from darkbars.services.permissions import PermissionMonitor, PermissionState, trigger_enabled


def test_starts_at_prompt():
    assert PermissionMonitor().state == PermissionState.PROMPT


def test_notifies_only_on_change():
    monitor = PermissionMonitor()
    seen = []
    monitor.subscribe(seen.append)

    assert monitor.update(PermissionState.GRANTED) is True
    assert monitor.update(PermissionState.GRANTED) is False
    assert monitor.update("denied") is True

    assert seen == [PermissionState.GRANTED, PermissionState.DENIED]
    assert monitor.state == PermissionState.DENIED


def test_unsubscribe():
    monitor = PermissionMonitor()
    seen = []
    unsubscribe = monitor.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    monitor.update(PermissionState.DENIED)
    assert seen == []


def test_trigger_policy():
    assert trigger_enabled(PermissionState.GRANTED)
    assert trigger_enabled(PermissionState.PROMPT)
    assert not trigger_enabled(PermissionState.DENIED)
    # no pre-check capability: trigger stays enabled
    assert trigger_enabled(None)
    assert not trigger_enabled(PermissionState.GRANTED, busy=True)
