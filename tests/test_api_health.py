import asyncio

from taskbot.api import app as app_mod


def test_health_ok_payload() -> None:
    assert asyncio.run(app_mod.health()) == {"ok": True}


def test_root_says_running() -> None:
    assert asyncio.run(app_mod.root()) == "Bot is running!"


def test_webhook_route_registered() -> None:
    paths = {route.path for route in app_mod.app.routes}
    assert "/health" in paths
    assert app_mod.settings.webhook_path in paths
