"""Tests for main module."""

from diverge_backend import main as main_module


def test_main_serves_asgi_app_on_configured_port(monkeypatch) -> None:
    calls: list[tuple[str, dict[str, object]]] = []
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "service-key")
    monkeypatch.setenv("PORT", "4000")
    monkeypatch.setattr(
        main_module.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs))
    )

    main_module.main()

    assert calls == [
        ("diverge_backend.api.asgi:app", {"host": "0.0.0.0", "port": 4000})  # noqa: S104
    ]
