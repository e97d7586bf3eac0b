"""Basic project scaffolding tests."""

import importlib


def test_package_importable() -> None:
    """Verify the top-level package is importable."""
    import broadside  # noqa: F401  (import used to ensure availability)

    assert broadside is not None


def test_submodules_exist() -> None:
    modules = [
        "broadside.cli",
        "broadside.config",
        "broadside.engine.board",
        "broadside.engine.notifications",
        "broadside.engine.placement",
        "broadside.engine.ship",
        "broadside.telemetry",
    ]

    for module in modules:
        assert importlib.import_module(module) is not None
