"""Tests for lazy import system in relaypool.__init__."""

from __future__ import annotations

import importlib
import sys

import pytest


class TestLazyImports:
    """Test PEP 562 lazy loading in relaypool.__init__."""

    def test_lazy_import_does_not_eagerly_load(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Importing relaypool does not load its subpackages."""
        # monkeypatch puts the original modules back after the test
        for mod in list(sys.modules):
            if mod == "relaypool" or mod.startswith("relaypool."):
                monkeypatch.delitem(sys.modules, mod)

        importlib.import_module("relaypool")

        assert "relaypool.core" not in sys.modules
        assert "relaypool.models" not in sys.modules
        assert "relaypool.pool" not in sys.modules
        assert "relaypool.nips" not in sys.modules

    def test_lazy_import_resolves_on_access(self) -> None:
        from relaypool import Filter, read
        from relaypool.models.filter import Filter as DirectFilter
        from relaypool.pool.read import read as direct_read

        assert Filter is DirectFilter
        assert read is direct_read

    def test_lazy_import_caches_after_first_access(self) -> None:
        import relaypool

        _ = relaypool.Event
        assert "Event" in vars(relaypool)

    def test_lazy_import_invalid_attribute(self) -> None:
        import relaypool

        with pytest.raises(AttributeError, match="no_such_thing"):
            _ = getattr(relaypool, "no_such_thing")  # noqa: B009

    def test_all_exports_are_in_lazy_imports(self) -> None:
        import relaypool

        assert set(relaypool.__all__) == set(relaypool._LAZY_IMPORTS)

    def test_version(self) -> None:
        import relaypool

        assert isinstance(relaypool.__version__, str)
