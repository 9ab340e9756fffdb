"""Tests for reconciling the managed package registry with resolver results."""
from __future__ import annotations

from pathlib import Path

import pytest

from helpers.fakes import FakeSnapshot, InMemoryRegistry, resolved
from pkgsync.core.exceptions import RegistryMutationError
from pkgsync.core.reconcile import ReconciliationEngine, alias_resolver_for

INSTALLER = "Composer"


class TestReconcileDiff:
    """Removal and installation passes."""

    def test_end_to_end_scenario(self, tmp_path: Path) -> None:
        """Stale packages of this installer go, new ones arrive, others stay."""
        registry = InMemoryRegistry(tmp_path)
        registry.add("A", tmp_path / "A", "X")
        registry.add("C", tmp_path / "C", "X")
        registry.add("D", tmp_path / "D", "Y")

        result = ReconciliationEngine().reconcile(
            [resolved("A", tmp_path / "A"), resolved("B", tmp_path / "B")],
            registry,
            "X",
        )

        assert [p.name for p in result.removed] == ["C"]
        assert [p.name for p in result.installed] == ["B"]
        assert registry.names("X") == {"A", "B"}
        assert registry.names("Y") == {"D"}
        assert registry.entries["B"].install_path == tmp_path / "B"
        assert registry.entries["B"].installer == "X"

    def test_second_run_is_a_no_op(self, tmp_path: Path) -> None:
        registry = InMemoryRegistry(tmp_path)
        packages = [resolved("acme/a", tmp_path / "a"), resolved("acme/b", tmp_path / "b")]
        engine = ReconciliationEngine()

        first = engine.reconcile(packages, registry, INSTALLER)
        calls_after_first = list(registry.calls)
        second = engine.reconcile(packages, registry, INSTALLER)

        assert first.changed
        assert not second.changed
        assert second.installed == () and second.removed == ()
        assert registry.calls == calls_after_first

    def test_other_installers_are_never_touched(self, tmp_path: Path) -> None:
        registry = InMemoryRegistry(tmp_path)
        foreign = registry.add("manual/pkg", tmp_path / "manual", "user")

        result = ReconciliationEngine().reconcile([], registry, INSTALLER)

        assert result.removed == ()
        assert registry.entries["manual/pkg"] == foreign
        assert registry.calls == []

    def test_same_name_owned_by_other_installer_is_not_taken_over(self, tmp_path: Path) -> None:
        registry = InMemoryRegistry(tmp_path)
        foreign = registry.add("acme/d", tmp_path / "manual" / "d", "user")
        packages = [
            resolved("acme/a", tmp_path / "vendor" / "acme" / "a"),
            resolved("acme/d", tmp_path / "vendor" / "acme" / "d"),
        ]

        with pytest.raises(RegistryMutationError, match="already installed by user") as excinfo:
            ReconciliationEngine().reconcile(packages, registry, INSTALLER)

        assert registry.entries["acme/d"] == foreign
        assert excinfo.value.package == "acme/d"
        assert [p.name for p in excinfo.value.partial.installed] == ["acme/a"]

    def test_package_already_registered_by_path_is_not_reinstalled(self, tmp_path: Path) -> None:
        registry = InMemoryRegistry(tmp_path)
        registry.add("manual/pkg", tmp_path / "vendor" / "pkg", "user")

        result = ReconciliationEngine().reconcile(
            [resolved("acme/pkg", tmp_path / "vendor" / "pkg")], registry, INSTALLER
        )

        assert result.installed == ()
        assert ("install", "acme/pkg") not in registry.calls

    def test_removals_run_before_installs(self, tmp_path: Path) -> None:
        """A renamed package reusing an install path is reinstalled under its new name."""
        registry = InMemoryRegistry(tmp_path)
        path = tmp_path / "vendor" / "blog"
        registry.add("acme/old-blog", path, INSTALLER)

        result = ReconciliationEngine().reconcile([resolved("acme/blog", path)], registry, INSTALLER)

        assert registry.calls == [("remove", "acme/old-blog"), ("install", "acme/blog")]
        assert [p.name for p in result.installed] == ["acme/blog"]
        assert registry.names() == {"acme/blog"}


class TestAliases:
    """Alias entries share identity with their target."""

    def test_two_aliases_of_one_target_install_once(self, tmp_path: Path) -> None:
        registry = InMemoryRegistry(tmp_path)
        path = tmp_path / "vendor" / "lib"
        packages = [
            resolved("acme/lib", path),
            resolved("acme/lib-alias-1", path, alias_of="acme/lib"),
            resolved("acme/lib-alias-2", path, alias_of="acme/lib"),
        ]

        result = ReconciliationEngine().reconcile(packages, registry, INSTALLER)

        assert [p.name for p in result.installed] == ["acme/lib"]
        assert registry.calls == [("install", "acme/lib")]

    def test_alias_keeps_target_registered(self, tmp_path: Path) -> None:
        """A registered target is kept when only its alias is listed first."""
        registry = InMemoryRegistry(tmp_path)
        path = tmp_path / "vendor" / "lib"
        registry.add("acme/lib", path, INSTALLER)
        snapshot = FakeSnapshot(
            [resolved("dev/lib", path, alias_of="acme/lib"), resolved("acme/lib", path)]
        )

        result = ReconciliationEngine().reconcile_snapshot(snapshot, registry, INSTALLER)

        assert not result.changed
        assert registry.names() == {"acme/lib"}

    def test_default_alias_resolver_falls_back_to_entry(self, tmp_path: Path) -> None:
        orphan = resolved("acme/orphan", tmp_path / "o", alias_of="acme/missing")
        resolve = alias_resolver_for([orphan])
        assert resolve(orphan) is orphan


class TestProgressReporting:
    def test_reports_each_action(self, tmp_path: Path) -> None:
        messages: list[str] = []
        registry = InMemoryRegistry(tmp_path)
        registry.add("acme/gone", tmp_path / "vendor" / "acme" / "gone", INSTALLER)

        ReconciliationEngine(reporter=messages.append).reconcile(
            [resolved("acme/new", tmp_path / "vendor" / "acme" / "new")], registry, INSTALLER
        )

        assert messages == [
            "Looking for removed packages",
            "Removing acme/gone (vendor/acme/gone)",
            "Looking for new packages",
            "Installing acme/new (vendor/acme/new)",
        ]

    def test_reports_nothing_to_do(self, tmp_path: Path) -> None:
        messages: list[str] = []
        ReconciliationEngine(reporter=messages.append).reconcile([], InMemoryRegistry(tmp_path), INSTALLER)
        assert messages[-1] == "Nothing to install or remove"


class TestMutationFailures:
    def test_install_failure_reports_partial_progress(self, tmp_path: Path) -> None:
        registry = InMemoryRegistry(tmp_path, fail_on={"acme/b": "install"})
        registry.add("acme/stale", tmp_path / "stale", INSTALLER)
        packages = [
            resolved("acme/a", tmp_path / "a"),
            resolved("acme/b", tmp_path / "b"),
            resolved("acme/c", tmp_path / "c"),
        ]

        with pytest.raises(RegistryMutationError) as excinfo:
            ReconciliationEngine().reconcile(packages, registry, INSTALLER)

        err = excinfo.value
        assert err.package == "acme/b"
        assert err.operation == "install"
        assert [p.name for p in err.partial.removed] == ["acme/stale"]
        assert [p.name for p in err.partial.installed] == ["acme/a"]
        # The pass stops at the failing package.
        assert ("install", "acme/c") not in registry.calls

    def test_backend_errors_are_wrapped(self, tmp_path: Path) -> None:
        registry = InMemoryRegistry(tmp_path, fail_on={"acme/stale": "remove"})
        registry.add("acme/stale", tmp_path / "stale", INSTALLER)

        with pytest.raises(RegistryMutationError) as excinfo:
            ReconciliationEngine().reconcile([], registry, INSTALLER)

        assert excinfo.value.operation == "remove"
        assert isinstance(excinfo.value.__cause__, OSError)
        assert excinfo.value.partial.changed is False
