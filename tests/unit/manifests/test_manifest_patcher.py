"""Tests for anchored manifest injection."""
from __future__ import annotations

from pathlib import Path

import pytest

from helpers.manifests import AUTOLOAD_PHP, CLASSMAP_PHP
from pkgsync.core.exceptions import MalformedManifestError, MissingManifestError
from pkgsync.core.manifests import ManifestPatcher, locate_anchor
from pkgsync.core.models import Anchor


def _write(path: Path, text: str) -> Path:
    path.write_bytes(text.encode("utf-8"))
    return path


def _read(path: Path) -> str:
    return path.read_bytes().decode("utf-8")


class TestLocateAnchor:
    def test_final_return_points_at_start_of_return_line(self) -> None:
        contents = "<?php\n\nreturn array(1,2,3);\n"
        assert locate_anchor(contents, Anchor.FINAL_RETURN) == contents.index("return")

    def test_last_return_wins(self) -> None:
        contents = "<?php\nif ($x) {\nreturn 1;\n}\nreturn 2;\n"
        assert locate_anchor(contents, Anchor.FINAL_RETURN) == contents.index("return 2;")

    def test_indented_return_is_not_an_anchor(self) -> None:
        assert locate_anchor("<?php\nfunction f() {\n    return 1;\n}\n", Anchor.FINAL_RETURN) is None

    def test_table_close_points_at_closing_line(self) -> None:
        assert locate_anchor(CLASSMAP_PHP, Anchor.TABLE_CLOSE) == CLASSMAP_PHP.rindex(");")

    def test_no_table_close(self) -> None:
        assert locate_anchor("<?php\nreturn [];\n", Anchor.TABLE_CLOSE) is None


class TestInjectConstant:
    def test_defines_constant_before_final_return(self, tmp_path: Path) -> None:
        manifest = _write(tmp_path / "autoload.php", "<?php\n\nreturn array(1,2,3);\n")

        ManifestPatcher().inject_constant(manifest, "FOO", "bar")

        assert _read(manifest) == "<?php\n\ndefine('FOO', 'bar');\n\nreturn array(1,2,3);\n"

    def test_composer_bootstrap(self, tmp_path: Path) -> None:
        manifest = _write(tmp_path / "autoload.php", AUTOLOAD_PHP)

        target = ManifestPatcher().inject_constant(manifest, "PULI_FACTORY_CLASS", "Puli\\GeneratedPuliFactory")

        text = _read(manifest)
        fragment = "define('PULI_FACTORY_CLASS', 'Puli\\\\GeneratedPuliFactory');\n\n"
        assert target.fragment == fragment
        assert text.count(fragment) == 1
        assert text.index(fragment) < text.index("return ComposerAutoloaderInit")
        assert text.replace(fragment, "") == AUTOLOAD_PHP

    def test_second_injection_duplicates(self, tmp_path: Path) -> None:
        """Injection is not idempotent on its own."""
        manifest = _write(tmp_path / "autoload.php", AUTOLOAD_PHP)
        patcher = ManifestPatcher()

        patcher.inject_constant(manifest, "FOO", "bar")
        patcher.inject_constant(manifest, "FOO", "bar")

        assert _read(manifest).count("define('FOO', 'bar');") == 2

    def test_custom_template(self, tmp_path: Path) -> None:
        manifest = _write(tmp_path / "autoload.php", "<?php\nreturn 1;\n")
        patcher = ManifestPatcher(constant_template="const {{ name }} = {{ value | php }};\n")

        patcher.inject_constant(manifest, "LEVEL", 3)

        assert _read(manifest) == "<?php\nconst LEVEL = 3;\nreturn 1;\n"

    def test_crlf_file_gets_crlf_fragment(self, tmp_path: Path) -> None:
        original = "<?php\r\n\r\nreturn 1;\r\n"
        manifest = _write(tmp_path / "autoload.php", original)

        target = ManifestPatcher().inject_constant(manifest, "FOO", "bar")

        assert manifest.read_bytes() == b"<?php\r\n\r\ndefine('FOO', 'bar');\r\n\r\nreturn 1;\r\n"
        assert target.fragment == "define('FOO', 'bar');\r\n\r\n"


class TestInjectTableEntry:
    def test_adds_entry_before_closing_delimiter(self, tmp_path: Path) -> None:
        manifest = _write(tmp_path / "autoload_classmap.php", CLASSMAP_PHP)

        ManifestPatcher().inject_table_entry(manifest, "X", "$vendorDir . '/y.php'")

        lines = _read(manifest).splitlines()
        assert lines[-2] == "    'X' => $vendorDir . '/y.php',"
        assert lines[-1] == ");"
        assert lines[-3] == "    'Composer\\\\InstalledVersions' => $vendorDir . '/composer/InstalledVersions.php',"

    def test_bytes_outside_fragment_unchanged(self, tmp_path: Path) -> None:
        manifest = _write(tmp_path / "autoload_classmap.php", CLASSMAP_PHP)

        target = ManifestPatcher().inject_table_entry(manifest, "X", "$vendorDir . '/y.php'")

        assert _read(manifest).replace(target.fragment, "", 1) == CLASSMAP_PHP

    def test_crlf_table_has_no_mixed_line_endings(self, tmp_path: Path) -> None:
        original = CLASSMAP_PHP.replace("\n", "\r\n")
        manifest = _write(tmp_path / "autoload_classmap.php", original)

        ManifestPatcher().inject_table_entry(manifest, "X", "$vendorDir . '/y.php'")

        data = manifest.read_bytes()
        assert data.count(b"\n") == data.count(b"\r\n")
        assert data.endswith(b"    'X' => $vendorDir . '/y.php',\r\n);\r\n")

    def test_empty_table(self, tmp_path: Path) -> None:
        manifest = _write(tmp_path / "autoload_classmap.php", "<?php\n\nreturn array(\n);\n")

        ManifestPatcher().inject_table_entry(manifest, "A\\B", "$baseDir . '/b.php'")

        assert _read(manifest) == "<?php\n\nreturn array(\n    'A\\\\B' => $baseDir . '/b.php',\n);\n"


class TestFailures:
    def test_missing_file_raises_and_creates_nothing(self, tmp_path: Path) -> None:
        manifest = tmp_path / "vendor" / "autoload.php"

        with pytest.raises(MissingManifestError) as excinfo:
            ManifestPatcher().inject_constant(manifest, "FOO", "bar")

        assert excinfo.value.path == manifest
        assert str(excinfo.value) == f"Could not adjust autoloader: The file {manifest} was not found."
        assert isinstance(excinfo.value, FileNotFoundError)
        assert not manifest.exists()
        assert not manifest.parent.exists()

    def test_malformed_bootstrap_left_untouched(self, tmp_path: Path) -> None:
        original = "<?php\n\necho 'no return here';\n"
        manifest = _write(tmp_path / "autoload.php", original)

        with pytest.raises(MalformedManifestError):
            ManifestPatcher().inject_constant(manifest, "FOO", "bar")

        assert _read(manifest) == original

    def test_malformed_table_left_untouched(self, tmp_path: Path) -> None:
        original = "<?php\nreturn [];\n"
        manifest = _write(tmp_path / "autoload_classmap.php", original)

        with pytest.raises(MalformedManifestError):
            ManifestPatcher().inject_table_entry(manifest, "X", "'y'")

        assert _read(manifest) == original


class TestContains:
    def test_detects_previous_injection(self, tmp_path: Path) -> None:
        manifest = _write(tmp_path / "autoload.php", AUTOLOAD_PHP)
        patcher = ManifestPatcher()
        assert not patcher.contains(manifest, "define('FOO', 'bar');")

        patcher.inject_constant(manifest, "FOO", "bar")

        assert patcher.contains(manifest, "define('FOO', 'bar');")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MissingManifestError):
            ManifestPatcher().contains(tmp_path / "nope.php", "x")
