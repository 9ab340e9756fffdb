"""Composer-generated manifest fixtures."""
from __future__ import annotations

import json
from pathlib import Path

AUTOLOAD_PHP = """<?php

// autoload.php @generated by Composer

require_once __DIR__ . '/composer/autoload_real.php';

return ComposerAutoloaderInit4b1e2d0c::getLoader();
"""

CLASSMAP_PHP = """<?php

// autoload_classmap.php @generated by Composer

$vendorDir = dirname(dirname(__FILE__));
$baseDir = dirname($vendorDir);

return array(
    'Composer\\\\InstalledVersions' => $vendorDir . '/composer/InstalledVersions.php',
);
"""


def write_project(root: Path, *, name: str = "acme/app", vendor: str = "vendor") -> Path:
    """Create composer.json and the two generated manifests under ``root``."""
    (root / "composer.json").write_text(json.dumps({"name": name}), encoding="utf-8")
    vendor_dir = root / vendor
    (vendor_dir / "composer").mkdir(parents=True, exist_ok=True)
    (vendor_dir / "autoload.php").write_text(AUTOLOAD_PHP, encoding="utf-8")
    (vendor_dir / "composer" / "autoload_classmap.php").write_text(CLASSMAP_PHP, encoding="utf-8")
    return vendor_dir


def write_installed_json(vendor_dir: Path, packages: list[dict], *, composer2: bool = True) -> Path:
    """Write ``vendor/composer/installed.json`` in Composer 1 or 2 form."""
    path = vendor_dir / "composer" / "installed.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"packages": packages, "dev": True} if composer2 else packages
    path.write_text(json.dumps(data, indent=4), encoding="utf-8")
    return path
