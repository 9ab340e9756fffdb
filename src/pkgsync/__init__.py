"""
pkgsync - keep managed packages in sync with dependency resolution

pkgsync reconciles a registry of managed packages with the package set
reported by a dependency resolver, and injects generated glue code into
generated autoload manifests exactly once per build cycle.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
