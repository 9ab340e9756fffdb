"""Test helper modules for the pkgsync test suite.

- fakes: In-memory registry, fake resolver snapshot, recording rebuilders
- manifests: Composer-generated manifest fixtures and project scaffolding
"""
from __future__ import annotations
