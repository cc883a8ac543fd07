from __future__ import annotations

import pytest

from ._gate import require_arch_checks_enabled
from ._utils import iter_python_files, matches_prefix, package_root, parse_imports

# package -> packages it must never import
_FORBIDDEN = {
    "core": ("reltool.git", "reltool.release", "reltool.oci", "reltool.services", "reltool.cli"),
    "platform": ("reltool.git", "reltool.release", "reltool.oci", "reltool.services", "reltool.cli"),
    "git": ("reltool.release", "reltool.oci", "reltool.services", "reltool.cli"),
    "release": ("reltool.git.repository", "reltool.oci", "reltool.services", "reltool.cli"),
    "oci": ("reltool.git", "reltool.release", "reltool.services", "reltool.cli"),
    "services": ("reltool.cli",),
}


@pytest.mark.parametrize("package", sorted(_FORBIDDEN))
def test_layer_does_not_import_upper_layers(package: str) -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders: list[str] = []
    for file_path in iter_python_files(root / package):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            for forbidden in _FORBIDDEN[package]:
                if matches_prefix(item.module, forbidden):
                    offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{package} layering violations:\n" + "\n".join(offenders)


def test_direct_rich_imports_are_limited_to_console() -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders: list[str] = []
    for file_path in iter_python_files(root):
        rel = file_path.relative_to(root)
        if rel.parts and rel.parts[0] == "test":
            continue
        if rel.as_posix() == "output/console.py":
            continue
        for item in parse_imports(file_path):
            if matches_prefix(item.module, "rich"):
                offenders.append(f"{rel}:{item.line}: direct rich import '{item.module}'")

    assert not offenders, "Direct rich usage policy violations:\n" + "\n".join(offenders)
