"""Operator shell for the traffic sensor registry."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name in {"app", "render"}:
        return import_module(f"cli.{name}")
    raise AttributeError(name)

# ``cli.app`` must keep resolving to the module, not the Typer instance, because
# tests patch attributes on that module path.

__all__ = []
