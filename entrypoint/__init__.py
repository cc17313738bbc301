"""Moodle container setup entry-point."""

from importlib import import_module as _imp

# Re-export the public API of *entrypoint.py* so that callers and tests can
# simply ``import entrypoint``.

_mod = _imp("entrypoint.entrypoint")

for _name in _mod.__all__:
    globals()[_name] = getattr(_mod, _name)

del _imp, _mod, _name
