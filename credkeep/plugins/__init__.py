"""credkeep plugin discovery — credential types contributed via entry points."""

from credkeep.plugins.loader import iter_specs, load_credential_plugins

__all__ = ["load_credential_plugins", "iter_specs"]
