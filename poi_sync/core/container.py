from flask import current_app

EXTENSION_KEY = "poi_sync"


class ServiceContainer:
    """Simple dependency injection container, one per Flask app."""

    def __init__(self):
        self._dependencies = {}
        self._resolved = {}

    def register(self, key, implementation):
        """Register an instance, a class, or a factory taking the container."""
        self._dependencies[key] = implementation
        self._resolved.pop(key, None)

    def resolve(self, key):
        """Resolve an implementation for a key. Factories and classes are built once."""
        if key in self._resolved:
            return self._resolved[key]
        if key not in self._dependencies:
            raise KeyError(f"No implementation registered for {key}")

        implementation = self._dependencies[key]

        if isinstance(implementation, type):
            instance = implementation()
        elif callable(implementation):
            instance = implementation(self)
        else:
            instance = implementation

        self._resolved[key] = instance
        return instance

    def resolved_keys(self):
        """Keys whose instance has already been built."""
        return set(self._resolved)


def get_container() -> ServiceContainer:
    """Container of the current Flask app."""
    return current_app.extensions[EXTENSION_KEY]
