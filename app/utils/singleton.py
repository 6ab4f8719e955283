from threading import Lock
from typing import Any


class SingletonMeta(type):
    """Metaclass that hands out one shared instance per class.

    Used by long-lived resource owners such as the database manager so that
    every service in the process talks to the same connection pool.
    """

    _instances: dict[type, Any] = {}
    _lock: Lock = Lock()

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        with cls._lock:
            if cls not in cls._instances:
                cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]
