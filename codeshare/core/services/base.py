class SingletonService:
    """
    Services are used through classmethods and hold their state on the class.

    Each subclass's ``init()`` (sync or async) sets ``_initialized`` last.
    """

    _initialized: bool = False

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._initialized

    @classmethod
    def _reset(cls) -> None:
        """Forget initialisation; tests call this between cases."""
        cls._initialized = False
