import functools


def singleton(func):
    """
    Decorator for a zero-argument factory function.
    The first return value is cached and returned thereafter;
    ``cache_clear()`` on the wrapper drops it so the next call rebuilds.
    """
    sentinel = object()
    instance = sentinel

    @functools.wraps(func)
    def wrapper():
        nonlocal instance
        if instance is sentinel:
            instance = func()
        return instance

    def cache_clear():
        nonlocal instance
        instance = sentinel

    wrapper.cache_clear = cache_clear
    return wrapper
