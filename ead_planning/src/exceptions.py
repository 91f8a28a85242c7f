from abc import ABCMeta


# EAD PLANNING
class EadPlanningException(Exception, metaclass=ABCMeta):
    pass


class UnknownIntersection(EadPlanningException):
    pass


class PhaseCycleUnresolvable(EadPlanningException):
    pass


class NoPathFound(EadPlanningException):
    pass


class InvalidEadConfiguration(EadPlanningException):
    pass


def raises(*e):
    """
    A decorator that determines that a function may raise a specific exception
    """
    def decorator(func):
        def wrapper(*args, **kwargs):
            return func(*args, **kwargs)
        return wrapper
    return decorator
