from enum import IntEnum



class Status(IntEnum):
    """
    Outcome codes carried by the ``(status, value)`` tuples that fallible
    queries return, and by the trie's ``try_insert`` / ``try_remove``.
    ``value`` is only meaningful when the status is ``OK``.
    """

    OK                 = 0
    OUT_OF_RANGE       = 1
    DUPLICATE          = 2
    NOT_FOUND          = 3
    INVALID_ARGUMENT   = 4
    EMPTY              = 5



# Plain ints for the JIT-compiled kernels (frozen as compile-time constants)
OK                 = int(Status.OK)
OUT_OF_RANGE       = int(Status.OUT_OF_RANGE)
DUPLICATE          = int(Status.DUPLICATE)
NOT_FOUND          = int(Status.NOT_FOUND)
INVALID_ARGUMENT   = int(Status.INVALID_ARGUMENT)
EMPTY              = int(Status.EMPTY)
