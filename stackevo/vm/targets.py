"""
Reference functions that evolved programs are scored against.
"""


def add(a: int, b: int) -> int:
    return a + b


def sub(a: int, b: int) -> int:
    return a - b


def mult(a: int, b: int) -> int:
    return a * b


def sum_squared(a: int, b: int) -> int:
    return (a + b) * (a + b)


def double_sum(a: int, b: int) -> int:
    return 2 * (a + b)


TARGETS = {
    "add": add,
    "sub": sub,
    "mult": mult,
    "sum_squared": sum_squared,
    "double_sum": double_sum,
}
