def problem_letters(count: int) -> tuple[str, ...]:
    """The first `count` problem letters (A, B, C, ...)"""
    return tuple(chr(ord("A") + index) for index in range(count))
