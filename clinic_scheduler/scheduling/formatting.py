"""HH:MM rendering of minutes since midnight."""


def format_minutes(minutes: int) -> str:
    hours, remainder = divmod(minutes, 60)
    return f'{hours:02d}:{remainder:02d}'


def format_window(start_minutes: int, end_minutes: int) -> str:
    return f'{format_minutes(start_minutes)}-{format_minutes(end_minutes)}'
