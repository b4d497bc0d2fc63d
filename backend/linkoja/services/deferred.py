from typing import Callable, Optional

from fastapi import BackgroundTasks


def run_later(background_tasks: Optional[BackgroundTasks], func: Callable, *args, **kwargs) -> None:
    """
    Queue a best-effort side effect to run after the response is sent.
    Callers outside a request (scripts, direct service use) pass None and the call runs immediately.
    """
    if background_tasks is None:
        func(*args, **kwargs)
    else:
        background_tasks.add_task(func, *args, **kwargs)
