STRICT_PROCESSES = False

def get_strict_state():
    return STRICT_PROCESSES

def set_strict_state(state: bool):
    global STRICT_PROCESSES
    STRICT_PROCESSES = bool(state)


class StrictContext:
    """Temporarily switch unknown-process handling between warn and raise."""

    def __init__(self, enable: bool):
        self.enable = enable
        self.previous_state = None

    def __enter__(self):
        global STRICT_PROCESSES
        self.previous_state = STRICT_PROCESSES
        STRICT_PROCESSES = bool(self.enable)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        global STRICT_PROCESSES
        STRICT_PROCESSES = self.previous_state
