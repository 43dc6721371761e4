import os
import signal
import sys

from pipeshell import config

_installed = False


def handle_sigint(signum, frame):
    """
    Kill switch for the whole shell.
    Running stages are neither waited for nor reaped.
    """
    try:
        print("\n" + config.INTERRUPT_NOTICE)
        sys.stdout.flush()
    finally:
        # Exit even when stdout is gone or busy in an interrupted write
        os._exit(0)


def init_signal_handlers():
    """Install the interrupt handler once per process"""
    global _installed
    if _installed:
        return
    signal.signal(signal.SIGINT, handle_sigint)
    _installed = True
