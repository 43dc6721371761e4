import os
import signal
import sys

SHELL_NAME = "pipeshell"


def env_int(name, default, minimum):
    """
    Read an integer setting from the environment.
    Returns: default for unset or non-numeric values, never less than minimum
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        print(f"{SHELL_NAME}: ignoring {name}={raw!r}: not an integer", file=sys.stderr)
        return default
    return max(value, minimum)


# Bytes moved per read by a junction between two stages
COPY_CHUNK_SIZE = env_int("PIPESHELL_CHUNK_SIZE", 64 * 1024, minimum=1)

# Wait for stage i-1 before spawning stage i+1 instead of running all stages at once.
# Output of a stage with no reader yet is spooled in memory, so an endless
# producer in this mode grows memory until the shell is interrupted.
STRICT_STAGE_ORDER = os.getenv("PIPESHELL_STRICT_ORDER", "0") == "1"

PS_COMMAND = ["ps"]
KILL_SIGNAL = signal.SIGKILL

SPAWN_FAILURE_STATUS = 127
INTERRUPT_NOTICE = "Received interrupt signal. Exiting..."
