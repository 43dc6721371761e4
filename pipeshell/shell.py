import os

from pipeshell import config
from pipeshell.builtin import execute_builtin
from pipeshell.executor import execute_pipeline
from pipeshell.interrupt import init_signal_handlers
from pipeshell.parser import parse_command

# Global state
last_status = 0


def prompt():
    """Generate shell prompt"""
    user = os.getenv("USER") or os.getenv("USERNAME") or "user"
    cwd = os.getcwd()
    base = os.path.basename(cwd) or "/"
    return f"{user}@{config.SHELL_NAME}:{base}$ "


def run_line(line):
    """
    Run one input line: built-in if the first stage names one, else a pipeline.
    Returns: exit_code
    """
    cmds = parse_command(line)
    if not cmds:
        return 0

    executed, exit_code = execute_builtin(cmds)
    if executed:
        return exit_code

    return execute_pipeline(cmds)


def main_loop():
    """Main shell loop"""
    global last_status

    init_signal_handlers()

    while True:
        try:
            line = input(prompt())
        except EOFError:
            print()
            break

        last_status = run_line(line)

    return last_status
