import os
import subprocess
import sys
from enum import Enum

import psutil

from pipeshell import config


class BuiltinKind(Enum):
    CD = "cd"
    PWD = "pwd"
    ECHO = "echo"
    KILL = "kill"
    PS = "ps"
    EXIT = "exit"
    QUIT = "quit"


def report(name, message):
    print(f"{name}: {message}", file=sys.stderr)


def builtin_cd(args):
    """Change directory"""
    if not args:
        report("cd", "missing argument")
        return 1
    try:
        os.chdir(args[0])
        return 0
    except OSError as e:
        report("cd", f"{args[0]}: {e.strerror or e}")
        return 1


def builtin_pwd(args):
    """Print working directory"""
    try:
        print(os.getcwd())
        return 0
    except OSError as e:
        report("pwd", e.strerror or e)
        return 1


def builtin_echo(args):
    print(" ".join(args))
    return 0


def builtin_kill(args):
    """Kill process by PID"""
    if not args:
        report("kill", "missing argument")
        return 1
    try:
        pid = int(args[0])
    except ValueError:
        report("kill", "invalid PID")
        return 1
    # 0 and negative values address process groups, not a process
    if pid <= 0:
        report("kill", "process groups not supported")
        return 1

    try:
        os.kill(pid, config.KILL_SIGNAL)
        return 0
    except ProcessLookupError:
        report("kill", f"({pid}) - No such process")
    except PermissionError:
        report("kill", f"({pid}) - Operation not permitted")
    return 1


def show_processes():
    """Print process table with psutil when no ps utility exists"""
    print(f"{'PID':<8} {'Name':<25} {'Status':<12}")
    print("=" * 47)
    for proc in psutil.process_iter(["pid", "name", "status"]):
        try:
            info = proc.info
            print(f"{info['pid']:<8} {(info['name'] or '?')[:24]:<25} {info['status']:<12}")
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue


def builtin_ps(args):
    """
    List processes via the platform utility.
    Output goes straight to the shell's own stdout/stderr.
    """
    sys.stdout.flush()
    try:
        return subprocess.run(config.PS_COMMAND).returncode
    except FileNotFoundError:
        show_processes()
        return 0
    except OSError as e:
        report("ps", e)
        return 1


def builtin_exit(args):
    # Ends the whole shell, not just this line
    sys.stdout.flush()
    sys.exit(0)


BUILTINS = {
    BuiltinKind.CD: builtin_cd,
    BuiltinKind.PWD: builtin_pwd,
    BuiltinKind.ECHO: builtin_echo,
    BuiltinKind.KILL: builtin_kill,
    BuiltinKind.PS: builtin_ps,
    BuiltinKind.EXIT: builtin_exit,
    BuiltinKind.QUIT: builtin_exit,
}


def lookup_builtin(name):
    try:
        return BuiltinKind(name)
    except ValueError:
        return None


def execute_builtin(stages):
    """
    Execute built-in command if the first stage names one.
    A match consumes the whole pipeline: later stages are never run.
    Returns (executed: bool, exit_code: int)
    """
    if not stages:
        return False, 0

    cmd, args = stages[0][0], stages[0][1:]
    kind = lookup_builtin(cmd)
    if kind is None:
        return False, 0

    return True, BUILTINS[kind](args)
