import queue
import subprocess
import sys
import threading

from pipeshell import config


class Stage:
    """One command of a pipeline and the process running it."""

    def __init__(self, index, tokens, terminal):
        self.index = index
        self.name = tokens[0]
        self.args = tokens[1:]
        self.terminal = terminal
        self.proc = None

    @property
    def argv(self):
        return [self.name] + self.args

    @property
    def stdin(self):
        # First stage reads the shell's own stdin
        return None if self.index == 0 else subprocess.PIPE

    @property
    def stdout(self):
        # Terminal stage writes to the shell's own stdout
        return None if self.terminal else subprocess.PIPE


def build_stages(cmds):
    """
    Turn parsed token lists into Stage objects.
    Returns: list of Stage, the last one marked terminal
    """
    return [
        Stage(idx, tokens, terminal=(idx == len(cmds) - 1))
        for idx, tokens in enumerate(cmds)
    ]


def run_external(args, stdin=None, stdout=None):
    """
    Spawn an external command.
    Returns: Popen object or None
    """
    try:
        return subprocess.Popen(args, stdin=stdin, stdout=stdout)
    except FileNotFoundError:
        print(f"{config.SHELL_NAME}: command not found: {args[0]}", file=sys.stderr)
    except PermissionError:
        print(f"{config.SHELL_NAME}: permission denied: {args[0]}", file=sys.stderr)
    except OSError as e:
        print(f"{config.SHELL_NAME}: failed to execute '{args[0]}': {e}", file=sys.stderr)
    return None


def relay(source, sink, label):
    """Copy bytes from one stage's stdout into the next stage's stdin until EOF."""
    try:
        while True:
            chunk = source.read1(config.COPY_CHUNK_SIZE)
            if not chunk:
                break
            sink.write(chunk)
            sink.flush()
    except BrokenPipeError:
        # Downstream stopped reading; closing source passes that upstream
        pass
    except OSError as e:
        print(f"{config.SHELL_NAME}: pipe {label}: {e}", file=sys.stderr)
    finally:
        for f in (sink, source):
            try:
                f.close()
            except OSError:
                pass


def start_junction(upstream, downstream):
    """Start the copy thread feeding downstream from upstream."""
    label = f"{upstream.index}->{downstream.index}"
    t = threading.Thread(
        target=relay,
        args=(upstream.proc.stdout, downstream.proc.stdin, label),
        name=f"junction-{label}",
        daemon=True,
    )
    t.start()
    return t


class Spool:
    """
    Junction used when stages are waited on one at a time.
    Drains a stage's stdout into memory as soon as the stage starts, so the
    stage never blocks on a full pipe while its successor does not exist yet.
    """

    def __init__(self, upstream):
        self.source = upstream.proc.stdout
        self.label = f"{upstream.index}->{upstream.index + 1}"
        self.chunks = queue.Queue()
        self.stopped = threading.Event()
        self.writer = None
        self.reader = threading.Thread(
            target=self._drain, name=f"spool-{upstream.index}", daemon=True
        )
        self.reader.start()

    def _drain(self):
        try:
            while not self.stopped.is_set():
                chunk = self.source.read1(config.COPY_CHUNK_SIZE)
                if not chunk:
                    break
                self.chunks.put(chunk)
        except OSError as e:
            print(f"{config.SHELL_NAME}: pipe {self.label}: {e}", file=sys.stderr)
        finally:
            self.chunks.put(None)
            try:
                self.source.close()
            except OSError:
                pass

    def _feed(self, sink):
        try:
            while True:
                chunk = self.chunks.get()
                if chunk is None:
                    break
                sink.write(chunk)
                sink.flush()
        except BrokenPipeError:
            # Downstream stopped reading; the drain closes the source on its next chunk
            self.stopped.set()
        except OSError as e:
            print(f"{config.SHELL_NAME}: pipe {self.label}: {e}", file=sys.stderr)
            self.stopped.set()
        finally:
            try:
                sink.close()
            except OSError:
                pass

    def connect(self, downstream):
        """Start feeding the spooled output into the next stage's stdin."""
        self.writer = threading.Thread(
            target=self._feed,
            args=(downstream.proc.stdin,),
            name=f"junction-{self.label}",
            daemon=True,
        )
        self.writer.start()

    def join(self):
        self.reader.join()
        if self.writer:
            self.writer.join()


def close_handles(stages):
    for stage in stages:
        if not stage.proc:
            continue
        for f in (stage.proc.stdin, stage.proc.stdout):
            if f:
                try:
                    f.close()
                except OSError:
                    pass


def abort_pipeline(stages, junctions):
    """Kill and reap every process already started for this pipeline."""
    for stage in stages:
        if stage.proc and stage.proc.poll() is None:
            try:
                stage.proc.kill()
            except ProcessLookupError:
                pass
    for stage in stages:
        if stage.proc:
            stage.proc.wait()
    for t in junctions:
        t.join()
    close_handles(stages)


def wait_pipeline(stages, junctions):
    """
    Wait for every stage and junction to finish.
    Returns: exit code of the terminal stage
    """
    for stage in stages:
        stage.proc.wait()
    for t in junctions:
        t.join()
    close_handles(stages)
    return stages[-1].proc.returncode


def execute_pipeline(cmds):
    """
    Execute pipeline of commands.
    Returns: exit_code
    """
    stages = build_stages(cmds)
    if not stages:
        return 0

    # Anything printed so far must reach the terminal before the children write
    sys.stdout.flush()

    junctions = []
    for stage in stages:
        stage.proc = run_external(stage.argv, stdin=stage.stdin, stdout=stage.stdout)
        if not stage.proc:
            abort_pipeline(stages, junctions)
            return config.SPAWN_FAILURE_STATUS

        if config.STRICT_STAGE_ORDER:
            spawn_strict(stages, stage, junctions)
        elif stage.index > 0:
            junctions.append(start_junction(stages[stage.index - 1], stage))

    return wait_pipeline(stages, junctions)


def spawn_strict(stages, stage, junctions):
    """
    Wire a freshly spawned stage, then wait for its predecessor.
    junctions holds the Spool of every non-terminal stage, in order.
    """
    if stage.index > 0:
        junctions[-1].connect(stage)
    if not stage.terminal:
        junctions.append(Spool(stage))
    if stage.index > 0:
        stages[stage.index - 1].proc.wait()
