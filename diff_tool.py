import logging
import shlex
import subprocess

log = logging.getLogger(__name__)


def run_diff(command: str, first: str, second: str) -> str | None:
    """Run the side-by-side diff command on two files; return an error message or None."""
    cannot_start = f"Unable to execute '{command}': the process cannot be started"
    try:
        args = shlex.split(command)
    except ValueError:
        return cannot_start
    if not args:
        return cannot_start
    log.info("running %s", args + [first, second])
    try:
        proc = subprocess.run(args + [first, second])
    except OSError as e:
        log.warning("cannot start %s: %s", args[0], e)
        return cannot_start
    if proc.returncode != 0:
        return f"Command '{command}' finished with status {proc.returncode}"
    return None
