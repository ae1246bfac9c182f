"""
Subprocess helpers.

Runs external tools with captured output and makes sure an interrupted run
doesn't leave the tool's own children (``go build`` spawns compile/link
processes) behind.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Union

import psutil


def terminate_process_tree(pid: int, timeout: float = 3.0) -> int:
    """Terminate a process and all of its descendants.

    Children are terminated before their parents; anything still alive after
    ``timeout`` seconds is killed.

    Args:
        pid: Root process ID
        timeout: Seconds to wait for graceful termination

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return 0

    try:
        processes: List[psutil.Process] = root.children(recursive=True)
    except psutil.NoSuchProcess:
        processes = []
    processes = list(reversed(processes)) + [root]

    signalled: List[psutil.Process] = []
    for proc in processes:
        try:
            proc.terminate()
            signalled.append(proc)
            logging.debug(f"Terminated process {proc.pid}")
        except psutil.NoSuchProcess:
            pass  # Already gone

    _gone, alive = psutil.wait_procs(signalled, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass

    return len(signalled)


def run_captured(
    command: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Union[str, Path]] = None,
) -> subprocess.CompletedProcess:
    """Run a command to completion, capturing stdout and stderr as text.

    Args:
        command: Program and arguments
        env: Full environment for the child (None inherits ours)
        cwd: Working directory for the child

    Returns:
        The completed process; a non-zero return code is not an error here

    Raises:
        OSError: If the program could not be launched
    """
    logging.debug(f"Running: {' '.join(command)}" + (f" (cwd={cwd})" if cwd else ""))
    process = subprocess.Popen(
        list(command),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=dict(env) if env is not None else None,
        cwd=str(cwd) if cwd else None,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    try:
        stdout, stderr = process.communicate()
    except KeyboardInterrupt:
        terminate_process_tree(process.pid)
        raise
    return subprocess.CompletedProcess(list(command), process.returncode, stdout, stderr)
