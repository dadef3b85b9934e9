import logging
import subprocess

import psutil

log = logging.getLogger(__name__)

PROCESS_PRIORITIES = ["idle", "below_normal", "normal", "above_normal", "high", "real_time"]


def set_process_priority(process, priority_str):
    p_str = priority_str.lower()

    try:
        if hasattr(process, 'pid') and not isinstance(process, psutil.Process):
            target_process = psutil.Process(process.pid)
        else:
            target_process = process

        if psutil.WINDOWS:
            priority_map = {
                "idle": psutil.IDLE_PRIORITY_CLASS,
                "below_normal": psutil.BELOW_NORMAL_PRIORITY_CLASS,
                "normal": psutil.NORMAL_PRIORITY_CLASS,
                "above_normal": psutil.ABOVE_NORMAL_PRIORITY_CLASS,
                "high": psutil.HIGH_PRIORITY_CLASS,
                "real_time": psutil.REALTIME_PRIORITY_CLASS
            }

            if p_str not in priority_map:
                log.warning(f"Unknown priority level: {priority_str}. Falling back to \"normal\"")
                val = psutil.NORMAL_PRIORITY_CLASS
            else:
                val = priority_map[p_str]

            target_process.nice(val)

        else:
            priority_map = {
                "idle": 19,
                "below_normal": 10,
                "normal": 0,
                "above_normal": -5,
                "high": -15,
                "real_time": -20
            }
            target_nice = priority_map.get(p_str)

            if target_nice is None:
                log.warning(f"Unknown priority level: {priority_str}. Falling back to 'normal' (nice 0)")
                target_nice = 0

            if target_process.nice() == target_nice:
                return

            try:
                target_process.nice(target_nice)
            except psutil.AccessDenied:
                if target_nice < 0:
                    log.warning(f"Sudo/Root required for '{p_str}' priority. Keeping current priority.")
                    return
                raise

        log.debug(f"Set process PID {process.pid} priority to {p_str}")

    except psutil.NoSuchProcess:
        pid = getattr(process, 'pid', 'unknown')
        log.warning(f"Failed to set priority: Process {pid} already terminated")
    except psutil.Error as e:
        pid = getattr(process, 'pid', 'unknown')
        log.error(f"Failed to set priority for PID {pid}: {e}")


def terminate_process_safely(process: subprocess.Popen, timeout: float = 5.0):
    """
    Stop the process and everything it spawned, then reap it.

    Children are collected before the root is signalled, otherwise they would be
    re-parented and lost. SIGTERM goes out first; whatever is still alive after
    ``timeout`` seconds is killed.
    """
    if process is None:
        return

    if process.poll() is None:
        try:
            root_process = psutil.Process(process.pid)
            all_procs = root_process.children(recursive=True)
            all_procs.append(root_process)
        except psutil.NoSuchProcess:
            all_procs = []

        for p in all_procs:
            try:
                p.terminate()
            except psutil.NoSuchProcess:
                pass

        gone, alive = psutil.wait_procs(all_procs, timeout=timeout)

        for p in alive:
            log.warning(f"Process PID {p.pid} ignored SIGTERM. Killing it.")
            try:
                p.kill()
            except psutil.NoSuchProcess:
                pass

        psutil.wait_procs(alive, timeout=2)

    if process.stdout: process.stdout.close()
    if process.stderr: process.stderr.close()
    if process.stdin: process.stdin.close()

    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        log.error(f"Process PID {process.pid} could not be reaped within {timeout}s.")
