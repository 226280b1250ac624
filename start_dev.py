"""Development launcher: API server with reload plus one thumbnail worker.

Usage:
    python3 start_dev.py [--no-worker]

Press Ctrl+C to stop both. Expects MongoDB and Redis reachable with the
FILES_MANAGER_* settings (defaults: localhost). Run from the repository root.
"""

from __future__ import annotations

import argparse
import os
import signal
import subprocess
import sys
import time
from pathlib import Path
from typing import List, Tuple

ROOT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = ROOT_DIR / "backend"
VENV_PYTHON = ROOT_DIR / (".venv\\Scripts\\python.exe" if os.name == "nt" else ".venv/bin/python")

ProcessInfo = Tuple[str, subprocess.Popen]

CYAN = "\033[36m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"


def log(level: str, msg: str) -> None:
    colors = {"info": CYAN, "start": GREEN, "stop": YELLOW, "error": RED}
    print(f"{colors.get(level, '')}[{level}]{RESET} {msg}")


def resolve_python() -> str:
    if VENV_PYTHON.exists():
        return str(VENV_PYTHON)
    log("info", "No venv found — using current interpreter")
    return sys.executable


def check_dependencies(python: str) -> bool:
    """Verify the runtime stack is importable before spawning anything."""
    result = subprocess.run(
        [python, "-c", "import fastapi, uvicorn, pymongo, redis, PIL, files_manager"],
        capture_output=True,
        text=True,
        cwd=BACKEND_DIR,
    )
    if result.returncode != 0:
        log("error", "Missing dependencies. Run:")
        log("error", f"  cd {ROOT_DIR} && pip install -e '.[dev]'")
        return False
    return True


def start_process(name: str, cmd: List[str]) -> subprocess.Popen:
    log("start", f"{name}: {' '.join(cmd)}")
    if os.name == "nt":
        return subprocess.Popen(cmd, cwd=BACKEND_DIR, creationflags=subprocess.CREATE_NEW_PROCESS_GROUP)
    return subprocess.Popen(cmd, cwd=BACKEND_DIR, start_new_session=True)


def terminate_processes(processes: List[ProcessInfo]) -> None:
    for name, proc in processes:
        if proc.poll() is not None:
            continue
        log("stop", name)
        try:
            if os.name == "nt":
                proc.send_signal(signal.CTRL_BREAK_EVENT)
            else:
                os.killpg(os.getpgid(proc.pid), signal.SIGTERM)
            proc.wait(timeout=10)
        except ProcessLookupError:
            pass
        except subprocess.TimeoutExpired:
            proc.kill()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--no-worker", action="store_true", help="start only the API")
    parser.add_argument("--port", type=int, default=5000)
    args = parser.parse_args()

    python = resolve_python()
    log("info", f"Python: {python}")
    if not check_dependencies(python):
        return 1

    os.environ.setdefault("FILES_MANAGER_DEBUG", "true")
    os.environ.setdefault("FILES_MANAGER_LOG_LEVEL", "INFO")

    processes: List[ProcessInfo] = []
    try:
        api_cmd = [
            python, "-m", "uvicorn", "files_manager.main:app",
            "--reload", "--host", "0.0.0.0", "--port", str(args.port),
        ]
        processes.append(("api", start_process("api", api_cmd)))
        if not args.no_worker:
            processes.append(("worker", start_process("worker", [python, "-m", "files_manager.worker"])))

        log("info", f"  API:     http://localhost:{args.port}/files")
        log("info", f"  Status:  http://localhost:{args.port}/status")
        log("info", "Press Ctrl+C to stop")

        while True:
            for name, proc in processes:
                retcode = proc.poll()
                if retcode is not None:
                    log("info", f"{name} exited with code {retcode}")
                    return retcode or 0
            time.sleep(0.5)
    except KeyboardInterrupt:
        print()
        log("info", "Ctrl+C received, shutting down...")
        return 0
    finally:
        terminate_processes(processes)


if __name__ == "__main__":
    raise SystemExit(main())
