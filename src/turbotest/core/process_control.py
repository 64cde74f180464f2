"""
Process control - platform-specific process-tree termination.

Children are started in their own process group so that a single
signal reaches the tool and every worker it spawned (browsers, bundlers).
The terminator is chosen once at startup via get_terminator().
"""

import os
import signal
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class ProcessTerminator(ABC):
    """Kills a launched process together with its descendants."""

    @abstractmethod
    def spawn_options(self) -> Dict[str, Any]:
        """Extra keyword arguments for process creation."""

    @abstractmethod
    def terminate(self, process: Any) -> None:
        """
        Kill the process tree rooted at ``process``.

        Fire-and-forget: a process that already exited is not an error.
        """


class PosixTerminator(ProcessTerminator):
    """Signals the whole process group with SIGKILL."""

    def spawn_options(self) -> Dict[str, Any]:
        return {"start_new_session": True}

    def terminate(self, process: Any) -> None:
        if process.returncode is not None:
            return

        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            return
        except OSError:
            # Group not owned by us; fall back to the direct child
            try:
                process.kill()
            except (ProcessLookupError, OSError):
                pass


class WindowsTerminator(ProcessTerminator):
    """Kills the process tree with taskkill /t /f."""

    def spawn_options(self) -> Dict[str, Any]:
        return {"creationflags": getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)}

    def terminate(self, process: Any) -> None:
        if process.returncode is not None:
            return

        try:
            subprocess.run(
                ["taskkill", "/pid", str(process.pid), "/t", "/f"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError:
            try:
                process.kill()
            except (ProcessLookupError, OSError):
                pass


def get_terminator(platform: Optional[str] = None) -> ProcessTerminator:
    """
    Select the terminator for the running platform.

    Args:
        platform: Platform name override (default: sys.platform)

    Returns:
        ProcessTerminator implementation
    """
    platform = platform or sys.platform
    if platform.startswith("win"):
        return WindowsTerminator()
    return PosixTerminator()
