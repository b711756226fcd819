"""
Device description helpers.

Best-effort, informational labels for the host that uploaded a file.
"""

import platform
import socket
from typing import Optional

# Checked in order; the first match wins
_PLATFORM_HINTS = (
    ("Windows", "Windows"),
    ("iPhone", "iOS"),
    ("iPad", "iPadOS"),
    ("Android", "Android"),
    ("CrOS", "ChromeOS"),
    ("Mac OS X", "macOS"),
    ("Macintosh", "macOS"),
    ("Linux", "Linux"),
)


def describe_host() -> str:
    """Describe the machine this process runs on, e.g. ``box (Linux 6.1.0)``."""
    system = platform.system()
    release = platform.release()
    if system == "Darwin":
        os_name = f"macOS {release}"
    elif system == "Windows":
        os_name = f"Windows {release}"
    else:
        os_name = f"Linux {release}"
    return f"{socket.gethostname()} ({os_name})"


def platform_from_user_agent(user_agent: Optional[str]) -> Optional[str]:
    if not user_agent:
        return None
    for needle, label in _PLATFORM_HINTS:
        if needle in user_agent:
            return label
    return None


def describe_client(remote_addr: Optional[str], user_agent: Optional[str]) -> str:
    """
    Describe an uploading client from its address and User-Agent.

    Falls back to the server's own description when the request carries
    neither.
    """
    os_name = platform_from_user_agent(user_agent)
    if remote_addr and os_name:
        return f"{remote_addr} ({os_name})"
    if remote_addr:
        return remote_addr
    if os_name:
        return os_name
    return describe_host()
