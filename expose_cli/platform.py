"""Platform detection and cross-platform utilities"""

import platform
import shutil
import sys

IS_WINDOWS = platform.system() == "Windows"
IS_MACOS = platform.system() == "Darwin"
IS_LINUX = platform.system() == "Linux"


def find_python() -> str:
    """Python interpreter used for python launch plans, preferring the running one"""
    if sys.executable:
        return sys.executable
    return shutil.which("python3") or shutil.which("python") or "python3"


def install_hint_cloudflared() -> str:
    """Platform specific install instructions for cloudflared"""
    if IS_MACOS:
        return "Install with: brew install cloudflare/cloudflare/cloudflared"
    if IS_WINDOWS:
        return "Install with: winget install --id Cloudflare.cloudflared"
    return (
        "Install from: "
        "https://developers.cloudflare.com/cloudflare-one/connections/connect-networks/downloads/"
    )
