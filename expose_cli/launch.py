"""
Launch plan detection.

Looks at a project directory and decides how to start it on a given port.
First match wins: React (Vite, then Create React App), Node start script,
Bun server file, Rails, Sinatra/Rack, Python app.py, Python main.py
(uvicorn when it is a FastAPI app), and finally the built-in static server.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .platform import find_python
from .state import ServerType

logger = logging.getLogger("expose.launch")


@dataclass(frozen=True)
class LaunchPlan:
    kind: ServerType
    command: str
    args: list[str]
    env: dict[str, str] = field(default_factory=dict)

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]


def _read_package_json(path: Path) -> dict | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("Skipping invalid package.json at %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def _has_dependency(package: dict, name: str) -> bool:
    for section in ("dependencies", "devDependencies"):
        deps = package.get(section)
        if isinstance(deps, dict) and name in deps:
            return True
    return False


def _node_plan(package: dict, port: int) -> LaunchPlan | None:
    if _has_dependency(package, "react"):
        if _has_dependency(package, "vite"):
            return LaunchPlan(
                kind="react",
                command="bun",
                args=["run", "dev", "--host", "0.0.0.0", "--port", str(port)],
            )
        deps = package.get("dependencies")
        if isinstance(deps, dict) and "react-scripts" in deps:
            return LaunchPlan(kind="react", command="bun", args=["run", "start"], env={"PORT": str(port)})

    scripts = package.get("scripts")
    if isinstance(scripts, dict) and scripts.get("start"):
        return LaunchPlan(kind="node", command="bun", args=["run", "start"], env={"PORT": str(port)})
    return None


def static_plan(directory: Path, port: int) -> LaunchPlan:
    return LaunchPlan(
        kind="static",
        command=find_python(),
        args=["-m", "expose_cli.static_server", str(port), str(directory)],
    )


def detect_launch_plan(directory: Path | str, port: int) -> LaunchPlan:
    """Detect the server type in directory and build its start command"""
    cwd = Path(directory).resolve()

    package_json = cwd / "package.json"
    if package_json.exists():
        package = _read_package_json(package_json)
        if package is not None:
            plan = _node_plan(package, port)
            if plan:
                return plan

    for server_file in ("server.ts", "server.js"):
        if (cwd / server_file).exists():
            return LaunchPlan(kind="bun", command="bun", args=["run", server_file], env={"PORT": str(port)})

    if (cwd / "config" / "application.rb").exists() and (cwd / "Gemfile").exists():
        return LaunchPlan(kind="rails", command="rails", args=["server", "-p", str(port), "-b", "0.0.0.0"])

    if (cwd / "config.ru").exists():
        return LaunchPlan(kind="sinatra", command="rackup", args=["-p", str(port), "-o", "0.0.0.0"])

    if (cwd / "app.py").exists():
        return LaunchPlan(kind="python-app", command=find_python(), args=["app.py"], env={"PORT": str(port)})

    main_py = cwd / "main.py"
    if main_py.exists():
        try:
            content = main_py.read_text(encoding="utf-8", errors="replace")
        except OSError:
            content = ""
        if "FastAPI" in content or "fastapi" in content:
            return LaunchPlan(
                kind="python-app",
                command="uvicorn",
                args=["main:app", "--host", "0.0.0.0", "--port", str(port)],
            )
        return LaunchPlan(kind="python-app", command=find_python(), args=["main.py"], env={"PORT": str(port)})

    return static_plan(cwd, port)
