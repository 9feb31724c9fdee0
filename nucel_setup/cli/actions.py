"""
GitHub Actions runner integration.

Reads action inputs and post-step state from the environment and writes
outputs, PATH additions and state through the runner's command files
(GITHUB_OUTPUT, GITHUB_PATH, GITHUB_STATE). Outside a runner, values are
only logged.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionsEnvironment:
    """Runner command files and state captured at startup."""

    output_file: Optional[Path] = None
    path_file: Optional[Path] = None
    state_file: Optional[Path] = None
    is_post: bool = False

    @classmethod
    def capture(cls, environ: Optional[Mapping[str, str]] = None) -> "ActionsEnvironment":
        env = os.environ if environ is None else environ

        def optional_path(name: str) -> Optional[Path]:
            value = env.get(name)
            return Path(value) if value else None

        return cls(
            output_file=optional_path("GITHUB_OUTPUT"),
            path_file=optional_path("GITHUB_PATH"),
            state_file=optional_path("GITHUB_STATE"),
            is_post=bool(env.get("STATE_isPost")),
        )

    def set_output(self, name: str, value: str) -> None:
        """Publish a step output."""
        logger.debug(f"Output {name}={value}")
        _append_key_value(self.output_file, name, value)

    def save_state(self, name: str, value: str) -> None:
        """Persist a value for the post step (readable there as STATE_<name>)."""
        _append_key_value(self.state_file, name, value)

    def add_path(self, directory: Path) -> None:
        """Prepend a directory to PATH for later steps and this process."""
        if self.path_file is not None:
            with open(self.path_file, "a", encoding="utf-8") as f:
                f.write(f"{directory}{os.linesep}")
        os.environ["PATH"] = f"{directory}{os.pathsep}{os.environ.get('PATH', '')}"
        logger.info(f"Added to PATH: {directory}")

    @staticmethod
    def set_failed(message: str) -> None:
        """Emit an error annotation for the workflow log."""
        print(f"::error::{_escape_data(message)}", flush=True)


def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Read an action input (INPUT_<NAME>, spaces replaced by underscores).

    Example:
        >>> get_input("install-path", {"INPUT_INSTALL-PATH": "/opt/nucel"})
        '/opt/nucel'
    """
    env = os.environ if environ is None else environ
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return env.get(key, "").strip()


def _append_key_value(file_path: Optional[Path], name: str, value: str) -> None:
    if file_path is None:
        return
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(file_path, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}{os.linesep}{value}{os.linesep}{delimiter}{os.linesep}")


def _escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


__all__ = ["ActionsEnvironment", "get_input"]
