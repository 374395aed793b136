"""Persistent record of deployment handles."""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .constants import REGISTRY_DIR_NAME, REGISTRY_FILE_NAME
from .types import DeploymentHandle

_LOGGER = logging.getLogger(__name__)

_REQUIRED_KEYS = ("address", "transaction_hash")


def get_default_registry_dir() -> Path:
    """Registry directory under the current working directory."""
    return Path.cwd() / REGISTRY_DIR_NAME


def get_registry_path(registry_root: Optional[Union[Path, str]] = None) -> Path:
    """
    Get the registry file path.

    Args:
        registry_root: Custom registry directory (defaults to ./.ethnode-deployments)

    Returns:
        Absolute path to deployments.json
    """
    if registry_root is None:
        registry_root = get_default_registry_dir()
    else:
        registry_root = Path(registry_root).absolute()

    return registry_root / REGISTRY_FILE_NAME


def load_registry(registry_path: Path) -> Dict[str, Dict[str, Any]]:
    """
    Load existing registry or return empty dict.

    Args:
        registry_path: Path to deployments.json file

    Returns:
        Dictionary mapping contract name -> handle data
        Empty dict if file doesn't exist or is corrupted
    """
    try:
        with open(registry_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, UnicodeDecodeError):
        _LOGGER.warning("Ignoring corrupted registry at %s", registry_path)
        return {}

    contracts = data.get("contracts", {}) if isinstance(data, dict) else None
    if not isinstance(contracts, dict):
        _LOGGER.warning("Ignoring registry at %s with unexpected layout", registry_path)
        return {}
    return contracts


def save_registry(contracts: Dict[str, Dict[str, Any]], registry_path: Path) -> None:
    """
    Save registry to disk.

    Creates parent directories if they don't exist.
    """
    registry_path.parent.mkdir(parents=True, exist_ok=True)
    with open(registry_path, "w", encoding="utf-8") as f:
        json.dump({"contracts": contracts}, f, indent=2)


class DeploymentRegistry:
    """Deployment handles keyed by contract name, backed by a JSON file."""

    def __init__(self, registry_path: Optional[Union[Path, str]] = None):
        """
        Args:
            registry_path: Path to deployments.json
                           If None, uses ./.ethnode-deployments/deployments.json
        """
        self.path = Path(registry_path) if registry_path is not None else get_registry_path()
        self._contracts = load_registry(self.path)
        self._lock = threading.Lock()

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._contracts)

    def get(self, contract_name: str) -> Optional[DeploymentHandle]:
        """Handle recorded for a contract, or None if absent or malformed."""
        with self._lock:
            data = self._contracts.get(contract_name)
        if data is None:
            return None
        if not isinstance(data, dict) or any(key not in data for key in _REQUIRED_KEYS):
            _LOGGER.warning(
                "Ignoring malformed registry entry for %s in %s", contract_name, self.path
            )
            return None
        return DeploymentHandle.from_dict(data)

    def record(self, contract_name: str, handle: DeploymentHandle) -> None:
        with self._lock:
            self._contracts[contract_name] = handle.to_dict()

    def save(self) -> Path:
        """Write the registry to disk and return its path."""
        with self._lock:
            save_registry(self._contracts, self.path)
        return self.path
