import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError

KEYPAIR_PLACEHOLDER = "REPLACE_WITH_PATH_TO_YOUR_CURRENT_AUTHORITY_KEYPAIR.json"
PROGRAM_ID_PLACEHOLDER = "REPLACE_WITH_YOUR_PROGRAM_ID"
NEW_AUTHORITY_PLACEHOLDER = "REPLACE_WITH_THE_NEW_UPGRADE_AUTHORITY_PUBKEY"

DEFAULT_SOLANA_BIN = "solana"


class RpcUrl:
    MAINNET = "https://api.mainnet-beta.solana.com"
    TESTNET = "https://api.testnet.solana.com"
    DEVNET = "https://api.devnet.solana.com"
    LOCALNET = "http://127.0.0.1:8899"

    @classmethod
    def get_network_url(cls, network):
        named = {
            "mainnet": cls.MAINNET,
            "mainnet-beta": cls.MAINNET,
            "testnet": cls.TESTNET,
            "devnet": cls.DEVNET,
            "localnet": cls.LOCALNET,
            "localhost": cls.LOCALNET,
        }
        return named.get(network.strip().lower(), network)


DEFAULT_CLUSTER_URL = RpcUrl.DEVNET


@dataclass(frozen=True)
class AuthorityConfig:
    keypair_path: str
    program_id: str
    new_authority: str
    cluster_url: str = DEFAULT_CLUSTER_URL
    solana_bin: str = DEFAULT_SOLANA_BIN
    timeout: Optional[float] = None

    def placeholder_fields(self):
        placeholders = (
            ("keypair_path", self.keypair_path, KEYPAIR_PLACEHOLDER),
            ("program_id", self.program_id, PROGRAM_ID_PLACEHOLDER),
            ("new_authority", self.new_authority, NEW_AUTHORITY_PLACEHOLDER),
        )
        return [name for name, value, sentinel in placeholders if value == sentinel]

    def validate(self):
        fields = self.placeholder_fields()
        if fields:
            raise ConfigurationError(
                "Default placeholder values are still present for: " + ", ".join(fields),
                fields=fields,
            )
        return self


def default_config_path() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "upgrade-authority" / "config.json"


class ConfigStore:
    """Persisted defaults for the CLI (program id, cluster url, keypair path)."""

    KEYS = ("program_id", "url", "keypair")

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else default_config_path()

    def load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (ValueError, OSError) as e:
            raise ConfigurationError(f"Could not read config file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self.path} must contain a JSON object")
        return {k: v for k, v in data.items() if k in self.KEYS and isinstance(v, str)}

    def get(self, key, default=None):
        return self.load().get(key, default)

    def update(self, **values) -> dict:
        data = self.load()
        for key, value in values.items():
            if key not in self.KEYS:
                raise ConfigurationError(f"Unknown config key: {key}")
            if value is not None:
                data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        return data

    def get_program_id(self):
        return self.get("program_id", PROGRAM_ID_PLACEHOLDER)

    def get_network(self):
        return self.get("url", DEFAULT_CLUSTER_URL)

    def get_keypair_path(self):
        return self.get("keypair", KEYPAIR_PLACEHOLDER)
