import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Union

import yaml
from dotenv import load_dotenv

# Load env vars if present
load_dotenv()

HOSTNAME_METHODS = ("auto", "hostnamectl", "file")


# --- DATACLASSES (SCHEMA) ---

@dataclass
class PathSettings:
    """Defines the system files touched by a run."""
    hosts_file: str = "/etc/hosts"
    hostname_file: str = "/etc/hostname"


@dataclass
class HostnameSettings:
    """Defines how the live hostname is applied."""
    # auto: hostnamectl when available, direct file write otherwise
    method: str = "auto"


@dataclass
class LoggingSettings:
    """Defines the persistent file log."""
    file: str = "/var/log/rehost.log"
    level: str = "INFO"


@dataclass
class AppSettings:
    """Root configuration object."""
    paths: PathSettings = field(default_factory=PathSettings)
    hostname: HostnameSettings = field(default_factory=HostnameSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# --- LOADER LOGIC ---

def _pick(schema, values: Dict) -> Dict:
    """Keeps only the keys the dataclass knows about."""
    return {k: v for k, v in values.items() if k in schema.__annotations__}


def load_settings(config_path: Union[str, Path] = "rehost.yaml") -> AppSettings:
    """
    Loads configuration merging: Defaults (Schema) < YAML File (Config) < Environment Vars.
    """

    # 1. Load YAML Config
    file_config = {}
    path = Path(config_path)
    if path.exists():
        try:
            with open(path, 'r') as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            # The logger is not configured yet at this point
            print(f"[Warning] Failed to load {config_path}: {e}")

    # 2. Load Environment Variables (Overrides)
    env_config = {
        "paths": {
            "hosts_file": os.getenv("REHOST_HOSTS_FILE"),
            "hostname_file": os.getenv("REHOST_HOSTNAME_FILE"),
        },
        "hostname": {
            "method": os.getenv("REHOST_HOSTNAME_METHOD"),
        },
        "logging": {
            "file": os.getenv("REHOST_LOG_FILE"),
            "level": os.getenv("REHOST_LOG_LEVEL"),
        },
    }

    # Cleanup: remove unset keys so they do not mask file values
    env_config = {
        section: {k: v for k, v in values.items() if v}
        for section, values in env_config.items()
    }

    # 3. Merge Logic (Priority: Env > File > Defaults)
    paths_final = {**(file_config.get("paths") or {}), **env_config["paths"]}
    hostname_final = {**(file_config.get("hostname") or {}), **env_config["hostname"]}
    logging_final = {**(file_config.get("logging") or {}), **env_config["logging"]}

    hostname_obj = HostnameSettings(**_pick(HostnameSettings, hostname_final))
    hostname_obj.method = str(hostname_obj.method).lower()
    if hostname_obj.method not in HOSTNAME_METHODS:
        raise ValueError(
            f"Invalid Config: hostname.method '{hostname_obj.method}' "
            f"(expected one of {', '.join(HOSTNAME_METHODS)})"
        )

    logging_obj = LoggingSettings(**_pick(LoggingSettings, logging_final))
    logging_obj.level = str(logging_obj.level).upper()

    return AppSettings(
        paths=PathSettings(**_pick(PathSettings, paths_final)),
        hostname=hostname_obj,
        logging=logging_obj,
    )
