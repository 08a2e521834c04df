# ruikit/config.py

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .color import Color, string_to_color

logger = logging.getLogger(__name__)


class Config:
    """
    Singleton config loader that supports:
      - an embedded config module (default name: _embedded_config, attribute: CONFIG)
      - a fallback YAML file (config.yaml)

    Usage:
        cfg = Config()  # prefers embedded if available, else loads config.yaml
        host = cfg.get_nested("server.host", "127.0.0.1")
        params = AppParams.from_config(cfg)
        cfg.reload()    # re-read embedded/file

    Parameters:
      config_file: path to YAML config (relative or absolute). Attempts sensible fallbacks.
      prefer_embedded: when True (default) try the embedded module first, otherwise the file first.
      embedded_module_name: module imported when looking for an embedded config.
    """

    _instance: Optional["Config"] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
        return cls._instance

    def __init__(
        self,
        config_file: str = "config.yaml",
        prefer_embedded: bool = True,
        embedded_module_name: str = "_embedded_config",
    ):
        # initialize only once
        if getattr(self, "_initialized", False):
            return

        self._initialized = True
        self.config_file_arg = config_file
        self.prefer_embedded = bool(prefer_embedded)
        self.embedded_module_name = embedded_module_name

        self._config: Dict[str, Any] = {}
        self._source: Optional[str] = None  # 'embedded' or 'file' or None
        self._resolved_config_path: Optional[Path] = self._resolve_config_path(config_file)

        self.reload()

    @classmethod
    def reset(cls) -> None:
        """Drops the singleton so the next `Config()` loads again (used by the CLI and tests)."""
        cls._instance = None

    # ----- public API -----
    def reload(self, prefer_embedded: Optional[bool] = None) -> None:
        prefer = self.prefer_embedded if prefer_embedded is None else bool(prefer_embedded)

        if prefer:
            loaded = self._try_load_embedded() or self._try_load_file()
        else:
            loaded = self._try_load_file() or self._try_load_embedded()

        if not loaded:
            self._source = None
            self._config = {}

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._config)

    def get(self, key: str, default: Any = None) -> Any:
        """Shallow lookup in the top-level config dict."""
        return self._config.get(key, default)

    def get_nested(self, path: str, default: Any = None, sep: str = ".") -> Any:
        """
        Lookup nested keys using dot-path (e.g. "server.port").
        Returns default if any step is missing.
        """
        cur = self._config
        if not path:
            return default
        for part in path.split(sep):
            if not isinstance(cur, dict) or part not in cur:
                return default
            cur = cur[part]
        return cur

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def resolved_config_path(self) -> Optional[Path]:
        return self._resolved_config_path

    # ----- internal helpers -----
    def _resolve_config_path(self, config_file: str) -> Optional[Path]:
        """
        Resolution order: absolute path, project root, this package's folder, cwd.
        """
        candidate = Path(config_file)
        if candidate.is_absolute():
            return candidate.resolve() if candidate.exists() else None

        here = Path(__file__).resolve().parent
        for base in (here.parent, here, Path.cwd()):
            path = (base / config_file).resolve()
            if path.exists():
                return path
        return None

    def _try_load_embedded(self) -> bool:
        try:
            module = importlib.import_module(self.embedded_module_name)
        except ModuleNotFoundError:
            return False
        cfg = getattr(module, "CONFIG", None)
        if not isinstance(cfg, dict):
            logger.warning("%s.CONFIG is not a dict, ignored", self.embedded_module_name)
            return False
        logger.debug("config loaded from embedded module %s", self.embedded_module_name)
        self._config = dict(cfg)
        self._source = "embedded"
        return True

    def _try_load_file(self) -> bool:
        if not self._resolved_config_path:
            return False
        try:
            with self._resolved_config_path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError) as e:
            logger.error("cannot load %s: %s", self._resolved_config_path, e)
            return False
        logger.debug("config loaded from %s", self._resolved_config_path)
        if data is None:
            data = {}
        self._config = data if isinstance(data, dict) else {"__root__": data}
        self._source = "file"
        return True


def get_config(*args, **kwargs) -> Config:
    """
    Returns the singleton Config instance.
    Arguments are forwarded to Config() only on the first call.
    """
    return Config(*args, **kwargs)


# --- Application parameters ---

@dataclass
class AppParams:
    """Start-up parameters of an application, read from the ``app:`` section."""
    title: str = ""
    # browser chrome colour used by mobile browsers; None leaves it unset
    title_color: Optional[Color] = None
    # favicon file name inside the resources directory
    icon: str = ""
    cert_file: str = ""
    key_file: str = ""
    auto_cert_domain: str = ""
    redirect80: bool = False
    no_socket: bool = False
    # seconds before a dropped socket finishes the session; 0 keeps it forever
    socket_auto_close: int = 0
    resources_dir: str = "resources"

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "AppParams":
        cfg = cfg or get_config()
        section = cfg.get("app", {}) or {}
        if not isinstance(section, dict):
            logger.error('"app" config section must be a mapping')
            return cls()

        params = cls()
        known = {f.name for f in fields(cls)}
        for key, value in section.items():
            name = str(key).replace("-", "_")
            if name not in known:
                logger.warning('unknown "app.%s" config key', key)
                continue
            if name == "title_color":
                color = string_to_color(str(value)) if value is not None else None
                if value is not None and color is None:
                    logger.error('invalid "app.title_color" value %r', value)
                value = color
            setattr(params, name, value)

        if params.no_socket:
            logger.error("no_socket is set: the /ws endpoint is disabled and there is no polling fallback")
        if params.auto_cert_domain:
            logger.warning("auto_cert_domain %r is not supported", params.auto_cert_domain)
        return params

    @property
    def tls(self) -> bool:
        return bool(self.cert_file and self.key_file)
