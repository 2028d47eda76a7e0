"""Library configuration for autolot."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from autolot.exceptions import AutolotConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class AutolotConfig:
    """Dealership inventory configuration.

    Parameters
    ----------
    catalog_path : str
        JSON file holding the persisted vehicle catalog.
    images_dir : str
        Directory where uploaded vehicle images and their index live.
    image_base_url : str
        Public URL prefix for stored images. The image path relative to
        ``images_dir`` is appended to it.
    leads_path : str
        JSON-lines file receiving accepted credit applications and
        contact requests.
    import_endpoint : str or None
        HTTP endpoint of the listing import service. ``None`` disables
        the HTTP import source.
    import_source_url : str
        Dealer inventory page the import service is asked to read.
    import_timeout : float
        Seconds allowed for one import request attempt.
    import_retries : int
        Extra attempts after a failed import request.
    enforce_unique_vin : bool
        Reject adds/edits that would duplicate an existing VIN.
    seed_enabled : bool
        Merge the bundled reference vehicles into the catalog on load.
    """

    catalog_path: str = "dealership_cars.json"
    images_dir: str = "vehicle-images"
    image_base_url: str = "/vehicle-images/"
    leads_path: str = "leads.jsonl"
    import_endpoint: str | None = None
    import_source_url: str = "https://www.freedomchevydallas.com/used-vehicles/"
    import_timeout: float = 30.0
    import_retries: int = 1
    enforce_unique_vin: bool = True
    seed_enabled: bool = True

    def __post_init__(self) -> None:
        if self.import_timeout <= 0:
            raise AutolotConfigError(f"import_timeout must be positive, got {self.import_timeout}")
        if self.import_retries < 0:
            raise AutolotConfigError(f"import_retries must be >= 0, got {self.import_retries}")

    @classmethod
    def from_env(cls, **overrides: Any) -> AutolotConfig:
        """Create configuration from ``AUTOLOT_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "AUTOLOT_CATALOG_PATH": "catalog_path",
            "AUTOLOT_IMAGES_DIR": "images_dir",
            "AUTOLOT_IMAGE_BASE_URL": "image_base_url",
            "AUTOLOT_LEADS_PATH": "leads_path",
            "AUTOLOT_IMPORT_ENDPOINT": "import_endpoint",
            "AUTOLOT_IMPORT_SOURCE_URL": "import_source_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            timeout_env = env.get("AUTOLOT_IMPORT_TIMEOUT")
            if timeout_env is not None and "import_timeout" not in overrides:
                config_kwargs["import_timeout"] = float(timeout_env)

            retries_env = env.get("AUTOLOT_IMPORT_RETRIES")
            if retries_env is not None and "import_retries" not in overrides:
                config_kwargs["import_retries"] = int(retries_env)
        except ValueError as exc:
            raise AutolotConfigError(f"Invalid numeric AUTOLOT_* setting: {exc}") from exc

        if "enforce_unique_vin" not in overrides:
            config_kwargs["enforce_unique_vin"] = _env_bool(env.get("AUTOLOT_ENFORCE_UNIQUE_VIN"), True)

        if "seed_enabled" not in overrides:
            config_kwargs["seed_enabled"] = _env_bool(env.get("AUTOLOT_SEED_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
