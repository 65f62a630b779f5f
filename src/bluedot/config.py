"""
Configuration for the bluedot client and view-state engine.
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_API_ROOT = "http://localhost:8000/api/"
DEFAULT_WATERBODY_ID = 2307


@dataclass(frozen=True)
class BluedotConfig:
    """
    Settings shared by the data client, the selection controller and the
    address synchronizer.

    Attributes:
        api_root: Base URL of the waterbody data service.
        base_path: Route prefix the application is mounted under.
        default_waterbody_id: Waterbody shown when none (or an unknown one) is requested.
        timeout: HTTP timeout in seconds.
        max_cloud_coverage: Highest cloud coverage fraction a usable measurement may have.
        dedupe_dates: Collapse measurements sharing a calendar date on ingest.
    """

    api_root: str = DEFAULT_API_ROOT
    base_path: str = "/"
    default_waterbody_id: int = DEFAULT_WATERBODY_ID
    timeout: float = 30.0
    max_cloud_coverage: float = 0.02
    dedupe_dates: bool = True

    def __post_init__(self) -> None:
        if not self.api_root.endswith("/"):
            object.__setattr__(self, "api_root", self.api_root + "/")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if not 0.0 <= self.max_cloud_coverage <= 1.0:
            raise ValueError("max_cloud_coverage must be within [0, 1]")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "BluedotConfig":
        """
        Build a configuration from ``BLUEDOT_*`` environment variables.

        A ``.env`` file is loaded first (without overriding variables that
        are already set). Unset variables keep their defaults.
        """
        from dotenv import load_dotenv

        load_dotenv(dotenv_path)

        return cls(
            api_root=os.getenv("BLUEDOT_API_ROOT", DEFAULT_API_ROOT),
            base_path=os.getenv("BLUEDOT_BASENAME", "/"),
            default_waterbody_id=int(
                os.getenv("BLUEDOT_DEFAULT_WATERBODY_ID", str(DEFAULT_WATERBODY_ID))
            ),
            timeout=float(os.getenv("BLUEDOT_TIMEOUT", "30")),
        )
