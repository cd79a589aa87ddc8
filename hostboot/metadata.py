from __future__ import annotations

import http.client
import urllib.request
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from hostboot.trace.run_log import RunLog


TOKEN_PATH = "/latest/api/token"
REGION_PATH = "/latest/meta-data/placement/region"
INSTANCE_ID_PATH = "/latest/meta-data/instance-id"

TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
TOKEN_HEADER = "X-aws-ec2-metadata-token"

# (method, url, headers, timeout_s) -> body text
Fetch = Callable[[str, str, Dict[str, str], float], str]


def urllib_fetch(method: str, url: str, headers: Dict[str, str], timeout_s: float) -> str:
    req = urllib.request.Request(url=url, method=method, headers=dict(headers))
    with urllib.request.urlopen(req, timeout=timeout_s) as resp:  # noqa: S310
        return resp.read().decode("utf-8", errors="replace").strip()


@dataclass(frozen=True)
class InstanceIdentity:
    region: str
    instance_id: Optional[str]
    region_from_metadata: bool
    token_used: bool


class MetadataResolver:
    """
    Resolve region and instance ID from the instance metadata service.

    Token (IMDSv2) first; if the token request fails, reads fall back to
    anonymous access. No lookup failure is fatal: the region falls back to a
    default and a missing instance ID is reported as None.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        default_region: str,
        token_ttl_seconds: int = 21600,
        timeout_s: float = 2.0,
        fetch: Optional[Fetch] = None,
    ):
        self._endpoint = endpoint.rstrip("/")
        self._default_region = default_region
        self._ttl = int(token_ttl_seconds)
        self._timeout_s = float(timeout_s)
        self._fetch = fetch or urllib_fetch

    def _token(self) -> Optional[str]:
        try:
            token = self._fetch("PUT", self._endpoint + TOKEN_PATH, {TOKEN_TTL_HEADER: str(self._ttl)}, self._timeout_s)
        except (OSError, ValueError, http.client.HTTPException):
            return None
        return token or None

    def _get(self, path: str, token: Optional[str]) -> Optional[str]:
        headers = {TOKEN_HEADER: token} if token else {}
        try:
            value = self._fetch("GET", self._endpoint + path, headers, self._timeout_s)
        except (OSError, ValueError, http.client.HTTPException):
            return None
        return value.strip() or None

    def resolve(self, log: RunLog, *, region: Optional[str] = None, instance_id: Optional[str] = None) -> InstanceIdentity:
        """
        Values passed in are used as-is and never looked up.
        """
        token = self._token()
        if token is None:
            log.warning("Could not obtain metadata session token, falling back to anonymous metadata access")

        detected_region = None
        if region:
            log.info(f"Using AWS region: {region}")
        else:
            detected_region = self._get(REGION_PATH, token)
            if detected_region:
                log.info(f"Detected AWS region: {detected_region}")
            else:
                log.warning(f"Could not retrieve AWS region from metadata, defaulting to {self._default_region}")

        if not instance_id:
            instance_id = self._get(INSTANCE_ID_PATH, token)
            if instance_id:
                log.info(f"Detected instance ID: {instance_id}")
            else:
                log.warning("Could not retrieve instance ID from metadata, agent config placeholder will be left as-is")

        return InstanceIdentity(
            region=region or detected_region or self._default_region,
            instance_id=instance_id,
            region_from_metadata=bool(detected_region),
            token_used=token is not None,
        )
