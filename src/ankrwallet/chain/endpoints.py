"""
RPC endpoint selection.

The chain is served by a replica set of identical nodes.  Selection probes
the candidates in a fresh random order and takes the first one answering
``GET /net_info`` with HTTP 200, following redirects.  When no candidate
answers, the first of the random order is still returned, flagged
``degraded``; submission errors against it surface normally.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Sequence

import httpx

from ..config import EndpointConfig
from ..errors import ConfigError, EndpointUnavailableError

logger = logging.getLogger(__name__)

PROBE_PATH = "/net_info"


def permute(candidates: Sequence[str], rng: Optional[random.Random] = None) -> list[str]:
    """Return a uniformly random permutation of ``candidates`` as a new list.

    Fisher-Yates over a copy; the input sequence is never touched.
    """
    rng = rng or random.SystemRandom()
    order = list(candidates)
    for i in range(len(order) - 1, 0, -1):
        j = rng.randrange(i + 1)
        order[i], order[j] = order[j], order[i]
    return order


@dataclass(frozen=True)
class EndpointSelection:
    endpoint: str
    port: str
    degraded: bool = False
    failures: tuple[EndpointUnavailableError, ...] = ()

    @property
    def url(self) -> str:
        return f"{self.endpoint.rstrip('/')}:{self.port}"


class EndpointSelector:
    def __init__(
        self,
        config: EndpointConfig,
        transport: Optional[httpx.BaseTransport] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.rng = rng

    def probe(self, client: httpx.Client, endpoint: str) -> None:
        """
        Check one endpoint.

        Raises:
            EndpointUnavailableError: On any transport error or non-200 status
        """
        url = self.config.url_for(endpoint) + PROBE_PATH
        try:
            response = client.get(url)
        except httpx.HTTPError as exc:
            raise EndpointUnavailableError(endpoint, str(exc) or type(exc).__name__) from exc
        if response.status_code != 200:
            raise EndpointUnavailableError(endpoint, f"HTTP {response.status_code}")

    def select(self, candidates: Optional[Sequence[str]] = None) -> EndpointSelection:
        """
        Pick the first live endpoint in a random order.

        Args:
            candidates: Endpoint base URLs (default: the configured set)

        Returns:
            EndpointSelection; ``degraded`` is True when every probe failed

        Raises:
            ConfigError: If there are no candidates at all
        """
        pool = list(candidates) if candidates is not None else list(self.config.candidates)
        if not pool:
            raise ConfigError("No RPC endpoints configured.")

        order = permute(pool, self.rng)
        failures: list[EndpointUnavailableError] = []
        with httpx.Client(
            timeout=self.config.probe_timeout,
            transport=self.transport,
            follow_redirects=True,
        ) as client:
            for endpoint in order:
                try:
                    self.probe(client, endpoint)
                except EndpointUnavailableError as exc:
                    logger.debug("Probe failed: %s", exc)
                    failures.append(exc)
                    continue
                logger.debug("Selected endpoint %s", endpoint)
                return EndpointSelection(
                    endpoint=endpoint,
                    port=self.config.port,
                    failures=tuple(failures),
                )

        logger.warning(
            "All %d endpoints failed their liveness probe; falling back to unverified %s",
            len(order),
            order[0],
        )
        return EndpointSelection(
            endpoint=order[0],
            port=self.config.port,
            degraded=True,
            failures=tuple(failures),
        )
