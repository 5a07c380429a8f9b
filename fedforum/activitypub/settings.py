from __future__ import annotations

from dataclasses import dataclass

from fedforum.models.server import DEFAULT_PORTS


@dataclass(frozen=True)
class FederationSettings:
    """Local server identity and federation tunables.

    Built once per app from its config and handed to every federation component, so tests can
    run several identities side by side.
    """
    scheme: str
    hostname: str
    port: int | None = None
    page_length: int = 100
    delivery_timeout: float = 10.0
    delivery_queue: bool = False
    delivery_workers: int = 8
    user_agent: str = 'fedforum'
    log_to_db: bool = False

    @classmethod
    def from_config(cls, config) -> FederationSettings:
        server_name = config.get('SERVER_NAME') or 'localhost'
        hostname, _, port = server_name.partition(':')
        return cls(scheme=config.get('HTTP_PROTOCOL', 'https'),
                   hostname=hostname.lower(),
                   port=int(port) if port else None,
                   page_length=max(1, int(config.get('PAGE_LENGTH', 100))),
                   delivery_timeout=float(config.get('DELIVERY_TIMEOUT', 10)),
                   delivery_queue=bool(config.get('DELIVERY_QUEUE', False)),
                   delivery_workers=int(config.get('DELIVERY_WORKERS', 8)),
                   user_agent=config.get('USER_AGENT', 'fedforum'),
                   log_to_db=bool(config.get('LOG_ACTIVITYPUB_TO_DB', False)))

    def effective_port(self) -> int:
        return self.port or DEFAULT_PORTS.get(self.scheme, 443)

    def is_local_address(self, scheme: str, hostname: str, port: int | None) -> bool:
        port = port or DEFAULT_PORTS.get(scheme, 443)
        return scheme == self.scheme and hostname.lower() == self.hostname and port == self.effective_port()

    def is_local(self, server) -> bool:
        return self.is_local_address(server.scheme, server.hostname, server.port)

    def base_url(self) -> str:
        if self.port and self.port != DEFAULT_PORTS.get(self.scheme):
            return f'{self.scheme}://{self.hostname}:{self.port}'
        return f'{self.scheme}://{self.hostname}'
