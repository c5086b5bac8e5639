"""
Client registries, mapping a service name to a factory that builds a client for that service from a configuration.

A registry is injected into the ``SessionProxy``, which makes the set of reachable services an explicit dependency.
"""
import logging
import threading
from functools import partial
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from boto3.session import Session
from botocore.client import BaseClient
from botocore.config import Config

from cfn_handler import config as handler_config
from cfn_handler.constants import MAX_POOL_CONNECTIONS

LOG = logging.getLogger(__name__)

ClientFactory = Callable[[Dict[str, Any]], Any]

# configuration keys handed to boto3 unchanged
BOTO_PASSTHROUGH_PARAMS = ("endpoint_url", "use_ssl", "verify", "config", "api_version")


class ClientRegistry(Mapping[str, ClientFactory]):
    """
    A registry backed by an explicit mapping of service names to client factories. Looking up an unknown service
    raises a ``KeyError``.
    """

    def __init__(self, factories: Optional[Mapping[str, ClientFactory]] = None):
        self._factories: Dict[str, ClientFactory] = dict(factories or {})

    def __getitem__(self, service_name: str) -> ClientFactory:
        return self._factories[service_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)


def to_boto_client_params(options: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Translates a session configuration into keyword arguments for ``boto3.session.Session.client``.

    :param options: configuration with the optional keys ``credentials`` (a ``Credentials`` dict), ``region``, and
        any of ``BOTO_PASSTHROUGH_PARAMS``
    :return: the boto3 client parameters
    """
    params = {key: options[key] for key in BOTO_PASSTHROUGH_PARAMS if options.get(key) is not None}

    if options.get("region"):
        params["region_name"] = options["region"]

    credentials = options.get("credentials")
    if credentials:
        params["aws_access_key_id"] = credentials.get("accessKeyId")
        params["aws_secret_access_key"] = credentials.get("secretAccessKey")
        params["aws_session_token"] = credentials.get("sessionToken")

    return params


class BotoClientRegistry(ClientRegistry):
    """
    Registry exposing every service known to botocore. The service name is not validated on lookup, an unknown
    service fails when the client is constructed (with botocore's ``UnknownServiceError``).
    """

    def __init__(self, session: Session = None, config: Config = None):
        """
        :param session: Session to be used for client creation. Will create a new session if not provided.
            Sessions are not thread safe, client creation is therefore guarded by a lock of this registry.
        :param config: Config used as default for client creation.
        """
        super().__init__()
        self._session: Session = session or Session()
        self._config: Config = config or Config(max_pool_connections=MAX_POOL_CONNECTIONS)
        self._create_client_lock = threading.RLock()

    def __getitem__(self, service_name: str) -> ClientFactory:
        return partial(self.create_client, service_name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._session.get_available_services())

    def __len__(self) -> int:
        return len(self._session.get_available_services())

    def __contains__(self, service_name: object) -> bool:
        return service_name in self._session.get_available_services()

    def create_client(self, service_name: str, options: Mapping[str, Any]) -> BaseClient:
        params = to_boto_client_params(options)

        client_config = self._config
        if params.get("config"):
            client_config = client_config.merge(params["config"])
        if handler_config.DISABLE_BOTO_RETRIES:
            client_config = client_config.merge(Config(retries={"max_attempts": 0}))
        params["config"] = client_config

        with self._create_client_lock:
            return self._session.client(service_name=service_name, **params)
